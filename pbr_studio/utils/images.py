"""Image file handling for PBR Studio.

This module loads texture files into :class:`TextureMap` objects with Pillow,
detects which material slot a file belongs to from its name, and writes
textures back to disk.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..errors import ExportError, ImageDecodeError
from ..globs import EXPORT_EXTENSIONS, IMAGE_EXTENSIONS, SLOT_KEYWORDS
from ..type_annotations import PathLike
from .pixel_buffer import buffer_to_image, image_to_buffer
from .textures import TextureMap

logger = logging.getLogger(__name__)


def supported_extensions() -> Tuple[str, ...]:
    """Get the image extensions the installed Pillow build can decode.

    Formats without a registered Pillow plugin (OpenEXR in a stock install)
    are left out, so folders are never scanned for files that cannot be read.

    Returns:
        Lowercase extensions including the leading dot.
    """
    registered = Image.registered_extensions()
    return tuple(ext for ext in IMAGE_EXTENSIONS if ext in registered)


def is_image_file(path: PathLike) -> bool:
    path = Path(path)
    return path.is_file() and path.suffix.lower() in supported_extensions()


def detect_slot_from_path(path: PathLike) -> Optional[str]:
    """Detect a texture slot from a file name.

    The lowercase file stem is matched against the keywords of every slot in
    detection order, and the first slot with a keyword contained in the stem
    wins. ``"emissive"`` may be returned even though it is not a material slot.

    Args:
        path: Texture file path.

    Returns:
        Slot name or None if no keyword matches.
    """
    stem = Path(path).stem.lower()
    for slot, keywords in SLOT_KEYWORDS.items():
        if any(keyword in stem for keyword in keywords):
            return slot
    return None


def load_image(path: PathLike) -> TextureMap:
    """Load an image file as an RGBA8 texture.

    Args:
        path: Image file path.

    Returns:
        Texture holding the decoded pixels and the source path.

    Raises:
        OSError: If the file cannot be read.
        ImageDecodeError: If Pillow cannot decode the file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError("No such image file: {}".format(path))

    with path.open("rb") as fp:
        try:
            with Image.open(fp) as img:
                buffer = image_to_buffer(img)
        except UnidentifiedImageError as e:
            raise ImageDecodeError(path, e) from e
        except (OSError, ValueError, SyntaxError) as e:
            # Pillow reports truncated or corrupt data with these
            raise ImageDecodeError(path, e) from e

    logger.debug("Loaded %s (%dx%d)", path, buffer.shape[1], buffer.shape[0])
    return TextureMap(buffer, path)


def save_texture(texture: TextureMap, path: PathLike) -> Path:
    """Write a texture to disk, choosing the format from the file extension.

    JPEG has no alpha channel, so the alpha is dropped for ``.jpg``/``.jpeg``.

    Args:
        texture: Texture to write.
        path: Output path ending in .png, .jpg, .jpeg or .tga.

    Returns:
        The written path.

    Raises:
        ExportError: If the extension is not a supported output format.
        OSError: If the file cannot be written.
    """
    path = Path(path)
    ext = path.suffix.lower()
    if ext not in EXPORT_EXTENSIONS:
        raise ExportError(
            "Unsupported output format {!r} for {}. Use PNG, JPG or TGA.".format(ext or "<none>", path)
        )

    img = buffer_to_image(texture.pixels)
    if ext in (".jpg", ".jpeg"):
        img = img.convert("RGB")
    img.save(path)
    return path
