"""Type annotations for PBR Studio.

This module defines custom type hints used throughout the package to improve
code readability and IDE support. It centralizes the recurring container
shapes to avoid repetition and keep them consistent.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Sequence, Tuple, Union

from numpy import ndarray

if TYPE_CHECKING:
    from .utils.materials import MaterialSet

Size = Tuple[int, int]

# A 'pixel buffer' is a uint8 numpy array viewed in the shape (height, width, 4)
PixelBuffer = ndarray

RGBAPixel = Tuple[int, int, int, int]

PathLike = Union[str, Path]

# A loaded material paired with the folder it came from
MaterialEntry = Tuple[Path, "MaterialSet"]
MaterialEntries = Sequence[MaterialEntry]

# Perceptual fingerprint: 64 mean-luminance values
Fingerprint = List[float]

# JSON-like payloads exchanged with plugin scripts and written to reports
JsonDict = Dict[str, Any]

# Audit collaborator: receives one event dictionary per recorded action
Recorder = Callable[[JsonDict], None]
