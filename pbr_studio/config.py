"""Configuration defaults and plugin search path resolution.

The library never reads the process environment on its own. Callers build
the ordered list of plugin search roots once at startup, usually with
:func:`default_plugin_dirs`, and pass it to the plugin loader.

Typical usage example:
    dirs = default_plugin_dirs(cwd=os.getcwd(), home=os.path.expanduser("~"), env=os.environ)
    loader = PluginLoader(dirs)
"""

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .errors import PluginConfigError
from .type_annotations import PathLike

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 70
DEFAULT_DUPLICATE_THRESHOLD = 0.99
DEFAULT_SIMILAR_THRESHOLD = 0.80

# Batch analysis flags anything above this edge difference. The single
# "tileability" validation rule uses its own, stricter constant.
DEFAULT_TILEABILITY_THRESHOLD = 10.0
VALIDATION_TILEABILITY_THRESHOLD = 40.0

DEFAULT_BLEND_WIDTH = 4
DEFAULT_SCRIPT_TIMEOUT = 30.0

PLUGIN_DIR_NAME = ".pbr-studio"
PLUGIN_SUBDIR_NAME = "plugins"
CONFIG_APP_NAME = "pbr-studio"
PLUGINS_ENV_VAR = "PBR_STUDIO_PLUGINS"

_CONFIG_KEYS = ("plugins_dir", "min_score", "script_timeout")


def default_plugin_dirs(
    cwd: Optional[PathLike] = None,
    home: Optional[PathLike] = None,
    env: Optional[Mapping[str, str]] = None,
) -> List[Path]:
    """Build the conventional, ordered list of plugin search roots.

    Order: ``<cwd>/.pbr-studio/plugins``, the per-user config directory
    (``$XDG_CONFIG_HOME`` or ``<home>/.config``) and finally every entry of
    ``$PBR_STUDIO_PLUGINS`` split on ``os.pathsep``.

    Args:
        cwd: Working directory to look in, skipped when None.
        home: User home directory, skipped when None.
        env: Environment mapping, treated as empty when None.

    Returns:
        List of directories. They are not required to exist.
    """
    env = env or {}
    dirs = []

    if cwd is not None:
        dirs.append(Path(cwd) / PLUGIN_DIR_NAME / PLUGIN_SUBDIR_NAME)

    if home is not None:
        config_home = env.get("XDG_CONFIG_HOME") or os.path.join(str(home), ".config")
        dirs.append(Path(config_home) / CONFIG_APP_NAME / PLUGIN_SUBDIR_NAME)

    for entry in env.get(PLUGINS_ENV_VAR, "").split(os.pathsep):
        entry = entry.strip()
        if entry:
            dirs.append(Path(entry))

    return dirs


def load_config_file(path: PathLike) -> Dict[str, Any]:
    """Read a TOML or JSON settings file.

    Only the known keys (``plugins_dir``, ``min_score``, ``script_timeout``)
    are kept; anything else is ignored with a debug message.

    Args:
        path: Path to a ``.toml`` or ``.json`` file.

    Returns:
        Dictionary with the recognised settings.

    Raises:
        PluginConfigError: If the file cannot be parsed.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = tomllib.loads(text)
    except (ValueError, tomllib.TOMLDecodeError) as e:
        raise PluginConfigError("Invalid config file {}: {}".format(path, e)) from e

    if not isinstance(data, dict):
        raise PluginConfigError("Config file {} must contain a table".format(path))

    settings = {}
    for key, value in data.items():
        if key in _CONFIG_KEYS:
            settings[key] = value
        else:
            logger.debug("Ignoring unknown config key %r in %s", key, path)

    if "plugins_dir" in settings:
        settings["plugins_dir"] = Path(settings["plugins_dir"])
    return settings
