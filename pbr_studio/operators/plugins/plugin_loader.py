"""Plugin discovery and manifest loading.

A plugin is a directory holding a ``plugin.json`` or ``plugin.toml`` manifest
(JSON wins when both exist). The loader receives an ordered list of search
roots. For every root it loads each sub-directory's manifest in name order,
then the root's own manifest. Roots that do not exist are skipped.

Typical usage example:
    loader = PluginLoader(default_plugin_dirs(cwd=os.getcwd(), home=Path.home(), env=os.environ))
    validator = Validator.with_plugins(loader)
"""

import json
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from ...config import DEFAULT_SCRIPT_TIMEOUT
from ...errors import PluginConfigError
from ...globs import Severity
from ...type_annotations import PathLike
from ..optimization.presets import TargetResolution
from ..validation.rules import Rule
from ..validation.validator import parse_severity
from .plugin_ops import ScriptCondition, parse_condition

logger = logging.getLogger(__name__)

MANIFEST_JSON = "plugin.json"
MANIFEST_TOML = "plugin.toml"
DEFAULT_RULE_DESCRIPTION = "Custom rule from plugin config"


def _require_str(data: dict, key: str, where: str, default: Optional[str] = None) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise PluginConfigError("{} needs a string {!r}, got {!r}".format(where, key, value))
    return value


def _require_list(data: dict, key: str, where: str) -> list:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise PluginConfigError("{} needs a list {!r}, got {!r}".format(where, key, value))
    return value


@dataclass(frozen=True)
class RuleConfig:
    id: str
    description: str
    severity: str
    condition: Any

    @classmethod
    def from_dict(cls, data: Any, script_timeout: Optional[float] = None) -> "RuleConfig":
        if not isinstance(data, dict):
            raise PluginConfigError("Rule entry must be a table, got {!r}".format(data))
        rule_id = _require_str(data, "id", "Rule")
        where = "Rule {!r}".format(rule_id)
        return cls(
            id=rule_id,
            description=_require_str(data, "description", where, default=""),
            severity=_require_str(data, "severity", where, default=Severity.MAJOR),
            condition=parse_condition(data.get("condition"), script_timeout),
        )


@dataclass(frozen=True)
class PresetConfig:
    id: str
    name: str
    target_resolution: str
    include_lod: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "PresetConfig":
        if not isinstance(data, dict):
            raise PluginConfigError("Preset entry must be a table, got {!r}".format(data))
        preset_id = _require_str(data, "id", "Preset")
        where = "Preset {!r}".format(preset_id)
        include_lod = data.get("include_lod", False)
        if not isinstance(include_lod, bool):
            raise PluginConfigError("{} needs a boolean 'include_lod', got {!r}".format(where, include_lod))
        return cls(
            id=preset_id,
            name=_require_str(data, "name", where),
            target_resolution=_require_str(data, "target_resolution", where),
            include_lod=include_lod,
        )

    @property
    def target(self) -> TargetResolution:
        """Target resolution of the preset; unknown values resolve to 2K."""
        return TargetResolution.parse_lenient(self.target_resolution)

    @property
    def max_dimension(self) -> int:
        return self.target.max_dimension


@dataclass(frozen=True)
class PluginManifest:
    name: str
    version: str
    rules: Tuple[RuleConfig, ...]
    presets: Tuple[PresetConfig, ...]

    @classmethod
    def from_dict(cls, data: Any, script_timeout: Optional[float] = None) -> "PluginManifest":
        if not isinstance(data, dict):
            raise PluginConfigError("Plugin manifest must be a table")
        name = _require_str(data, "name", "Plugin manifest")
        where = "Plugin {!r}".format(name)
        return cls(
            name=name,
            version=_require_str(data, "version", where, default=""),
            rules=tuple(RuleConfig.from_dict(rule, script_timeout) for rule in _require_list(data, "rules", where)),
            presets=tuple(PresetConfig.from_dict(preset) for preset in _require_list(data, "presets", where)),
        )


@dataclass(frozen=True)
class PluginInfo:
    name: str
    version: str
    path: Path
    rule_ids: Tuple[str, ...]
    preset_ids: Tuple[str, ...]


class ConfigRule(Rule):
    """Validation rule described by a plugin manifest."""

    def __init__(self, config: RuleConfig) -> None:
        self.config = config

    @property
    def rule_id(self):
        return self.config.id

    @property
    def description(self):
        return self.config.description or DEFAULT_RULE_DESCRIPTION

    @property
    def severity(self) -> str:
        return parse_severity(self.config.severity) or Severity.MAJOR

    def check_one(self, material):
        issues = self.check_many(material)
        return issues[0] if issues else None

    def check_many(self, material):
        return self.config.condition.evaluate(material, self.rule_id, self.severity)


def read_manifest(directory: PathLike, script_timeout: Optional[float] = None) -> Optional[PluginManifest]:
    """Read the manifest in a directory.

    Returns:
        The manifest, or None when the directory has none.

    Raises:
        PluginConfigError: If the manifest cannot be parsed or is malformed.
        OSError: If the manifest cannot be read.
    """
    directory = Path(directory)
    json_path = directory / MANIFEST_JSON
    toml_path = directory / MANIFEST_TOML

    if json_path.is_file():
        path = json_path
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except ValueError as e:
            raise PluginConfigError("Invalid plugin manifest {}: {}".format(path, e)) from e
    elif toml_path.is_file():
        path = toml_path
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise PluginConfigError("Invalid plugin manifest {}: {}".format(path, e)) from e
    else:
        return None

    try:
        return PluginManifest.from_dict(data, script_timeout)
    except PluginConfigError as e:
        raise PluginConfigError("Invalid plugin manifest {}: {}".format(path, e)) from e


class PluginLoader:
    """Loads plugin manifests from an ordered list of search roots."""

    def __init__(self, plugin_dirs: Optional[Iterable[PathLike]] = None, script_timeout: float = DEFAULT_SCRIPT_TIMEOUT) -> None:
        self.plugin_dirs = [Path(path) for path in plugin_dirs or ()]
        self.script_timeout = script_timeout

    def add_dir(self, path: PathLike) -> "PluginLoader":
        self.plugin_dirs.append(Path(path))
        return self

    def _plugin_locations(self) -> List[Path]:
        locations = []
        for root in self.plugin_dirs:
            if not root.is_dir():
                logger.debug("Skipping missing plugin directory %s", root)
                continue
            locations.extend(sorted(entry for entry in root.iterdir() if entry.is_dir()))
            locations.append(root)
        return locations

    def manifests(self) -> List[Tuple[Path, PluginManifest]]:
        """Load every manifest in discovery order."""
        found = []
        for location in self._plugin_locations():
            manifest = read_manifest(location, self.script_timeout)
            if manifest is not None:
                logger.debug("Loaded plugin %s %s from %s", manifest.name, manifest.version, location)
                found.append((location, manifest))
        return found

    def load(self) -> Tuple[List[ConfigRule], List[PresetConfig]]:
        rules = []
        presets = []
        for _, manifest in self.manifests():
            rules.extend(ConfigRule(config) for config in manifest.rules)
            presets.extend(manifest.presets)
        return rules, presets

    def load_rules(self) -> List[ConfigRule]:
        return self.load()[0]

    def load_presets(self) -> List[PresetConfig]:
        return self.load()[1]

    def find_preset(self, preset_id: str) -> Optional[PresetConfig]:
        for preset in self.load_presets():
            if preset.id == preset_id:
                return preset
        return None

    def list_loaded(self) -> List[PluginInfo]:
        return [
            PluginInfo(
                name=manifest.name,
                version=manifest.version,
                path=location,
                rule_ids=tuple(rule.id for rule in manifest.rules),
                preset_ids=tuple(preset.id for preset in manifest.presets),
            )
            for location, manifest in self.manifests()
        ]


__all__ = [
    "ConfigRule",
    "PluginInfo",
    "PluginLoader",
    "PluginManifest",
    "PresetConfig",
    "RuleConfig",
    "ScriptCondition",
    "read_manifest",
]
