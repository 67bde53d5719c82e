"""Conditions for config-driven plugin rules.

Each condition type of a plugin manifest maps to one class with an
``evaluate(material, rule_id, severity)`` method returning a list of issues.
The ``script`` condition runs an external command that exchanges JSON with
the engine over stdin/stdout:

    engine -> script: {"path": ..., "name": ..., "texture_count": 3,
                       "dimensions": {"width": 1024, "height": 1024},
                       "maps": {"albedo": true, ...},
                       "dimensions_consistent": true}
    script -> engine: {"issues": [{"rule_id": ..., "severity": ..., "message": ...}]}

A script that cannot be started, times out or exits non-zero produces one
minor issue. Output that is not a valid response produces no issues.
"""

import json
import logging
import subprocess
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ...config import DEFAULT_SCRIPT_TIMEOUT
from ...errors import PluginConfigError
from ...globs import Severity
from ...type_annotations import JsonDict
from ...utils.materials import MaterialSet
from ..validation.validation_ops import has_map, non_power_of_two_slots
from ..validation.validator import Issue, parse_severity

logger = logging.getLogger(__name__)


def _require_int(params: Dict[str, Any], key: str, condition_type: str) -> int:
    value = params.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise PluginConfigError(
            "Condition {!r} needs a non-negative integer {!r}, got {!r}".format(condition_type, key, value)
        )
    return value


def _require_str_list(params: Dict[str, Any], key: str, condition_type: str, default=None) -> Tuple[str, ...]:
    value = params.get(key, default)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise PluginConfigError(
            "Condition {!r} needs a list of strings {!r}, got {!r}".format(condition_type, key, value)
        )
    return tuple(value)


@dataclass(frozen=True)
class RequiredMapsCondition:
    type = "required_maps"
    maps: Tuple[str, ...]

    @classmethod
    def from_dict(cls, params):
        return cls(_require_str_list(params, "maps", cls.type))

    def evaluate(self, material: MaterialSet, rule_id: str, severity: str) -> List[Issue]:
        missing = [name for name in self.maps if not has_map(material, name)]
        if not missing:
            return []
        return [Issue(rule_id, severity, "Missing required maps: {}".format(", ".join(missing)))]


@dataclass(frozen=True)
class MaxResolutionCondition:
    type = "max_resolution"
    max_width: int
    max_height: int

    @classmethod
    def from_dict(cls, params):
        return cls(_require_int(params, "max_width", cls.type), _require_int(params, "max_height", cls.type))

    def evaluate(self, material, rule_id, severity):
        dims = material.dimensions()
        if dims is None or (dims[0] <= self.max_width and dims[1] <= self.max_height):
            return []
        return [
            Issue(
                rule_id,
                severity,
                "Resolution {}x{} exceeds max {}x{}".format(dims[0], dims[1], self.max_width, self.max_height),
            )
        ]


@dataclass(frozen=True)
class MinResolutionCondition:
    type = "min_resolution"
    min_width: int
    min_height: int

    @classmethod
    def from_dict(cls, params):
        return cls(_require_int(params, "min_width", cls.type), _require_int(params, "min_height", cls.type))

    def evaluate(self, material, rule_id, severity):
        dims = material.dimensions()
        if dims is None or (dims[0] >= self.min_width and dims[1] >= self.min_height):
            return []
        return [
            Issue(
                rule_id,
                severity,
                "Resolution {}x{} below min {}x{}".format(dims[0], dims[1], self.min_width, self.min_height),
            )
        ]


@dataclass(frozen=True)
class PowerOfTwoCondition:
    type = "power_of_two"

    @classmethod
    def from_dict(cls, params):
        return cls()

    def evaluate(self, material, rule_id, severity):
        offending = non_power_of_two_slots(material)
        if not offending:
            return []
        return [Issue(rule_id, severity, "Non-power-of-two: {}".format(", ".join(offending)))]


@dataclass(frozen=True)
class MaxTextureCountCondition:
    type = "max_texture_count"
    max: int

    @classmethod
    def from_dict(cls, params):
        return cls(_require_int(params, "max", cls.type))

    def evaluate(self, material, rule_id, severity):
        count = material.texture_count()
        if count <= self.max:
            return []
        return [Issue(rule_id, severity, "Texture count {} exceeds max {}".format(count, self.max))]


def script_summary(material: MaterialSet) -> JsonDict:
    """Build the JSON request sent to script plugins.

    ``path`` is an empty string when the material has a name and null otherwise.
    """
    summary = {"path": "" if material.name is not None else None, "name": material.name}
    summary.update(material.summary())
    return summary


def parse_script_response(output: str, rule_id: str) -> List[Issue]:
    """Turn script stdout into issues carrying the configured rule id.

    Anything that is not a ``{"issues": [...]}`` object with complete issue
    entries yields no issues. Unknown severities are treated as major.
    """
    try:
        response = json.loads(output)
    except ValueError:
        return []
    if not isinstance(response, dict):
        return []

    entries = response.get("issues", [])
    if not isinstance(entries, list):
        return []

    issues = []
    for entry in entries:
        if not isinstance(entry, dict):
            return []
        if not all(isinstance(entry.get(key), str) for key in ("rule_id", "severity", "message")):
            return []
        severity = parse_severity(entry["severity"]) or Severity.MAJOR
        issues.append(Issue(rule_id, severity, entry["message"]))
    return issues


@dataclass(frozen=True)
class ScriptCondition:
    type = "script"
    command: str
    args: Tuple[str, ...] = ()
    timeout: float = field(default=DEFAULT_SCRIPT_TIMEOUT, compare=False)

    @classmethod
    def from_dict(cls, params, timeout: Optional[float] = None):
        command = params.get("command")
        if not isinstance(command, str) or not command:
            raise PluginConfigError("Condition 'script' needs a non-empty 'command', got {!r}".format(command))
        args = _require_str_list(params, "args", cls.type, default=[])
        return cls(command, args, DEFAULT_SCRIPT_TIMEOUT if timeout is None else timeout)

    def run(self, material: MaterialSet, rule_id: str) -> List[Issue]:
        """Run the script once and return every issue it reports.

        Never raises for script failures; they become one minor issue.
        """
        request = json.dumps(script_summary(material))
        try:
            completed = subprocess.run(
                [self.command] + list(self.args),
                input=request.encode("utf-8"),
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Plugin script %s timed out after %s s", self.command, self.timeout)
            return [
                Issue(
                    rule_id,
                    Severity.MINOR,
                    "Plugin script {} failed: timed out after {} s".format(self.command, self.timeout),
                )
            ]
        except OSError as e:
            logger.warning("Plugin script %s failed to run: %s", self.command, e)
            return [Issue(rule_id, Severity.MINOR, "Plugin script {} failed to run: {}".format(self.command, e))]

        if completed.returncode != 0:
            logger.warning("Plugin script %s exited with %d", self.command, completed.returncode)
            return [
                Issue(
                    rule_id,
                    Severity.MINOR,
                    "Plugin script {} failed (exit {})".format(self.command, completed.returncode),
                )
            ]

        output = completed.stdout.decode("utf-8", errors="replace")
        issues = parse_script_response(output, rule_id)
        logger.debug("Plugin script %s reported %d issue(s)", self.command, len(issues))
        return issues

    def evaluate(self, material, rule_id, severity):
        return self.run(material, rule_id)


CONDITION_TYPES = {
    condition.type: condition
    for condition in (
        RequiredMapsCondition,
        MaxResolutionCondition,
        MinResolutionCondition,
        PowerOfTwoCondition,
        MaxTextureCountCondition,
        ScriptCondition,
    )
}


def parse_condition(data: Any, script_timeout: Optional[float] = None):
    """Build a condition object from its manifest table.

    Raises:
        PluginConfigError: For a missing or unknown ``type`` or bad parameters.
    """
    if not isinstance(data, dict):
        raise PluginConfigError("Rule condition must be a table, got {!r}".format(data))
    condition_type = data.get("type")
    condition_class = CONDITION_TYPES.get(condition_type)
    if condition_class is None:
        raise PluginConfigError(
            "Unknown condition type {!r}. Use one of: {}".format(condition_type, ", ".join(CONDITION_TYPES))
        )
    if condition_class is ScriptCondition:
        return ScriptCondition.from_dict(data, script_timeout)
    return condition_class.from_dict(data)
