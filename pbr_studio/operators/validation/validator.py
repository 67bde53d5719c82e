"""Material validation and scoring.

A :class:`Validator` owns an ordered list of rules. Checking a material runs
every rule in registration order and concatenates the issues they emit. The
score is a plain penalty sum and does not depend on rule order.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from ...globs import MAX_SCORE, SEVERITY_ALIASES, SEVERITY_PENALTIES, Severity
from ...type_annotations import JsonDict

if TYPE_CHECKING:
    from ...utils.materials import MaterialSet
    from ..plugins.plugin_loader import PluginLoader
    from .rules import Rule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Issue:
    rule_id: str
    severity: str
    message: str

    @property
    def penalty(self) -> int:
        return SEVERITY_PENALTIES[self.severity]

    def to_dict(self) -> JsonDict:
        return {"rule_id": self.rule_id, "severity": self.severity, "message": self.message}


def parse_severity(value: Optional[str]) -> Optional[str]:
    """Parse a severity name or alias, case-insensitive.

    Accepts critical/error, major/warning and minor/info.

    Returns:
        One of the :class:`Severity` constants, or None for unknown values.
    """
    if not isinstance(value, str):
        return None
    return SEVERITY_ALIASES.get(value.strip().lower())


def compute_score(issues: Iterable[Issue]) -> int:
    """Score a list of issues: 100 minus the summed penalties, never below 0."""
    return max(0, MAX_SCORE - sum(issue.penalty for issue in issues))


def check(rules: Sequence["Rule"], material: "MaterialSet") -> List[Issue]:
    """Run rules against a material in order and collect every issue."""
    issues = []
    for rule in rules:
        found = rule.check_many(material)
        if found:
            logger.debug("Rule %s reported %d issue(s)", rule.rule_id, len(found))
        issues.extend(found)
    return issues


class Validator:
    """Ordered collection of validation rules."""

    def __init__(self, rules: Optional[Iterable["Rule"]] = None) -> None:
        self.rules = list(rules) if rules is not None else []

    @classmethod
    def default(cls) -> "Validator":
        """Build a validator holding only the built-in rules."""
        from .rules import builtin_rules

        return cls(builtin_rules())

    @classmethod
    def with_plugins(cls, loader: "PluginLoader") -> "Validator":
        """Build a validator with the built-in rules followed by every plugin rule."""
        validator = cls.default()
        for rule in loader.load_rules():
            validator.add_rule(rule)
        return validator

    def add_rule(self, rule: "Rule") -> None:
        self.rules.append(rule)

    @property
    def rule_ids(self) -> List[str]:
        return [rule.rule_id for rule in self.rules]

    def check(self, material: "MaterialSet") -> List[Issue]:
        return check(self.rules, material)

    def has_issues(self, material: "MaterialSet") -> bool:
        return bool(self.check(material))

    def score(self, material: "MaterialSet") -> int:
        return compute_score(self.check(material))


__all__ = ["Issue", "Severity", "Validator", "check", "compute_score", "parse_severity"]
