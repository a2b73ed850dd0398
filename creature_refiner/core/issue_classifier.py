"""
Issue Classifier for routing review issues to content generators.

Each raw review issue is annotated with:
- target_generator: Which generator should rework the affected component
- priority: Routing priority derived from severity (immediate, high, normal)

Routing is an ordered table of rules evaluated first-match-wins. An issue that
matches no rule falls back to the narrative generator; classification never
raises.
"""

import re
import logging
from dataclasses import dataclass, replace
from typing import List, Dict, Optional, Pattern, Any

from creature_refiner.models import (
    Issue,
    Review,
    NARRATIVE,
    STATISTICS,
    CITATIONS,
    ART_DIRECTION,
    REWORK_GENERATORS,
    SEVERITY_LEVELS,
    SEVERITY_TO_PRIORITY,
    PRIORITY_LEVELS,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoutingRule:
    """A single routing rule.

    Attributes:
        name: Rule identifier used in debug logs
        generator: Generator the rule routes to
        text_pattern: Pattern searched in the issue description
        category_pattern: Pattern searched in the issue category (None = text only)
    """

    name: str
    generator: str
    text_pattern: Pattern
    category_pattern: Optional[Pattern] = None

    def matches(self, category: str, text: str) -> bool:
        if self.category_pattern is not None and self.category_pattern.search(category):
            return True
        return bool(self.text_pattern.search(text))


def _compile(pattern: str) -> Pattern:
    return re.compile(pattern, re.IGNORECASE)


# Generic creature-type words that signal an undistinctive name
GENERIC_CREATURE_WORDS = ["troll", "dragon", "spirit"]

_GENERIC_WORDS = "|".join(GENERIC_CREATURE_WORDS)

ROUTING_RULES: List[RoutingRule] = [
    RoutingRule(
        name="name_distinctiveness",
        generator=NARRATIVE,
        category_pattern=_compile(r"name|distinctiveness"),
        text_pattern=_compile(rf"name|distinctiveness|\b(?:{_GENERIC_WORDS})s?\b"),
    ),
    RoutingRule(
        name="cultural_authenticity",
        generator=NARRATIVE,
        category_pattern=_compile(r"cultural|authenticity|region"),
        text_pattern=_compile(r"cultural|authenticity|region"),
    ),
    RoutingRule(
        name="statistics_balance",
        generator=STATISTICS,
        category_pattern=_compile(r"balance|\bstat"),
        text_pattern=_compile(r"balance|\bstat(?:s|istics?)?\b|stat ?block|challenge|\b\d*hp\b|armou?r"),
    ),
    RoutingRule(
        name="citations",
        generator=CITATIONS,
        text_pattern=_compile(r"citation|source|reference"),
    ),
    RoutingRule(
        name="art_direction",
        generator=ART_DIRECTION,
        text_pattern=_compile(r"\bart(?:s|work|istic)?\b|style|prompt|visual"),
    ),
]

DEFAULT_GENERATOR = NARRATIVE


def map_severity_to_priority(severity: str) -> str:
    """Map issue severity to a routing priority (unknown severities are 'normal')."""
    return SEVERITY_TO_PRIORITY.get(severity, "normal")


class IssueClassifier:
    """Annotates review issues with a target generator and a priority.

    `classify` is pure and deterministic: the same review always yields the
    same routing.
    """

    def __init__(
        self,
        rules: Optional[List[RoutingRule]] = None,
        default_generator: str = DEFAULT_GENERATOR,
    ):
        self.rules = list(rules) if rules is not None else list(ROUTING_RULES)
        self.default_generator = default_generator

    def classify(self, review: Review) -> List[Issue]:
        """Classify every issue of a review.

        Args:
            review: Review produced by the reviewer

        Returns:
            New list of classified Issue objects (empty for an empty review)
        """
        return [self.classify_issue(issue) for issue in review.issues]

    def classify_issue(self, issue: Issue) -> Issue:
        generator = self.determine_target_generator(issue.category, issue.description)
        return replace(
            issue,
            target_generator=generator,
            priority=map_severity_to_priority(issue.severity),
        )

    def determine_target_generator(self, category: Optional[str], text: Optional[str]) -> str:
        """Determine which generator should handle an issue.

        Args:
            category: Issue category (free text)
            text: Issue description

        Returns:
            Generator name of the first matching rule, or the default generator
        """
        category = category or ""
        text = text or ""
        for rule in self.rules:
            if rule.matches(category, text):
                logger.debug(f"Issue routed by rule '{rule.name}' -> {rule.generator}")
                return rule.generator
        logger.debug(f"No routing rule matched '{category}'; defaulting to {self.default_generator}")
        return self.default_generator


def filter_actionable(issues: List[Issue]) -> List[Issue]:
    """Return only Critical and Major issues, preserving order."""
    return [issue for issue in issues if issue.is_actionable]


def group_by_generator(issues: List[Issue]) -> Dict[str, List[Issue]]:
    """Group classified issues by target generator in pipeline order."""
    groups: Dict[str, List[Issue]] = {}
    for generator in REWORK_GENERATORS:
        matching = [i for i in issues if i.target_generator == generator]
        if matching:
            groups[generator] = matching
    # Generators outside the rework set (custom rules) keep first-seen order
    for issue in issues:
        if issue.target_generator and issue.target_generator not in groups:
            groups[issue.target_generator] = [
                i for i in issues if i.target_generator == issue.target_generator
            ]
    return groups


def build_feedback(issues: List[Issue]) -> str:
    """Concatenate issue suggestions into one feedback string."""
    return "\n".join(f"- {issue.suggestion}" for issue in issues)


def validate_classification(issues: List[Issue]) -> bool:
    """Check that every issue has been fully classified."""
    return all(
        issue.target_generator
        and issue.severity in SEVERITY_LEVELS
        and issue.category
        and issue.priority in PRIORITY_LEVELS
        for issue in issues
    )


def issue_statistics(issues: List[Issue]) -> Dict[str, Any]:
    """Count issues by severity and by target generator."""
    stats = {
        "total": len(issues),
        "actionable": 0,
        "by_severity": {level: 0 for level in SEVERITY_LEVELS},
        "by_generator": {},
    }

    for issue in issues:
        if issue.is_actionable:
            stats["actionable"] += 1
        if issue.severity in stats["by_severity"]:
            stats["by_severity"][issue.severity] += 1
        generator = issue.target_generator or "unclassified"
        stats["by_generator"][generator] = stats["by_generator"].get(generator, 0) + 1

    return stats
