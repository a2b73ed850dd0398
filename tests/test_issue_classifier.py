"""
Unit tests for review issue routing.

Tests:
- Rule order and keyword routing per generator
- Severity to priority mapping
- Totality, idempotence and empty reviews
- Actionable filtering, grouping and feedback assembly
"""

import unittest

from creature_refiner.core.issue_classifier import (
    IssueClassifier,
    RoutingRule,
    build_feedback,
    filter_actionable,
    group_by_generator,
    issue_statistics,
    map_severity_to_priority,
    validate_classification,
    _compile,
)
from creature_refiner.models import (
    Issue,
    Review,
    NARRATIVE,
    STATISTICS,
    CITATIONS,
    ART_DIRECTION,
    PRIORITY_LEVELS,
)


def issue(category, description, severity="Major", suggestion="Fix it"):
    return Issue(severity=severity, category=category, description=description, suggestion=suggestion)


class TestRouting(unittest.TestCase):
    """Test generator routing."""

    def setUp(self):
        self.classifier = IssueClassifier()

    def route(self, category, description):
        return self.classifier.determine_target_generator(category, description)

    def test_generic_name_routes_to_narrative(self):
        """Generic name complaints go to the narrative generator."""
        review = Review(overall_score=2.5, status="needs_revision",
                        issues=[issue("Name Distinctiveness", "the name Troll is generic")])
        classified = self.classifier.classify(review)

        self.assertEqual(classified[0].target_generator, NARRATIVE)
        self.assertEqual(classified[0].priority, "high")

    def test_generic_creature_word_in_text(self):
        """Stock creature words in the description route to narrative."""
        self.assertEqual(self.route("Quality", "It reads like any other dragon"), NARRATIVE)

    def test_cultural_routes_to_narrative(self):
        """Cultural and regional complaints route to narrative."""
        self.assertEqual(self.route("Cultural Authenticity", "Feels borrowed"), NARRATIVE)
        self.assertEqual(self.route("Quality", "The region is barely present"), NARRATIVE)

    def test_statistics_keywords(self):
        """Balance, hit point and armour wording routes to statistics."""
        self.assertEqual(self.route("Stat Block Balance", "Too weak"), STATISTICS)
        self.assertEqual(self.route("Consistency", "HP does not match the challenge rating"), STATISTICS)
        self.assertEqual(self.route("Quality", "Armor class is too high"), STATISTICS)

    def test_hit_point_figures_route_to_statistics(self):
        """Hit point figures written like 12hp route to statistics."""
        self.assertEqual(self.route("Quality", "Only 12hp for a CR 5 creature"), STATISTICS)
        self.assertEqual(self.route("Quality", "Raise it to 90 hp"), STATISTICS)
        self.assertNotEqual(self.route("Quality", "The pushpin motif feels out of place"), STATISTICS)

    def test_citation_keywords(self):
        """Source and citation wording routes to citations."""
        self.assertEqual(self.route("Quality", "Add a second citation"), CITATIONS)
        self.assertEqual(self.route("Quality", "The reference link is broken"), CITATIONS)

    def test_art_keywords(self):
        """Visual wording routes to art direction."""
        self.assertEqual(self.route("Quality", "The visual prompt is vague"), ART_DIRECTION)
        self.assertEqual(self.route("Quality", "Artwork lacks a painterly style"), ART_DIRECTION)

    def test_art_keyword_needs_word_boundary(self):
        """Words that merely contain "art" do not route to art direction."""
        self.assertEqual(self.route("Quality", "The heart of the tale is thin"), NARRATIVE)

    def test_first_match_wins(self):
        """An issue matching several rules takes the earliest one."""
        # Mentions both a name and a citation; the name rule comes first
        self.assertEqual(self.route("Quality", "The name lacks a citation"), NARRATIVE)
        # Category matches statistics before the text reaches citations
        self.assertEqual(self.route("Balance", "No source for the numbers"), STATISTICS)

    def test_citation_and_art_rules_ignore_category(self):
        """Citation and art rules look at the text only."""
        self.assertEqual(self.route("Citation", "Something is off"), NARRATIVE)
        self.assertEqual(self.route("Art", "Something is off"), NARRATIVE)

    def test_unrecognised_issue_falls_back(self):
        """Unmatched issues fall back to the narrative generator."""
        self.assertEqual(self.route("Mystery", "Something is off"), NARRATIVE)
        self.assertEqual(self.route(None, None), NARRATIVE)

    def test_custom_rules(self):
        """Caller supplied rules and default generator replace the built-in ones."""
        rules = [RoutingRule(name="all_art", generator=ART_DIRECTION, text_pattern=_compile(r"."))]
        classifier = IssueClassifier(rules=rules, default_generator=CITATIONS)

        self.assertEqual(classifier.determine_target_generator("x", "anything"), ART_DIRECTION)
        self.assertEqual(classifier.determine_target_generator("x", ""), CITATIONS)


class TestClassification(unittest.TestCase):
    """Test classifier properties."""

    def setUp(self):
        self.classifier = IssueClassifier()
        self.review = Review(
            overall_score=3.0,
            status="needs_revision",
            issues=[
                issue("Stat Block Balance", "HP too low", severity="Critical"),
                issue("Quality", "Only one source", severity="Major"),
                issue("Mystery", "Hard to say", severity="Minor"),
            ],
        )

    def test_priority_mapping(self):
        """Severity maps onto rework priority."""
        self.assertEqual(map_severity_to_priority("Critical"), "immediate")
        self.assertEqual(map_severity_to_priority("Major"), "high")
        self.assertEqual(map_severity_to_priority("Minor"), "normal")

    def test_every_issue_is_classified(self):
        """Classification assigns a generator and priority to every issue."""
        classified = self.classifier.classify(self.review)

        self.assertEqual(len(classified), 3)
        for item in classified:
            self.assertTrue(item.target_generator)
            self.assertIn(item.priority, PRIORITY_LEVELS)
        self.assertTrue(validate_classification(classified))

    def test_raw_issues_are_not_valid(self):
        """Unclassified issues fail validation."""
        self.assertFalse(validate_classification(self.review.issues))

    def test_classification_is_idempotent(self):
        """Classifying an already classified review changes nothing."""
        first = self.classifier.classify(self.review)
        second = self.classifier.classify(self.review)
        self.assertEqual(first, second)
        # The review itself is untouched
        self.assertIsNone(self.review.issues[0].target_generator)

    def test_empty_review(self):
        """A review without issues classifies to an empty list."""
        review = Review(overall_score=4.0, status="pass", issues=[])
        self.assertEqual(self.classifier.classify(review), [])


class TestIssueHelpers(unittest.TestCase):
    """Test filtering, grouping and feedback."""

    def setUp(self):
        self.issues = IssueClassifier().classify(Review(
            overall_score=3.0,
            status="needs_revision",
            issues=[
                issue("Quality", "Add a citation", suggestion="Cite the Kojiki"),
                issue("Name Distinctiveness", "Generic name", suggestion="Rename it"),
                issue("Quality", "Needs another reference", suggestion="Cite an academic survey"),
                issue("Quality", "The art is flat", severity="Minor", suggestion="Add contrast"),
            ],
        ))

    def test_filter_actionable(self):
        """Only Critical and Major issues are kept for rework."""
        actionable = filter_actionable(self.issues)
        self.assertEqual(len(actionable), 3)
        self.assertTrue(all(i.severity in ("Critical", "Major") for i in actionable))

    def test_group_by_generator_in_pipeline_order(self):
        """Groups come back in generator pipeline order."""
        groups = group_by_generator(filter_actionable(self.issues))

        self.assertEqual(list(groups.keys()), [NARRATIVE, CITATIONS])
        self.assertEqual(len(groups[CITATIONS]), 2)

    def test_build_feedback(self):
        """Feedback is a bullet list of the issue suggestions."""
        groups = group_by_generator(filter_actionable(self.issues))
        self.assertEqual(
            build_feedback(groups[CITATIONS]),
            "- Cite the Kojiki\n- Cite an academic survey",
        )

    def test_issue_statistics(self):
        """Counts are reported per severity and per generator."""
        stats = issue_statistics(self.issues)

        self.assertEqual(stats["total"], 4)
        self.assertEqual(stats["actionable"], 3)
        self.assertEqual(stats["by_severity"], {"Critical": 0, "Major": 3, "Minor": 1})
        self.assertEqual(stats["by_generator"], {CITATIONS: 2, NARRATIVE: 1, ART_DIRECTION: 1})


if __name__ == '__main__':
    unittest.main()
