"""
Scripted collaborators for exercising the refinement controller without a
completion service.
"""

from typing import Any, Callable, List, Optional

from creature_refiner.agents.narrative import NarrativeResult
from creature_refiner.errors import GenerationFailure, ReviewFailure
from creature_refiner.models import (
    ArtDirection,
    Citation,
    Issue,
    Review,
    NARRATIVE,
    STATISTICS,
    CITATIONS,
    ART_DIRECTION,
    LAYOUT,
)


def make_issue(severity, category, description, suggestion="Fix it"):
    return Issue(severity=severity, category=category, description=description, suggestion=suggestion)


def make_review(score, *issues):
    status = "needs_revision" if any(i.is_actionable for i in issues) else "pass"
    return Review(overall_score=score, status=status, issues=list(issues))


NAME_ISSUE = make_issue("Major", "Name Distinctiveness", "The name Troll is generic", "Pick a distinctive name")
STATS_ISSUE = make_issue("Major", "Stat Block Balance", "HP too low", "Raise hit points")
CITATION_ISSUE = make_issue("Critical", "Consistency", "Only one citation given", "Add a second source")
MINOR_ART_ISSUE = make_issue("Minor", "Quality", "The art style is bland", "Use a regional style")


class FakeGenerator:
    """Records calls and returns `produce(round_index)`, failing on chosen rounds."""

    def __init__(self, name: str, produce: Callable[[int], Any], fail_rounds=()):
        self.name = name
        self.produce = produce
        self.fail_rounds = set(fail_rounds)
        self.calls: List[dict] = []

    def _call(self, round_index: int, **kwargs) -> Any:
        self.calls.append(dict(kwargs, round_index=round_index))
        if round_index in self.fail_rounds:
            raise GenerationFailure(self.name, f"scripted failure in round {round_index}")
        return self.produce(round_index)

    def rounds(self) -> List[int]:
        return [c["round_index"] for c in self.calls]


class FakeNarrative(FakeGenerator):
    def __init__(self, fail_rounds=()):
        super().__init__(
            NARRATIVE,
            lambda r: NarrativeResult(name=f"Kappa r{r}", narrative_text=f"Lore revision {r}"),
            fail_rounds,
        )

    def generate(self, topic, feedback=None, round_index=0):
        return self._call(round_index, topic=topic, feedback=feedback)


class FakeStatistics(FakeGenerator):
    def __init__(self, fail_rounds=()):
        super().__init__(STATISTICS, lambda r: {"round": r, "hit_points": 40 + r}, fail_rounds)

    def generate(self, narrative_text, name=None, topic=None, feedback=None, round_index=0):
        return self._call(round_index, narrative_text=narrative_text, name=name, topic=topic, feedback=feedback)


class FakeCitations(FakeGenerator):
    def __init__(self, fail_rounds=()):
        super().__init__(CITATIONS, lambda r: [Citation(title=f"Source r{r}")], fail_rounds)

    def generate(self, name, topic, narrative_text, feedback=None, round_index=0):
        return self._call(round_index, name=name, topic=topic, narrative_text=narrative_text, feedback=feedback)


class FakeArtDirection(FakeGenerator):
    def __init__(self, fail_rounds=()):
        super().__init__(ART_DIRECTION, lambda r: ArtDirection(visual_prompt=f"Prompt r{r}"), fail_rounds)

    def generate(self, name, topic, narrative_text, feedback=None, round_index=0):
        return self._call(round_index, name=name, topic=topic, narrative_text=narrative_text, feedback=feedback)


class FakeLayout:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0

    def generate(self, artifact):
        self.calls += 1
        if self.fail:
            raise GenerationFailure(LAYOUT, "scripted layout failure")
        return {"title": artifact.name, "columns": []}


class FakeReviewer:
    """Returns the scripted review for each round; exceptions in the script are raised."""

    def __init__(self, script: List[Any]):
        self.script = script
        self.calls: List[int] = []
        self.seen_names: List[str] = []

    def review(self, artifact, round_index=0) -> Review:
        self.calls.append(round_index)
        self.seen_names.append(artifact.name)
        entry = self.script[min(round_index, len(self.script) - 1)]
        if isinstance(entry, Exception):
            raise entry
        return entry


def review_failure(message: str = "scripted review failure") -> ReviewFailure:
    return ReviewFailure(message)


class Collaborators:
    """Bundle of fakes with a helper to build a controller from them."""

    def __init__(self, script, narrative_fail=(), statistics_fail=(), citations_fail=(),
                 art_fail=(), layout_fail: bool = False):
        self.narrative = FakeNarrative(narrative_fail)
        self.statistics = FakeStatistics(statistics_fail)
        self.citations = FakeCitations(citations_fail)
        self.art_direction = FakeArtDirection(art_fail)
        self.layout = FakeLayout(layout_fail)
        self.reviewer = FakeReviewer(script)

    def controller(self, session_logger_factory=None, artifact_store=None, layout: Optional[bool] = True):
        from creature_refiner.refinement_controller import RefinementController
        return RefinementController(
            narrative=self.narrative,
            statistics=self.statistics,
            citations=self.citations,
            art_direction=self.art_direction,
            reviewer=self.reviewer,
            layout=self.layout if layout else None,
            session_logger_factory=session_logger_factory,
            artifact_store=artifact_store,
        )
