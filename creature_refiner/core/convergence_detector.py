"""
Convergence Detector for the refinement loop.

This module decides when refinement should stop and keeps the best artifact
seen so far. Termination criteria, checked after every review:
- Target met: score >= target score
- No improvement: score did not rise by more than `min_improvement`
- No actionable issues: only Minor issues remain, nothing to rework
- Rounds exhausted: the last allowed refinement round has run
"""

from dataclasses import dataclass
from typing import List, Dict, Any, Tuple, Optional
import logging
import math

from creature_refiner.models import (
    Artifact,
    Issue,
    SUCCESS,
    MAX_ITERATIONS_REACHED,
    NO_IMPROVEMENT,
)


@dataclass(frozen=True)
class TerminationDecision:
    """Result of a termination check.

    Attributes:
        terminate: Whether the loop must stop now
        status: Final session status when terminating, else None
        reason: Human-readable explanation
    """

    terminate: bool
    status: Optional[str]
    reason: str


class ConvergenceDetector:
    """Termination policy for refinement runs.

    Every run stops after at most `max_iterations` refinement rounds, i.e. at
    most `max_iterations + 1` reviews including the initial pass.
    """

    def __init__(
        self,
        target_score: float,
        max_iterations: int,
        thresholds: Optional[Dict[str, Any]] = None,
    ):
        """Initialize convergence detector.

        Args:
            target_score: Score at or above which the run succeeds
            max_iterations: Number of refinement rounds allowed
            thresholds: Optional custom thresholds. Defaults:
                - min_improvement: 0.0 (any rise counts as improvement)
        """
        self.logger = logging.getLogger(__name__)
        self.target_score = target_score
        self.max_iterations = max_iterations

        self.thresholds = {
            'min_improvement': 0.0,
        }

        if thresholds:
            self.thresholds.update(thresholds)

    def is_target_met(self, score: float) -> bool:
        return score >= self.target_score

    def is_improvement(self, score_before: float, score_after: float) -> bool:
        return (score_after - score_before) > self.thresholds['min_improvement']

    def round_succeeded(self, score_before: float, score_after: float) -> bool:
        """A round succeeds when the score improved or the target was met."""
        return self.is_improvement(score_before, score_after) or self.is_target_met(score_after)

    def check_initial(self, score: float) -> TerminationDecision:
        """Evaluate the review of the initial (zero-th) pass."""
        if self.is_target_met(score):
            reason = f"Initial score {score:.2f} >= target {self.target_score:.2f}"
            self.logger.info(f"✅ Convergence detected: {reason}")
            return TerminationDecision(True, SUCCESS, reason)

        if self.max_iterations == 0:
            reason = "No refinement rounds allowed"
            return TerminationDecision(True, MAX_ITERATIONS_REACHED, reason)

        return TerminationDecision(
            False, None,
            f"Initial score {score:.2f} < target {self.target_score:.2f}"
        )

    def check_no_actionable(self, score: float) -> TerminationDecision:
        """Evaluate a round whose latest review holds no Critical/Major issues."""
        if self.is_target_met(score):
            return TerminationDecision(True, SUCCESS, "No actionable issues and target met")
        reason = (f"No actionable issues remain at score {score:.2f} "
                  f"(target {self.target_score:.2f})")
        self.logger.info(reason)
        return TerminationDecision(True, MAX_ITERATIONS_REACHED, reason)

    def check_round(
        self,
        iteration: int,
        score_before: float,
        score_after: float,
    ) -> TerminationDecision:
        """Evaluate the review produced by refinement round `iteration`.

        Args:
            iteration: Round number (1..max_iterations)
            score_before: Previous round's score
            score_after: This round's score

        Returns:
            TerminationDecision
        """
        if self.is_target_met(score_after):
            reason = f"Score {score_after:.2f} >= target {self.target_score:.2f}"
            self.logger.info(f"✅ Convergence detected: {reason}")
            return TerminationDecision(True, SUCCESS, reason)

        if not self.is_improvement(score_before, score_after):
            reason = (f"No improvement in round {iteration}: "
                      f"{score_before:.2f} -> {score_after:.2f}")
            self.logger.info(f"Stopping: {reason}")
            return TerminationDecision(True, NO_IMPROVEMENT, reason)

        if iteration >= self.max_iterations:
            reason = f"Reached max iterations ({self.max_iterations})"
            self.logger.info(f"Stopping: {reason}")
            return TerminationDecision(True, MAX_ITERATIONS_REACHED, reason)

        return TerminationDecision(
            False, None,
            f"Not converged: score {score_after:.2f} < target {self.target_score:.2f}"
        )


class BestArtifactTracker:
    """Retains the best-scoring artifact snapshot seen during a run.

    Offers are accepted only when they are finite and strictly beat the current best, so the
    accepted lineage of scores is non-decreasing.
    """

    def __init__(self):
        self.artifact: Optional[Artifact] = None
        self.score: Optional[float] = None
        self.iteration: Optional[int] = None
        self.issues: List[Issue] = []
        self.lineage: List[Tuple[int, float]] = []

    def offer(
        self,
        artifact: Artifact,
        score: float,
        iteration: int,
        issues: List[Issue],
    ) -> bool:
        """Record the artifact if it beats the current best.

        Returns:
            True if the artifact became the new best
        """
        if not math.isfinite(score):
            return False
        if self.score is not None and score <= self.score:
            return False

        self.artifact = artifact.snapshot()
        self.score = score
        self.iteration = iteration
        self.issues = list(issues)
        self.lineage.append((iteration, score))
        return True
