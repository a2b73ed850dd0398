"""
Refinement Controller for iterative creature profile generation.

This is the control loop that:
- Generates the initial artifact (narrative first, then statistics, citations
  and art direction from the narrative)
- Reviews it and, while not converged, routes review issues to generators
- Merges regenerated components back and re-reviews
- Keeps the best-scoring artifact and records every round in the session log
"""

import math
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

from creature_refiner.models import (
    Artifact,
    AgentAction,
    Issue,
    IterationRecord,
    RefinementConfig,
    RefinementResult,
    Review,
    SessionMeta,
    SessionSummary,
    NARRATIVE,
    STATISTICS,
    CITATIONS,
    ART_DIRECTION,
    SUCCESS,
    ERROR,
)
from creature_refiner.errors import GenerationFailure, ReviewFailure
from creature_refiner.core.issue_classifier import (
    IssueClassifier,
    build_feedback,
    filter_actionable,
    group_by_generator,
    issue_statistics,
)
from creature_refiner.core.convergence_detector import (
    BestArtifactTracker,
    ConvergenceDetector,
    TerminationDecision,
)
from creature_refiner.core.refinement_logger import RefinementLogger
from creature_refiner.core.artifact_store import ArtifactStore


# (result, exception, duration_ms) for one generator call
CallOutcome = Tuple[Any, Optional[Exception], int]


class RefinementController:
    """Runs the generate -> review -> rework loop for one topic at a time.

    Workflow:
    1. _generate_initial(): Narrative, then the three dependent components
    2. _review(): Score the artifact (round 0)
    3. Loop: classify latest review -> rework actionable components -> re-review
    4. Terminate via ConvergenceDetector; finalise layout, persistence, session

    Each call to refine() owns its own artifact and session, so independent
    runs never share mutable state.
    """

    def __init__(
        self,
        narrative,
        statistics,
        citations,
        art_direction,
        reviewer,
        layout=None,
        classifier: Optional[IssueClassifier] = None,
        session_logger_factory: Optional[Callable[[], RefinementLogger]] = None,
        artifact_store: Optional[ArtifactStore] = None,
    ):
        """Initialize the controller.

        Args:
            narrative: Narrative generator (generate(topic, feedback, round_index))
            statistics: Statistics generator
            citations: Citation generator
            art_direction: Art direction generator
            reviewer: Reviewer (review(artifact, round_index))
            layout: Optional layout generator run once after refinement
            classifier: Issue classifier (default routing rules if omitted)
            session_logger_factory: Builds a durable session log per run, used
                when persistence is enabled
            artifact_store: Store for the final artifact when persistence is enabled
        """
        self.narrative = narrative
        self.statistics = statistics
        self.citations = citations
        self.art_direction = art_direction
        self.reviewer = reviewer
        self.layout = layout
        self.classifier = classifier or IssueClassifier()
        self.session_logger_factory = session_logger_factory
        self.artifact_store = artifact_store

        self.logger = logging.getLogger(__name__)

    def refine(self, topic: str, config: Optional[RefinementConfig] = None) -> RefinementResult:
        """Run a complete refinement for one topic.

        Args:
            topic: Cultural origin tag, e.g. "Japan"
            config: Run configuration (defaults if omitted)

        Returns:
            RefinementResult holding the best artifact found

        Raises:
            GenerationFailure: If the initial pass failed
            ReviewFailure: If any review failed
        """
        config = config or RefinementConfig()
        detector = ConvergenceDetector(
            config.target_score,
            config.max_iterations,
            {'min_improvement': config.min_improvement},
        )
        session_log = self._select_session_log(config)

        self.logger.info(f"🚀 Starting refinement for '{topic}'")
        self.logger.info(
            f"Target score: {config.target_score}, max iterations: {config.max_iterations}"
        )

        session_id = None
        if session_log is not None:
            session_id = session_log.start_session(SessionMeta(
                session_name=f"Refinement Pipeline - {topic}",
                topic=topic,
                target_score=config.target_score,
                max_iterations=config.max_iterations,
            ))

        history: List[IterationRecord] = []
        improvements: List[str] = []
        best = BestArtifactTracker()

        try:
            round_start = time.monotonic()
            artifact = self._generate_initial(topic, config)
            self.logger.info(f"📝 Initial creature: {artifact.name}")

            review = self._review(artifact, 0)
            issues = self.classifier.classify(review)
            record = IterationRecord(
                iteration_number=0,
                score_before=0.0,
                score_after=review.overall_score,
                issues=issues,
                improvements_summary=[f"Generated initial creature: {artifact.name}"],
                duration_ms=self._elapsed_ms(round_start),
                success=detector.round_succeeded(0.0, review.overall_score),
            )
            self._record(session_log, history, record)
            best.offer(artifact, review.overall_score, 0, issues)

            decision = detector.check_initial(review.overall_score)
            previous_score = review.overall_score
            iteration = 0

            while not decision.terminate:
                actionable = filter_actionable(issues)
                if not actionable:
                    decision = detector.check_no_actionable(previous_score)
                    break

                iteration += 1
                round_start = time.monotonic()
                self.logger.info(f"\n🔄 Starting Iteration {iteration}/{config.max_iterations}")
                self._log_issue_summary(issues)

                actions, round_improvements = self._apply_rework(
                    artifact, actionable, iteration, config
                )
                improvements.extend(round_improvements)

                review = self._review(artifact, iteration)
                issues = self.classifier.classify(review)
                record = IterationRecord(
                    iteration_number=iteration,
                    score_before=previous_score,
                    score_after=review.overall_score,
                    issues=issues,
                    actions_taken=actions,
                    improvements_summary=round_improvements,
                    duration_ms=self._elapsed_ms(round_start),
                    success=detector.round_succeeded(previous_score, review.overall_score),
                )
                self._record(session_log, history, record)
                best.offer(artifact, review.overall_score, iteration, issues)

                decision = detector.check_round(iteration, previous_score, review.overall_score)
                previous_score = review.overall_score

        except Exception as e:
            self.logger.error(f"❌ Refinement pipeline failed: {e}")
            if session_log is not None:
                self._close_session(session_log, SessionSummary(
                    final_score=best.score if best.score is not None else 0.0,
                    total_iterations=max(len(history) - 1, 0),
                    final_status=ERROR,
                    success_criteria_met=False,
                ))
            raise

        return self._finish(
            topic, config, decision, best, history, improvements, session_log, session_id
        )

    def _select_session_log(self, config: RefinementConfig) -> Optional[RefinementLogger]:
        if not config.enable_logging:
            return None
        if config.enable_persistence and self.session_logger_factory is not None:
            return self.session_logger_factory()
        return RefinementLogger()

    def _finish(
        self,
        topic: str,
        config: RefinementConfig,
        decision: TerminationDecision,
        best: BestArtifactTracker,
        history: List[IterationRecord],
        improvements: List[str],
        session_log: Optional[RefinementLogger],
        session_id: Optional[str],
    ) -> RefinementResult:
        """Finalise a terminated run: layout, persistence, session close."""
        artifact = best.artifact
        final_score = best.score
        iterations_used = len(history) - 1
        success = decision.status == SUCCESS

        self.logger.info(f"🎯 Refinement finished: {decision.status} ({decision.reason})")
        if best.iteration != history[-1].iteration_number:
            self.logger.info(
                f"Keeping best artifact from iteration {best.iteration} "
                f"(score {final_score:.2f})"
            )

        if config.generate_layout and self.layout is not None:
            try:
                artifact.layout = self.layout.generate(artifact)
            except Exception as e:
                self.logger.error(f"❌ Layout generation failed: {e}")
                artifact.layout = None

        artifact_id = None
        if config.enable_persistence and self.artifact_store is not None:
            try:
                artifact_id = self.artifact_store.save_artifact(artifact, {
                    "topic": topic,
                    "initial_score": history[0].score_after,
                    "final_score": final_score,
                    "iterations": iterations_used,
                    "success": success,
                    "status": decision.status,
                    "session_id": session_id,
                })
            except Exception as e:
                self.logger.error(f"Failed to persist artifact: {e}")

        if session_log is not None:
            if artifact_id:
                session_log.attach_artifact(artifact_id)
            self._close_session(session_log, SessionSummary(
                final_score=final_score,
                total_iterations=iterations_used,
                final_status=decision.status,
                success_criteria_met=success,
            ))

        return RefinementResult(
            artifact=artifact,
            final_score=final_score,
            iterations_used=iterations_used,
            success=success,
            status=decision.status,
            session_id=session_id,
            artifact_id=artifact_id,
            improvements=improvements,
            remaining_issues=list(best.issues),
            history=history,
            session=session_log.session if session_log is not None else None,
        )

    def _generate_initial(self, topic: str, config: RefinementConfig) -> Artifact:
        """Generate the initial artifact. Any generator failure is fatal."""
        self.logger.info("🎲 Generating initial creature...")
        narrative = self.narrative.generate(topic, None, round_index=0)
        name, text = narrative.name, narrative.narrative_text

        calls = {
            STATISTICS: lambda: self.statistics.generate(text, name, topic, None, round_index=0),
            CITATIONS: lambda: self.citations.generate(name, topic, text, None, round_index=0),
            ART_DIRECTION: lambda: self.art_direction.generate(name, topic, text, None, round_index=0),
        }
        outcomes = self._run_calls(calls, config)

        for generator, (_, error, _) in outcomes.items():
            if error is not None:
                if isinstance(error, GenerationFailure):
                    raise error
                raise GenerationFailure(generator, str(error)) from error

        return Artifact(
            name=name,
            topic=topic,
            narrative=text,
            statistics=outcomes[STATISTICS][0],
            citations=outcomes[CITATIONS][0],
            art_direction=outcomes[ART_DIRECTION][0],
        )

    def _review(self, artifact: Artifact, round_index: int) -> Review:
        self.logger.info("🔍 Running review...")
        review = self.reviewer.review(artifact, round_index=round_index)
        if not math.isfinite(review.overall_score):
            raise ReviewFailure(f"Review score is not finite: {review.overall_score!r}")
        self.logger.info(
            f"📊 Score: {review.overall_score:.2f} ({review.status}), "
            f"issues found: {len(review.issues)}"
        )
        return review

    def _apply_rework(
        self,
        artifact: Artifact,
        actionable: List[Issue],
        round_index: int,
        config: RefinementConfig,
    ) -> Tuple[List[AgentAction], List[str]]:
        """Invoke each targeted generator once and merge its output.

        All calls in a round read the artifact as it was at round start and
        write disjoint components, so they can run concurrently. A failed call
        leaves its component unchanged.

        Returns:
            Tuple of (actions taken, improvement descriptions)
        """
        groups = group_by_generator(actionable)
        feedback = {generator: build_feedback(items) for generator, items in groups.items()}
        self.logger.info(
            f"🔧 Applying improvements via: {', '.join(groups.keys())}"
        )

        calls = {
            generator: self._rework_call(generator, artifact, feedback[generator], round_index)
            for generator in groups
        }
        outcomes = self._run_calls(calls, config)

        actions: List[AgentAction] = []
        improvements: List[str] = []
        for generator, (result, error, duration_ms) in outcomes.items():
            if error is None:
                improvement = self._merge_component(artifact, generator, result)
                outcome = "applied"
                improvements.append(improvement)
            else:
                self.logger.error(f"❌ Failed to apply improvement via {generator}: {error}")
                outcome = f"failed: {error}"
                improvements.append(f"Failed to rework {generator}: {error}")

            actions.append(AgentAction(
                generator=generator,
                feedback_given=feedback[generator],
                outcome=outcome,
                success=error is None,
                duration_ms=duration_ms,
            ))

        return actions, improvements

    def _rework_call(
        self,
        generator: str,
        artifact: Artifact,
        feedback: str,
        round_index: int,
    ) -> Callable[[], Any]:
        name, topic, text = artifact.name, artifact.topic, artifact.narrative

        if generator == NARRATIVE:
            return lambda: self.narrative.generate(topic, feedback, round_index=round_index)
        if generator == STATISTICS:
            return lambda: self.statistics.generate(text, name, topic, feedback, round_index=round_index)
        if generator == CITATIONS:
            return lambda: self.citations.generate(name, topic, text, feedback, round_index=round_index)
        if generator == ART_DIRECTION:
            return lambda: self.art_direction.generate(name, topic, text, feedback, round_index=round_index)

        def unsupported():
            raise GenerationFailure(generator, "no generator registered for rework")
        return unsupported

    @staticmethod
    def _merge_component(artifact: Artifact, generator: str, result: Any) -> str:
        """Replace one artifact component wholesale. Returns an improvement note."""
        if generator == NARRATIVE:
            artifact.name = result.name
            artifact.narrative = result.narrative_text
            return f"Revised narrative: {artifact.name}"
        if generator == STATISTICS:
            artifact.statistics = result
            return "Rebalanced statistics block"
        if generator == CITATIONS:
            artifact.citations = result
            return f"Refreshed citations ({len(result)} sources)"
        if generator == ART_DIRECTION:
            artifact.art_direction = result
            return "Reworked art direction"
        raise ValueError(f"Unknown component: {generator}")

    def _run_calls(
        self,
        calls: Dict[str, Callable[[], Any]],
        config: RefinementConfig,
    ) -> Dict[str, CallOutcome]:
        """Run independent generator calls and join them all.

        A failure in one call never cancels the others.
        """
        if not calls:
            return {}

        if not config.parallel_generation or len(calls) == 1:
            return {generator: self._timed(call) for generator, call in calls.items()}

        workers = min(config.max_workers, len(calls))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {generator: executor.submit(self._timed, call) for generator, call in calls.items()}
            return {generator: future.result() for generator, future in futures.items()}

    @staticmethod
    def _timed(call: Callable[[], Any]) -> CallOutcome:
        start = time.monotonic()
        try:
            result = call()
        except Exception as e:
            return None, e, RefinementController._elapsed_ms(start)
        return result, None, RefinementController._elapsed_ms(start)

    def _record(
        self,
        session_log: Optional[RefinementLogger],
        history: List[IterationRecord],
        record: IterationRecord,
    ):
        history.append(record)
        if session_log is not None:
            session_log.log_iteration(record)

    def _close_session(self, session_log: RefinementLogger, summary: SessionSummary):
        try:
            session_log.complete_session(summary)
        except Exception as e:
            self.logger.error(f"❌ Failed to log session completion: {e}")

    def _log_issue_summary(self, issues: List[Issue]):
        stats = issue_statistics(issues)
        self.logger.info(
            f"⚠️  Issues: {stats['total']} total, {stats['actionable']} actionable, "
            f"routing: {stats['by_generator']}"
        )

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
