"""
Creature Refiner Orchestrator - wires the collaborators to the refinement loop.

The orchestrator builds:
- One completion client (OpenAI-backed, or the offline mock)
- The narrative, statistics, citation, art direction and layout generators
- The reviewer
- File-backed session log and artifact store under the work directory
and hands them to a RefinementController.
"""

import logging
from pathlib import Path
from typing import Optional, Dict, Any

from creature_refiner.agents import (
    CompletionClient,
    MockCompletionClient,
    NarrativeGenerator,
    StatisticsGenerator,
    CitationGenerator,
    ArtDirectionGenerator,
    LayoutGenerator,
    ReviewerAgent,
)
from creature_refiner.core import (
    ArtifactStore,
    FileRefinementLogger,
    write_session_report,
)
from creature_refiner.models import (
    RefinementConfig,
    RefinementResult,
    NARRATIVE,
    STATISTICS,
    CITATIONS,
    ART_DIRECTION,
    LAYOUT,
)
from creature_refiner.refinement_controller import RefinementController
from creature_refiner.utils.config_loader import DEFAULT_CONFIG

REVIEWER = "reviewer"


class CreatureRefinerOrchestrator:
    """Main entry point for refining creature profiles.

    Usage:
        orchestrator = CreatureRefinerOrchestrator(
            work_dir="run_workspace",
            openai_key="...",
            openai_base_url="...",
            openai_model="gpt-4o"
        )
        result = orchestrator.run("Japan", RefinementConfig(target_score=4.0))
    """

    def __init__(
        self,
        work_dir: str = "run_workspace",
        openai_key: str = None,
        openai_base_url: str = None,
        openai_model: str = "gpt-4o",
        config: Optional[Dict[str, Any]] = None,
        offline: bool = False,
    ):
        """Initialize the orchestrator with all required components.

        Args:
            work_dir: Working directory for sessions, artifacts and reports
            openai_key: OpenAI API key
            openai_base_url: OpenAI base URL (for proxies/custom endpoints)
            openai_model: OpenAI model to use
            config: Loaded run configuration (see config_loader.load_refiner_config)
            offline: Use the deterministic offline completion service
        """
        self.work_dir = Path(work_dir).absolute()
        self.logger = logging.getLogger(__name__)
        self.config = config or DEFAULT_CONFIG
        self.offline = offline

        generation = self.config.get("generation") or {}

        if offline:
            self.client = MockCompletionClient()
        else:
            self.client = CompletionClient(
                api_key=openai_key,
                base_url=openai_base_url,
                model=generation.get("model") or openai_model,
            )

        def settings(name: str) -> Dict[str, Any]:
            values = generation.get(name) or {}
            return {
                "temperature": values.get("temperature"),
                "max_tokens": values.get("max_tokens"),
            }

        self.artifact_store = ArtifactStore(self.work_dir)

        self.controller = RefinementController(
            narrative=NarrativeGenerator(self.client, **settings(NARRATIVE)),
            statistics=StatisticsGenerator(self.client, **settings(STATISTICS)),
            citations=CitationGenerator(self.client, **settings(CITATIONS)),
            art_direction=ArtDirectionGenerator(self.client, **settings(ART_DIRECTION)),
            reviewer=ReviewerAgent(self.client, **settings(REVIEWER)),
            layout=LayoutGenerator(self.client, **settings(LAYOUT)),
            session_logger_factory=lambda: FileRefinementLogger(self.work_dir),
            artifact_store=self.artifact_store,
        )

    def run(
        self,
        topic: str,
        refinement_config: Optional[RefinementConfig] = None,
        write_report: bool = False,
    ) -> RefinementResult:
        """Refine one creature profile for a topic.

        Args:
            topic: Cultural origin, e.g. "Japan"
            refinement_config: Run configuration (defaults if omitted)
            write_report: Write a markdown session report into the work directory

        Returns:
            RefinementResult
        """
        refinement_config = refinement_config or RefinementConfig()
        if refinement_config.enable_persistence:
            self.work_dir.mkdir(parents=True, exist_ok=True)

        self.logger.info(f"Starting Creature Refiner")
        self.logger.info(f"Topic: {topic}")
        self.logger.info(f"Work directory: {self.work_dir}")
        self.logger.info(f"Model: {self.client.model}")
        self.logger.info(f"")

        result = self.controller.refine(topic, refinement_config)

        if write_report:
            self._write_report(result)

        self._print_summary(result)
        return result

    def _write_report(self, result: RefinementResult) -> Optional[Path]:
        if result.session is None:
            self.logger.warning("Session logging is disabled; no report written")
            return None

        output_path = self.work_dir / "reports" / f"session_{result.session.id}.md"
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            path = write_session_report(
                result.session,
                output_path,
                artifact=result.artifact,
                remaining_issues=result.remaining_issues,
            )
        except OSError as e:
            self.logger.error(f"Failed to write session report: {e}")
            return None

        self.logger.info(f"📄 Session report: {path}")
        return path

    def _print_summary(self, result: RefinementResult):
        """Print a summary of the refinement run."""
        self.logger.info("")
        self.logger.info("="*60)
        self.logger.info("REFINEMENT SUMMARY")
        self.logger.info("="*60)
        self.logger.info(f"Creature: {result.artifact.name}")
        self.logger.info(f"Status: {result.status}")
        self.logger.info(f"Final score: {result.final_score:.2f}")
        self.logger.info(f"Refinement rounds: {result.iterations_used}")
        self.logger.info(f"Improvements applied: {len(result.improvements)}")
        self.logger.info(f"Remaining issues: {len(result.remaining_issues)}")
        if result.session_id:
            self.logger.info(f"Session: {result.session_id}")
        if result.artifact_id:
            self.logger.info(f"Artifact: {self.artifact_store.artifacts_dir / result.artifact_id}.json")
        self.logger.info("="*60)
