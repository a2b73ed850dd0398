# Core modules for the creature refinement loop

from creature_refiner.core.issue_classifier import IssueClassifier, RoutingRule, ROUTING_RULES
from creature_refiner.core.convergence_detector import (
    ConvergenceDetector,
    BestArtifactTracker,
    TerminationDecision,
)
from creature_refiner.core.refinement_logger import RefinementLogger, FileRefinementLogger
from creature_refiner.core.artifact_store import ArtifactStore
from creature_refiner.core.session_report import write_session_report

__all__ = [
    "IssueClassifier",
    "RoutingRule",
    "ROUTING_RULES",
    "ConvergenceDetector",
    "BestArtifactTracker",
    "TerminationDecision",
    "RefinementLogger",
    "FileRefinementLogger",
    "ArtifactStore",
    "write_session_report",
]
