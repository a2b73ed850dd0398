# Creature Refiner - iterative generation of folklore creature profiles

from creature_refiner.models import (
    Artifact,
    Issue,
    Review,
    IterationRecord,
    Session,
    RefinementConfig,
    RefinementResult,
)
from creature_refiner.errors import CreatureRefinerError, GenerationFailure, ReviewFailure
from creature_refiner.refinement_controller import RefinementController
from creature_refiner.orchestrator import CreatureRefinerOrchestrator

__version__ = "0.1.0"

__all__ = [
    "Artifact",
    "Issue",
    "Review",
    "IterationRecord",
    "Session",
    "RefinementConfig",
    "RefinementResult",
    "CreatureRefinerError",
    "GenerationFailure",
    "ReviewFailure",
    "RefinementController",
    "CreatureRefinerOrchestrator",
]
