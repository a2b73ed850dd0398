# Agent modules for the creature refiner

from creature_refiner.agents.client import CompletionClient
from creature_refiner.agents.mock_client import MockCompletionClient
from creature_refiner.agents.narrative import NarrativeGenerator, NarrativeResult
from creature_refiner.agents.statistics import StatisticsGenerator
from creature_refiner.agents.citations import CitationGenerator
from creature_refiner.agents.art_direction import ArtDirectionGenerator
from creature_refiner.agents.layout import LayoutGenerator
from creature_refiner.agents.reviewer import ReviewerAgent

__all__ = [
    "CompletionClient",
    "MockCompletionClient",
    "NarrativeGenerator",
    "NarrativeResult",
    "StatisticsGenerator",
    "CitationGenerator",
    "ArtDirectionGenerator",
    "LayoutGenerator",
    "ReviewerAgent",
]
