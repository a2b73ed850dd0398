"""
Prompts package for the creature refiner.

Contains generator prompts and the quality review prompt.
"""

from creature_refiner.prompts.generator_prompts import (
    NARRATIVE_SYSTEM_PROMPT,
    STATISTICS_SYSTEM_PROMPT,
    CITATIONS_SYSTEM_PROMPT,
    ART_DIRECTION_SYSTEM_PROMPT,
    LAYOUT_SYSTEM_PROMPT,
    build_narrative_prompt,
    build_statistics_prompt,
    build_citations_prompt,
    build_art_direction_prompt,
    build_layout_prompt,
)
from creature_refiner.prompts.reviewer_prompts import REVIEWER_SYSTEM_PROMPT, build_review_prompt

__all__ = [
    'NARRATIVE_SYSTEM_PROMPT',
    'STATISTICS_SYSTEM_PROMPT',
    'CITATIONS_SYSTEM_PROMPT',
    'ART_DIRECTION_SYSTEM_PROMPT',
    'LAYOUT_SYSTEM_PROMPT',
    'REVIEWER_SYSTEM_PROMPT',
    'build_narrative_prompt',
    'build_statistics_prompt',
    'build_citations_prompt',
    'build_art_direction_prompt',
    'build_layout_prompt',
    'build_review_prompt',
]
