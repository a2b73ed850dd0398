"""
Deterministic offline completion service.

Mirrors CompletionClient.complete() so every generator and the reviewer can run
without network access. Output depends only on the request purpose, the
explicit round index, and the region named in the prompt; no call counters are
kept.
"""

import json
import logging
import re
from typing import Dict, List

from creature_refiner.models import (
    NARRATIVE,
    STATISTICS,
    CITATIONS,
    ART_DIRECTION,
    LAYOUT,
)

REVIEW = "review"

REGION_CREATURES: Dict[str, List[str]] = {
    "japan": ["Kappa", "Tengu", "Nue"],
    "greece": ["Chimera", "Harpy", "Sphinx"],
    "norse": ["Draugr", "Huldra", "Nokk"],
    "celtic": ["Puca", "Kelpie", "Dullahan"],
    "slavic": ["Leshy", "Rusalka", "Vodyanoy"],
    "chinese": ["Nian", "Pixiu", "Jiangshi"],
    "indian": ["Rakshasa", "Yaksha", "Naga"],
    "egyptian": ["Ammit", "Serpopard", "Bennu"],
    "aztec": ["Ahuizotl", "Cipactli", "Xolotl"],
    "malaysia": ["Penanggal", "Toyol", "Polong"],
}

EPITHETS = ["", "Mistborn ", "Hollow-Eyed ", "Elder "]

_REGION_LINE = re.compile(r"Region:\s*(.+)")


class MockCompletionClient:
    """Offline stand-in for CompletionClient.

    Review scores start at `initial_score` and rise by `score_step` per
    refinement round, capped at 5.0. Early rounds report Major issues; later
    rounds report only Minor ones.
    """

    def __init__(self, initial_score: float = 3.2, score_step: float = 0.4):
        self.model = "offline-mock"
        self.initial_score = initial_score
        self.score_step = score_step
        self.logger = logging.getLogger(__name__)

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool = False,
        temperature: float = 0.7,
        max_tokens: int = 1500,
        purpose: str = "",
        round_index: int = 0,
    ) -> str:
        self.logger.debug(f"[{purpose} r{round_index}] Serving offline completion")

        region = self._region(user_prompt)
        builders = {
            NARRATIVE: self._narrative,
            STATISTICS: self._statistics,
            CITATIONS: self._citations,
            ART_DIRECTION: self._art_direction,
            LAYOUT: self._layout,
            REVIEW: self._review,
        }
        if purpose not in builders:
            raise ValueError(f"Offline client has no response for purpose '{purpose}'")

        return json.dumps(builders[purpose](region, round_index), ensure_ascii=False)

    @staticmethod
    def _region(prompt: str) -> str:
        match = _REGION_LINE.search(prompt)
        return match.group(1).strip() if match else "Unknown"

    def _creature_name(self, region: str, round_index: int) -> str:
        creatures = REGION_CREATURES.get(region.lower(), ["Wanderer"])
        base = creatures[len(region) % len(creatures)]
        return f"{EPITHETS[min(round_index, len(EPITHETS) - 1)]}{base}".strip()

    def _narrative(self, region: str, round_index: int) -> Dict:
        name = self._creature_name(region, round_index)
        narrative = (
            f"## Creature Description\nThe {name} haunts the borderlands of {region}.\n\n"
            f"## Cultural Significance\nVillagers of {region} leave offerings at dusk.\n\n"
            f"## Notable Abilities\nIt bends fog and memory alike.\n\n"
            f"## Historical Context\nAccounts date back centuries (revision {round_index})."
        )
        return {"name": name, "narrative": narrative}

    def _statistics(self, region: str, round_index: int) -> Dict:
        return {
            "armor_class": 13 + round_index,
            "hit_points": 45 + 10 * round_index,
            "speed": "30 ft.",
            "challenge_rating": "3",
            "abilities": {"str": 14, "dex": 15, "con": 13, "int": 10, "wis": 14, "cha": 12},
            "actions": [{"name": "Fog Grasp", "description": "Melee attack, 2d6 cold damage."}],
        }

    def _citations(self, region: str, round_index: int) -> List[Dict]:
        slug = region.lower().replace(" ", "_")
        citations = [
            {
                "title": f"Mythology of {region}",
                "url": f"https://en.wikipedia.org/wiki/{slug}_mythology",
                "source_type": "Encyclopedia",
                "relevance_note": f"Overview of {region} folklore",
            }
        ]
        if round_index > 0:
            citations.append({
                "title": f"Folk Belief in {region}: A Survey",
                "url": f"https://example.org/folklore/{slug}",
                "source_type": "Academic",
                "relevance_note": "Primary ethnographic accounts",
            })
        return citations

    def _art_direction(self, region: str, round_index: int) -> Dict:
        return {
            "visual_prompt": f"A fog-wreathed creature of {region} folklore at twilight, ink wash",
            "style_tag": "ink-wash" if round_index == 0 else "woodblock print",
            "rationale": f"Echoes traditional {region} visual art",
        }

    def _layout(self, region: str, round_index: int) -> Dict:
        return {
            "title": f"Bestiary: {region}",
            "columns": [
                {"blocks": [{"type": "heading", "content": "Lore"}, {"type": "text", "content": "..."}]},
                {"blocks": [{"type": "statblock", "content": "..."}, {"type": "citations", "content": "..."}]},
            ],
            "theme": "parchment",
        }

    def _review(self, region: str, round_index: int) -> Dict:
        score = round(min(5.0, self.initial_score + self.score_step * round_index), 2)

        if round_index == 0:
            issues = [
                {
                    "severity": "Major",
                    "category": "Name Distinctiveness",
                    "description": "The name is a generic creature type",
                    "suggestion": "Add a distinctive epithet tied to the creature's habitat",
                },
                {
                    "severity": "Major",
                    "category": "Stat Block Balance",
                    "description": "Hit points are too low for the challenge rating",
                    "suggestion": "Raise hit points and armor class to match CR 3",
                },
                {
                    "severity": "Minor",
                    "category": "Quality",
                    "description": "The art style is generic",
                    "suggestion": "Reference a regional art tradition",
                },
            ]
        elif round_index == 1:
            issues = [
                {
                    "severity": "Major",
                    "category": "Consistency",
                    "description": "Only one citation source is given",
                    "suggestion": "Add an academic reference on regional folk belief",
                },
            ]
        else:
            issues = [
                {
                    "severity": "Minor",
                    "category": "Quality",
                    "description": "Some sentences in the lore are long",
                    "suggestion": "Tighten the prose",
                },
            ]

        return {
            "overall_score": score,
            "status": "pass" if not any(i["severity"] != "Minor" for i in issues) else "needs_revision",
            "summary": f"Offline review of round {round_index} for a {region} creature.",
            "issues": issues,
            "recommendations": [i["suggestion"] for i in issues],
        }
