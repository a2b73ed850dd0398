from dataclasses import dataclass
from typing import Optional

from creature_refiner.agents.base import BaseAgent
from creature_refiner.models import NARRATIVE
from creature_refiner.prompts import NARRATIVE_SYSTEM_PROMPT, build_narrative_prompt


@dataclass
class NarrativeResult:
    name: str
    narrative_text: str


class NarrativeGenerator(BaseAgent):
    """Writes the creature's name and lore for a topic."""

    name = NARRATIVE
    system_prompt = NARRATIVE_SYSTEM_PROMPT
    temperature = 0.8
    max_tokens = 1200

    def generate(
        self,
        topic: str,
        feedback: Optional[str] = None,
        round_index: int = 0,
    ) -> NarrativeResult:
        """
        Generate (or regenerate) the narrative component.

        Args:
            topic: Cultural origin tag, e.g. "Japan"
            feedback: Revision instructions; absent on the first call
            round_index: Refinement round (0 = initial pass)

        Returns:
            NarrativeResult with name and narrative text
        """
        self.logger.info(f"🎭 Generating narrative for {topic} (round {round_index})")
        data = self._request_json(build_narrative_prompt(topic, feedback, round_index), round_index)

        if not isinstance(data, dict):
            raise self.failure("Narrative response is not a JSON object")

        name = str(data.get("name") or "").strip()
        narrative_text = str(data.get("narrative") or data.get("lore") or "").strip()
        if not name or not narrative_text:
            raise self.failure("Narrative response is missing name or narrative")

        return NarrativeResult(name=name, narrative_text=narrative_text)
