from typing import Optional

from creature_refiner.agents.base import BaseAgent
from creature_refiner.models import ART_DIRECTION, ArtDirection
from creature_refiner.prompts import ART_DIRECTION_SYSTEM_PROMPT, build_art_direction_prompt


class ArtDirectionGenerator(BaseAgent):
    """Produces the illustration brief for a creature."""

    name = ART_DIRECTION
    system_prompt = ART_DIRECTION_SYSTEM_PROMPT
    temperature = 0.9
    max_tokens = 400

    def generate(
        self,
        name: str,
        topic: str,
        narrative_text: str,
        feedback: Optional[str] = None,
        round_index: int = 0,
    ) -> ArtDirection:
        self.logger.info(f"🎨 Generating art direction for {name} (round {round_index})")
        prompt = build_art_direction_prompt(name, topic, narrative_text, feedback, round_index)
        data = self._request_json(prompt, round_index)

        if not isinstance(data, dict):
            raise self.failure("Art direction response is not a JSON object")

        art = ArtDirection.from_dict(data)
        if not art.visual_prompt:
            raise self.failure("Art direction response has no visual prompt")
        return art
