from typing import Any, Dict, Optional

from creature_refiner.agents.base import BaseAgent
from creature_refiner.models import STATISTICS
from creature_refiner.prompts import STATISTICS_SYSTEM_PROMPT, build_statistics_prompt


class StatisticsGenerator(BaseAgent):
    """Builds a 5e-compatible statistics block from the narrative."""

    name = STATISTICS
    system_prompt = STATISTICS_SYSTEM_PROMPT
    temperature = 0.3
    max_tokens = 2000

    def generate(
        self,
        narrative_text: str,
        name: Optional[str] = None,
        topic: Optional[str] = None,
        feedback: Optional[str] = None,
        round_index: int = 0,
    ) -> Dict[str, Any]:
        self.logger.info(f"⚔️  Generating statistics for {name or 'creature'} (round {round_index})")
        prompt = build_statistics_prompt(narrative_text, name, topic, feedback, round_index)
        data = self._request_json(prompt, round_index)

        if not isinstance(data, dict) or not data:
            raise self.failure("Statistics response is not a non-empty JSON object")

        # Some models wrap the block in a single top-level key
        if len(data) == 1 and isinstance(next(iter(data.values())), dict):
            data = next(iter(data.values()))

        return data
