from typing import List, Optional

from creature_refiner.agents.base import BaseAgent
from creature_refiner.models import CITATIONS, Citation
from creature_refiner.prompts import CITATIONS_SYSTEM_PROMPT, build_citations_prompt


class CitationGenerator(BaseAgent):
    """Finds the folklore sources behind a creature."""

    name = CITATIONS
    system_prompt = CITATIONS_SYSTEM_PROMPT
    temperature = 0.3
    max_tokens = 800
    # The response is a JSON array, which json_object mode does not allow
    json_mode = False

    def generate(
        self,
        name: str,
        topic: str,
        narrative_text: str,
        feedback: Optional[str] = None,
        round_index: int = 0,
    ) -> List[Citation]:
        self.logger.info(f"📚 Generating citations for {name} (round {round_index})")
        if feedback:
            self.logger.info(f"[Review Feedback] {feedback}")

        prompt = build_citations_prompt(name, topic, narrative_text, feedback, round_index)
        data = self._request_json(prompt, round_index)

        if isinstance(data, dict):
            data = data.get("citations", [])
        if not isinstance(data, list):
            raise self.failure("Citations response is not a JSON array")

        citations = [Citation.from_dict(item) for item in data if isinstance(item, dict)]
        if not citations:
            raise self.failure("Citations response contained no sources")
        return citations
