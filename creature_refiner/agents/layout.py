from typing import Any, Dict

from creature_refiner.agents.base import BaseAgent
from creature_refiner.models import LAYOUT, Artifact
from creature_refiner.prompts import LAYOUT_SYSTEM_PROMPT, build_layout_prompt


class LayoutGenerator(BaseAgent):
    """Renders a finished artifact into a bestiary page layout."""

    name = LAYOUT
    system_prompt = LAYOUT_SYSTEM_PROMPT
    temperature = 0.4
    max_tokens = 2000

    def generate(self, artifact: Artifact) -> Dict[str, Any]:
        self.logger.info(f"📄 Generating layout for {artifact.name}")
        data = artifact.to_dict()
        data.pop("layout", None)

        layout = self._request_json(build_layout_prompt(data))
        if not isinstance(layout, dict):
            raise self.failure("Layout response is not a JSON object")
        return layout
