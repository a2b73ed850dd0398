import logging
from typing import Any, Optional

from creature_refiner.errors import CreatureRefinerError, GenerationFailure
from creature_refiner.utils.json_extractor import extract_json_with_fallback


class BaseAgent:
    """
    Shared plumbing for the agents that talk to the completion service.

    Subclasses set `name`, `system_prompt`, and the sampling defaults, and
    override `failure()` to choose the exception they surface.
    """

    name = ""
    system_prompt = ""
    temperature = 0.7
    max_tokens = 1500
    json_mode = True

    def __init__(self, client, temperature: Optional[float] = None, max_tokens: Optional[int] = None):
        self.client = client
        if temperature is not None:
            self.temperature = temperature
        if max_tokens is not None:
            self.max_tokens = max_tokens
        self.logger = logging.getLogger(self.__class__.__module__)

    def failure(self, message: str, raw_response: Optional[str] = None) -> CreatureRefinerError:
        return GenerationFailure(self.name, message)

    def _request(self, user_prompt: str, round_index: int = 0) -> str:
        try:
            return self.client.complete(
                self.system_prompt,
                user_prompt,
                json_mode=self.json_mode,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                purpose=self.name,
                round_index=round_index,
            )
        except CreatureRefinerError:
            raise
        except Exception as e:
            self.logger.error(f"{self.name} completion failed: {e}")
            raise self.failure(str(e)) from e

    def _request_json(self, user_prompt: str, round_index: int = 0) -> Any:
        text = self._request(user_prompt, round_index=round_index)
        data = extract_json_with_fallback(text)
        if data is None:
            raise self.failure("No valid JSON in response", raw_response=text)
        return data
