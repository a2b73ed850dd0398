import logging
from typing import Optional

from openai import OpenAI
from tenacity import retry, stop_after_attempt, wait_fixed


class CompletionClient:
    """
    Wraps the OpenAI chat completions API.
    Every generator and the reviewer share one client; retries live here.
    """
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "gpt-4o",
        timeout: float = 120.0,
    ):
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.model = model
        self.logger = logging.getLogger(__name__)

    @retry(stop=stop_after_attempt(3), wait=wait_fixed(2), reraise=True)
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
        """
        Request one chat completion.

        Args:
            system_prompt: System message
            user_prompt: User message
            json_mode: Ask the model for a JSON object response
            temperature: Sampling temperature
            max_tokens: Completion token limit
            purpose: Caller name, used for logging
            round_index: Refinement round the request belongs to, used for logging

        Returns:
            The completion text

        Raises:
            ValueError: If the service returned an empty completion
        """
        self.logger.debug(f"[{purpose} r{round_index}] Requesting completion from {self.model}")

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )

        content = response.choices[0].message.content
        if not content:
            raise ValueError(f"Empty completion for {purpose or 'request'}")

        return content.strip()
