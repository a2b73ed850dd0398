"""Exception types raised by collaborators and the refinement controller."""

from typing import Optional


class CreatureRefinerError(Exception):
    """Base class for all refinement errors."""


class GenerationFailure(CreatureRefinerError):
    """A named content generator call failed or returned unusable output."""

    def __init__(self, generator: str, message: str):
        self.generator = generator
        self.message = message
        super().__init__(f"{generator} generator failed: {message}")


class ReviewFailure(CreatureRefinerError):
    """The reviewer call failed or returned unparseable output."""

    def __init__(self, message: str, raw_response: Optional[str] = None):
        self.message = message
        self.raw_response = raw_response
        super().__init__(f"Review failed: {message}")
