from typing import Optional

from creature_refiner.agents.base import BaseAgent
from creature_refiner.errors import ReviewFailure
from creature_refiner.models import Artifact, Review
from creature_refiner.prompts import REVIEWER_SYSTEM_PROMPT, build_review_prompt


class ReviewerAgent(BaseAgent):
    """
    Scores a full artifact and lists its issues.
    Any transport or parse failure surfaces as ReviewFailure.
    """

    name = "review"
    system_prompt = REVIEWER_SYSTEM_PROMPT
    temperature = 0.3
    max_tokens = 1500

    def failure(self, message: str, raw_response: Optional[str] = None) -> ReviewFailure:
        return ReviewFailure(message, raw_response=raw_response)

    def review(self, artifact: Artifact, round_index: int = 0) -> Review:
        """
        Review an artifact.

        Args:
            artifact: The artifact to review
            round_index: Refinement round (0 = initial pass)

        Returns:
            Parsed Review

        Raises:
            ReviewFailure: If the call failed or the output is unparseable
        """
        self.logger.info(f"🔍 Reviewing {artifact.name} (round {round_index})")
        data = self._request_json(build_review_prompt(artifact.to_dict(), round_index), round_index)

        try:
            review = Review.from_dict(data)
        except ValueError as e:
            raise self.failure(str(e)) from e

        self.logger.info(
            f"📊 Review status: {review.status}, score {review.overall_score:.2f}, "
            f"{len(review.issues)} issues"
        )
        return review
