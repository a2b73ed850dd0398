"""
Prompts for the quality reviewer.
"""

import json
from typing import Any, Dict

from creature_refiner.models import ISSUE_CATEGORIES

REVIEWER_SYSTEM_PROMPT = """You are a senior editor evaluating AI-generated content. \
Return only valid JSON without any markdown formatting or additional text."""

QA_REVIEW_PROMPT = f"""You are an elite QA content reviewer and one of the most knowledgeable \
Dungeons & Dragons experts in the world. You have a meticulous eye for rules accuracy, thematic \
consistency, and stat block coherence.

Evaluate the following AI-generated creature entry, which includes lore, stats, citations, and an \
art direction brief. Identify every issue that must be fixed to improve the creature's quality.

Focus on these areas:
- **Name Distinctiveness**: Is the name unique and fitting for the creature?
- **Cultural Authenticity**: Does the lore reflect the region's cultural traditions?
- **Stat Block Balance**: Are the stats balanced and appropriate for the creature?
- **Consistency**: Are all elements internally consistent?
- **Quality**: Is the overall content well-written and engaging?

Score the entry from 1.0 (unusable) to 5.0 (publication ready).

Each issue must have:
- severity: "Critical", "Major", or "Minor"
- category: one of {", ".join(ISSUE_CATEGORIES)}
- description: A clear description of the problem
- suggestion: A specific suggestion for how to fix it

Return your response in this JSON format:
{{
  "overall_score": 3.5,
  "status": "pass|needs_revision",
  "summary": "2-4 sentences of constructive feedback",
  "issues": [
    {{
      "severity": "Critical|Major|Minor",
      "category": "Name Distinctiveness",
      "description": "Description of the problem",
      "suggestion": "Specific suggestion for improvement"
    }}
  ],
  "recommendations": ["Short recommendation"]
}}

If the creature is excellent with no issues, return an empty "issues" array.
"""


def build_review_prompt(artifact_data: Dict[str, Any], round_index: int = 0) -> str:
    """Render the review prompt for one artifact.

    Args:
        artifact_data: Artifact.to_dict() output
        round_index: Refinement round being reviewed (0 = initial pass)
    """
    def dump(value: Any) -> str:
        return json.dumps(value, ensure_ascii=False) if value else "N/A"

    return (
        f"{QA_REVIEW_PROMPT}\n"
        f"Review round: {round_index}\n"
        f"Creature Data:\n"
        f"- Name: {artifact_data.get('name', '')}\n"
        f"- Region: {artifact_data.get('topic', '')}\n"
        f"- Lore: {artifact_data.get('narrative', '')}\n"
        f"- Statistics: {dump(artifact_data.get('statistics'))}\n"
        f"- Citations: {dump(artifact_data.get('citations'))}\n"
        f"- Art Direction: {dump(artifact_data.get('art_direction'))}\n"
    )
