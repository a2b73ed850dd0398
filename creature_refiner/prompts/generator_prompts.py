"""
Prompts for the content generators.

Each generator has a system prompt and a builder that renders the user prompt
from its inputs. Revision feedback, when present, is appended as explicit
instructions, together with the refinement round it belongs to.
"""

from typing import Any, Dict, Optional
import json

# =============================================================================
# Narrative
# =============================================================================

NARRATIVE_SYSTEM_PROMPT = """You are a cultural mythographer creating folklore-based content \
for a fantasy RPG. Create original creatures inspired by real-world myths and legends."""

NARRATIVE_PROMPT = """Write a rich, immersive lore entry for a single mythical creature from the specified region.

IMPORTANT CONSTRAINTS:
- Focus on ONE single creature only
- Give the creature a distinctive name; avoid generic labels such as "Troll", "Dragon" or "Spirit"
- If refining an existing creature, maintain its core identity and type
- For name improvements, create variations rather than completely different creatures

The narrative must include the following Markdown sections:
## Creature Description
## Cultural Significance
## Notable Abilities
## Historical Context

Use vivid, sensory language.

Return a JSON object:
{
  "name": "Creature name",
  "narrative": "Markdown lore entry"
}
"""

# =============================================================================
# Statistics
# =============================================================================

STATISTICS_SYSTEM_PROMPT = """You are a game designer writing D&D 5e-compatible stat blocks. \
Return only valid JSON without any markdown formatting or additional text."""

STATISTICS_PROMPT = """Generate a complete 5e-compatible stat block for the creature described below.

Focus ONLY on mechanical stats and abilities. Do NOT include lore or narrative content.

Include:
- Core stats (armor_class, hit_points, speed, ability scores)
- Combat abilities and actions
- Special traits and features
- challenge_rating and experience points
- Skills, saving throws, and resistances

Return the stat block as a single JSON object.
"""

# =============================================================================
# Citations
# =============================================================================

CITATIONS_SYSTEM_PROMPT = """You are a folklore researcher who cites public, reliable sources. \
Return only valid JSON without any markdown formatting or additional text."""

CITATIONS_PROMPT = """Identify 2-3 public, reliable sources that describe the original mythology or \
inspiration behind this creature. Prefer encyclopedia entries about the creature type, regional \
mythology references, academic folklore sources and cultural heritage sites. Avoid generic \
mythology websites.

Return a JSON array:
[
  {
    "title": "Source Title",
    "url": "https://example.com/source",
    "source_type": "Encyclopedia|Mythology|Academic|Cultural",
    "relevance_note": "Why this source is relevant"
  }
]
"""

# =============================================================================
# Art direction
# =============================================================================

ART_DIRECTION_SYSTEM_PROMPT = """You are a visionary artist and creative prompt engineer. \
Return only valid JSON without any markdown formatting or additional text."""

ART_DIRECTION_PROMPT = """Create a concise, imaginative illustration prompt for the creature below. \
The prompt should evoke a strong visual concept and include artistic style, mood, and key visual \
elements drawn from the creature's cultural origin. Keep the prompt under 40 words.

Return a JSON object:
{
  "visual_prompt": "The illustration prompt",
  "style_tag": "Short style label",
  "rationale": "Why this style fits the creature"
}
"""

# =============================================================================
# Layout
# =============================================================================

LAYOUT_SYSTEM_PROMPT = """You are a layout designer for tabletop RPG bestiaries. \
Return only valid JSON without any markdown formatting or additional text."""

LAYOUT_PROMPT = """Design a two-column bestiary page layout for the creature entry below.

Return a JSON object:
{
  "title": "Page title",
  "columns": [
    {"blocks": [{"type": "heading|text|statblock|image|citations", "content": "..."}]}
  ],
  "theme": "Visual theme of the page"
}
"""


def _feedback_section(feedback: Optional[str], round_index: int) -> str:
    if not feedback:
        return ""
    return (
        f"\n\nREVISION INSTRUCTIONS (refinement round {round_index}):\n"
        f"{feedback}\n"
        "Address every instruction above while keeping what already works."
    )


def build_narrative_prompt(topic: str, feedback: Optional[str] = None, round_index: int = 0) -> str:
    return f"{NARRATIVE_PROMPT}\nRegion: {topic}{_feedback_section(feedback, round_index)}"


def build_statistics_prompt(
    narrative_text: str,
    name: Optional[str] = None,
    topic: Optional[str] = None,
    feedback: Optional[str] = None,
    round_index: int = 0,
) -> str:
    lines = [STATISTICS_PROMPT]
    if name:
        lines.append(f"Creature Name: {name}")
    if topic:
        lines.append(f"Region: {topic}")
    lines.append(f"Lore:\n{narrative_text}")
    return "\n".join(lines) + _feedback_section(feedback, round_index)


def build_citations_prompt(
    name: str,
    topic: str,
    narrative_text: str,
    feedback: Optional[str] = None,
    round_index: int = 0,
) -> str:
    return (
        f"{CITATIONS_PROMPT}\n"
        f"Creature Information:\n- Name: {name}\n- Region: {topic}\n- Description: {narrative_text}"
        f"{_feedback_section(feedback, round_index)}"
    )


def build_art_direction_prompt(
    name: str,
    topic: str,
    narrative_text: str,
    feedback: Optional[str] = None,
    round_index: int = 0,
) -> str:
    return (
        f"{ART_DIRECTION_PROMPT}\n"
        f"Creature Name: {name}\nRegion: {topic}\nLore: {narrative_text}"
        f"{_feedback_section(feedback, round_index)}"
    )


def build_layout_prompt(artifact_data: Dict[str, Any]) -> str:
    return (
        f"{LAYOUT_PROMPT}\nRegion: {artifact_data.get('topic', '')}\n"
        f"Creature Entry:\n{json.dumps(artifact_data, ensure_ascii=False)}"
    )

