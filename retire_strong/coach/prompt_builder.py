"""Prompt assembly for the coaching orchestrator."""

from functools import lru_cache
from pathlib import Path

from retire_strong.coach.schemas import CoachContext
from retire_strong.rag.types import RetrievedPassage

PROMPTS_DIR = Path(__file__).parent / "prompts"

RAG_SECTION_HEADER = "\n\n# Relevant Context from Knowledge Base\n\n"

EXPLAIN_PLAN_TEMPLATE = """Please explain this exercise plan to me in a warm, encouraging way.

Help me understand:
- What exercises I'll be doing and why
- How this plan fits my goals and limitations
- What to expect and how to get started

Plan:
{plan}"""


@lru_cache(maxsize=8)
def load_prompt(filename: str) -> str:
    """Load a prompt from the prompts directory.

    Args:
        filename: Name of the prompt file (e.g., "coach_system.txt")

    Returns:
        Prompt content as string

    Raises:
        FileNotFoundError: If prompt file doesn't exist
    """
    prompt_path = PROMPTS_DIR / filename
    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt file not found: {prompt_path}")
    return prompt_path.read_text(encoding="utf-8").strip()


def build_rag_section(passages: list[RetrievedPassage]) -> str:
    if not passages:
        return ""
    section = RAG_SECTION_HEADER
    for index, passage in enumerate(passages, start=1):
        section += f"## Source {index} ({passage.collection})\n{passage.content}\n\n"
    return section


def build_system_prompt(context: CoachContext, rag_section: str = "") -> str:
    """Persona template, optional persona block, user context, then reference passages."""
    prompt = load_prompt("coach_system.txt")

    persona = context.coach_persona
    if persona is not None:
        prompt += "\n\n# Your Persona\n\n"
        prompt += f"Your name is {persona.name}.\n"
        if persona.description:
            prompt += f"Description: {persona.description}\n"
        if persona.tone:
            prompt += f"Tone: {persona.tone}\n"
        prompt += f"You must embody this persona in your response. Introduce yourself as {persona.name} if asked."

    prompt += "\n\n# User Context\n\n"
    if context.user_name:
        prompt += f"User's name: {context.user_name}\n"
    if context.user_age:
        prompt += f"User's age: {context.user_age}\n"
    if context.limitations:
        prompt += f"User's limitations: {', '.join(context.limitations)}\n"
    if context.motivation_profile:
        prompt += f"Motivation profile: {context.motivation_profile}\n"

    return prompt + rag_section
