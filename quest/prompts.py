from __future__ import annotations

import typing as t

from quest.styles import StyleDescriptor, get_style

EXAMPLES_START = "<!-- examples -->"
EXAMPLES_END = "<!-- end examples -->"

_KEY_INSTRUCTIONS = """Key Instructions:
1. Create HIGHLY DETAILED and VIVID scenes that bring the learning material to life
2. Use rich sensory descriptions and environmental details to enhance immersion
3. Create complex, thought-provoking questions that encourage deep understanding
4. Provide diverse example approaches that showcase different thinking strategies
5. Evaluate answers thoroughly and award medals based on:
   - Bronze: Basic understanding with some key concepts identified
   - Silver: Good comprehension with clear application and connections
   - Gold: Exceptional understanding with creative application, unique insights, or complex connections"""

_EVALUATION_INSTRUCTIONS = """Provide a detailed evaluation:
1. Thorough analysis of their understanding
2. Specific examples from their answer that demonstrate comprehension
3. Detailed explanation of any misconceptions
4. Clear connections to previous concepts
5. Award exactly one medal (bronze, silver or gold) if deserved, or none, with specific reasoning
6. Lead into the next concept with a compelling scenario"""

_OPENING_INSTRUCTIONS = "Create an engaging first learning scenario"

_MEDAL_CONTRACT = """{
    "type": "bronze|silver|gold",
    "message": "Detailed explanation of why they earned this medal",
    "timestamp": <current time in epoch milliseconds>
  } or null if no medal is deserved"""

_GUIDELINES = """Guidelines:
- Create immersive, detailed scenes that enhance learning
- Ask complex questions that require deep understanding
- Provide diverse and detailed example approaches
- Give thorough, constructive feedback
- Use the style elements to create memorable learning experiences
- Ensure your response is valid JSON"""


def build_context(pdf_text: str | None, notes: str | None) -> str:
    """Combine extracted PDF text and free-form notes into the session context.

    Raises ``ValueError`` when both are blank; there is nothing to learn from.
    """
    pdf_text = pdf_text or ""
    notes = notes or ""
    if not pdf_text.strip() and not notes.strip():
        raise ValueError("Upload a PDF or add some notes before starting.")
    return f"{pdf_text}\n{notes}"


def _response_format(latest_answer: str | None) -> str:
    medal = _MEDAL_CONTRACT if latest_answer else "null"
    return f"""Response Format (JSON):
{{
  "scene": "Your detailed response, including:
    - Rich environmental descriptions
    - Clear educational content
    - Thought-provoking questions
    - Include example approaches between {EXAMPLES_START} and {EXAMPLES_END} tags, one per line",
  "examples": [
    "Detailed example approach 1 showing one way of thinking",
    "Detailed example approach 2 showing an alternative perspective",
    "Detailed example approach 3 demonstrating creative problem-solving"
  ],
  "medal": {medal}
}}"""


def compose_prompt(
    context: str,
    history: t.Sequence[str],
    style: str | StyleDescriptor,
    latest_answer: str | None = None,
) -> str:
    """Build the single instruction sent to Gemini for one turn.

    Pure: the same inputs always give the same text. ``history`` holds the
    answers accepted before this turn, oldest first.
    """
    descriptor = get_style(style)

    if latest_answer:
        task = f"Student's answer: {latest_answer}\n\n{_EVALUATION_INSTRUCTIONS}"
    else:
        task = _OPENING_INSTRUCTIONS

    sections = [
        "You are an expert educational AI creating an immersive learning experience with the following content:",
        context,
        f"Style Context: {descriptor.prompt_fragment}",
        _KEY_INSTRUCTIONS,
        "Previous answers:\n" + "\n".join(history),
        task,
        _response_format(latest_answer),
        _GUIDELINES,
    ]
    return "\n\n".join(sections)
