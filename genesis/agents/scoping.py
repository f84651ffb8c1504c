"""Scoping Agent — asks the clarifying questions that isolate a new idea's MVP.

Required output schema: a JSON array of non-empty strings, e.g.
["What is the core problem?", "Who is the primary user?", "..."]
"""

from genesis.utils.llm import TextGenerationError, generate_json
from genesis.utils.parsing import report
from genesis.utils.persona import with_persona

QUESTION_COUNT = 3

DEFAULT_QUESTIONS = [
    "What is the core problem?",
    "Who is the primary user?",
    "What is the single failure point?",
]

SYSTEM_PROMPT = f"""\
ROLE: PROJECT SCOPER
You receive a brand-new project idea. Ask {QUESTION_COUNT} fundamental, simple \
questions whose answers isolate the minimum viable product.

You MUST respond with a JSON array of strings, one question per entry, e.g.:
["question one", "question two", "question three"]

Respond ONLY with the JSON array. No markdown fences, no commentary.\
"""


def _validate_questions(data) -> list[str]:
    """Validate the scoping response and return the cleaned question list."""
    if not isinstance(data, list):
        raise ValueError("Scoping response must be a JSON array.")
    if not data:
        raise ValueError("Scoping response contained no questions.")
    questions = []
    for i, item in enumerate(data):
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"Question {i} is not a non-empty string.")
        questions.append(item.strip())
    return questions


async def generate_scoping_questions(idea: str) -> list[str]:
    """Return clarifying questions for ``idea``.

    Falls back to DEFAULT_QUESTIONS when the service errors or the payload
    does not validate. Never raises.
    """
    user_prompt = f'New idea: "{idea}"'
    try:
        return await generate_json(
            "question_model", with_persona(SYSTEM_PROMPT), user_prompt, _validate_questions
        )
    except TextGenerationError as exc:
        report(f"Scoping questions unavailable ({exc}). Using default questions.")
        return list(DEFAULT_QUESTIONS)
