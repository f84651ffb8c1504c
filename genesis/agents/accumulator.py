"""Context Accumulator — keeps the project whiteboard as the single source of truth.

The whiteboard is a free-form "living design document". The engine only ever merges new
facts into it (initial synthesis, Q&A refinement); the user may overwrite it
directly at any time. A failed service call never blanks or corrupts it:
refinement falls back to the unmodified input, synthesis to a marker string.
"""

import asyncio

from genesis.state import Project, ProjectNote
from genesis.utils.llm import TextGenerationError, generate_text
from genesis.utils.parsing import report
from genesis.utils.persona import with_persona

SYNTHESIS_FAILED_MARKER = (
    "[Whiteboard synthesis failed] The idea and answers were kept in the project "
    "description. Edit this whiteboard directly or refine it with a new question."
)
FALLBACK_QUESTION = "What's the next milestone?"

SYNTHESIS_PROMPT = """\
ROLE: PROJECT WHITEBOARD AUTHOR
Turn a new project idea and the founder's answers to scoping questions into the \
project's whiteboard: a living design document that captures everything currently known.

Structure it as Markdown with these sections:
## Mission
## Core Problem
## Target User
## MVP Scope
## Key Risks
## Open Questions

Use only facts present in the idea and answers; mark unknowns as open questions.\
"""

REFINE_PROMPT = """\
ROLE: PROJECT WHITEBOARD EDITOR
You maintain a project's whiteboard. Merge the new question/answer pair into the \
current whiteboard and return the FULL updated whiteboard.

Rules:
- Preserve every fact already on the whiteboard unless the new answer explicitly \
supersedes it.
- Keep the existing section structure; add to it rather than rewriting it.
- Move resolved items out of "Open Questions".
- Respond ONLY with the updated whiteboard text.\
"""

PROACTIVE_PROMPT = """\
ROLE: PROJECT INTERVIEWER
Read the project's whiteboard and its most recent notes, find the most important \
gap, and ask exactly ONE focused question about it.

Respond ONLY with the question.\
"""


def _format_qa(qa_pairs: list[dict]) -> str:
    return "\n".join(f"Q: {qa['question']}\nA: {qa['answer']}" for qa in qa_pairs)


def _format_notes(notes: list[ProjectNote]) -> str:
    if not notes:
        return "(no notes yet)"
    return "\n".join(f"- [{n.get('category') or 'GENERAL'}] {n['content']}" for n in notes)


class ContextAccumulator:
    """Owns whiteboard synthesis, refinement, and proactive questioning."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    async def synthesize_initial(self, idea: str, qa_pairs: list[dict]) -> str:
        """One-shot whiteboard from an idea plus its scoping Q&A.

        Returns SYNTHESIS_FAILED_MARKER on failure; never raises.
        """
        user_prompt = f"## Idea\n{idea}\n\n## Scoping Answers\n{_format_qa(qa_pairs)}"
        try:
            return await generate_text(
                "synthesis_model", with_persona(SYNTHESIS_PROMPT), user_prompt
            )
        except TextGenerationError as exc:
            report(f"Whiteboard synthesis failed ({exc}). Using placeholder.")
            return SYNTHESIS_FAILED_MARKER

    async def refine(self, current_whiteboard: str, question: str, answer: str) -> str:
        """Merge one new Q&A fact into the whiteboard.

        Returns ``current_whiteboard`` unchanged on failure.
        """
        user_prompt = (
            f"## Current Whiteboard\n{current_whiteboard}\n\n"
            f"## New Fact\nQ: {question}\nA: {answer}"
        )
        try:
            return await generate_text("refine_model", with_persona(REFINE_PROMPT), user_prompt)
        except TextGenerationError as exc:
            report(f"Whiteboard refinement failed ({exc}). Whiteboard left unchanged.")
            return current_whiteboard

    async def propose_question(self, whiteboard: str, recent_notes: list[ProjectNote]) -> str:
        """Ask for one proactive clarifying question; generic fallback on failure."""
        user_prompt = (
            f"## Whiteboard\n{whiteboard}\n\n## Recent Notes\n{_format_notes(recent_notes)}"
        )
        try:
            return await generate_text(
                "proactive_model", with_persona(PROACTIVE_PROMPT), user_prompt
            )
        except TextGenerationError as exc:
            report(f"Proactive question unavailable ({exc}). Using fallback question.")
            return FALLBACK_QUESTION

    def is_busy(self, project_id: str) -> bool:
        """True while a whiteboard-mutating call is outstanding for the project."""
        lock = self._locks.get(project_id)
        return lock is not None and lock.locked()

    async def refine_project(self, project: Project, question: str, answer: str) -> str:
        """Refine ``project``'s whiteboard in place, one call per project at a time.

        A call issued while another is in flight waits, then merges onto the
        whiteboard the previous call produced. If the user edits the whiteboard
        while the call is out, the edit wins and the merged result is dropped.
        """
        lock = self._locks.setdefault(project["id"], asyncio.Lock())
        async with lock:
            snapshot = project["whiteboard"]
            merged = await self.refine(snapshot, question, answer)
            if project["whiteboard"] != snapshot:
                report("Whiteboard was edited during refinement. Keeping the edit.")
            else:
                project["whiteboard"] = merged
        return project["whiteboard"]

    def edit(self, project: Project, text: str) -> str:
        """Direct user edit. Applied as-is, without the service."""
        project["whiteboard"] = text
        return text
