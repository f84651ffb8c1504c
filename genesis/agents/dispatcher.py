"""Agent Dispatcher — routes a user query to a role persona with project context.

ENGINEER and RESEARCHER calls are stateless. GENERIC covers the free-form
tools (BRAINSTORM, PLAN, CRITIQUE) and multi-turn CHAT; chat replays the full
ChatHistory on every call. Nothing here persists output: the caller decides
whether to save a result to the NoteLedger.
"""

from genesis.config import get_config
from genesis.ledger import NoteLedger, note_category
from genesis.state import VALID_ROLES, AgentRequest, ChatTurn, Project
from genesis.utils.llm import TextGenerationError, generate_text
from genesis.utils.parsing import report
from genesis.utils.persona import with_persona

DEFAULT_RECENT_NOTES = 3
DEFAULT_EXCERPT_CHARS = 400
VALID_TASKS = {"BRAINSTORM", "PLAN", "CRITIQUE", "CHAT"}

ROLE_FRAMES = {
    "ENGINEER": """\
ROLE: LEAD SYSTEMS ENGINEER
Expertise: mechanical systems, thermodynamics, control theory, embedded software, \
and industrial design.
Objective: solve hardware/software bottlenecks with extreme precision.
Standard: aerospace-grade reliability and efficiency.\
""",
    "RESEARCHER": """\
ROLE: PRINCIPAL RESEARCHER
Expertise: first-principles market fit, competitive teardowns, and material \
feasibility.
Objective: uncover hidden risks and identify the highest-leverage technical \
opportunities.
Standard: academic rigor combined with venture speed.\
""",
    "GENERIC": """\
ROLE: BUILD PARTNER
Help with whatever the user asks about this project: brainstorming, planning, \
critique, or open conversation. Ground every answer in the project context.\
""",
}

# Instruction appended to the GENERIC frame per task.
TASK_INSTRUCTIONS = {
    "BRAINSTORM": "Provide 3 high-leverage strategic moves or features for this project.",
    "PLAN": "Produce an execution map: ordered milestones, each with concrete deliverables.",
    "CRITIQUE": "Run a brutal feasibility audit. Identify the most likely point of failure.",
    "CHAT": "",
}

FALLBACKS = {
    "ENGINEER": "Engineering agent unavailable. No analysis was produced; try again shortly.",
    "RESEARCHER": "Research agent unavailable. No findings were produced; try again shortly.",
    "GENERIC": "The assistant is momentarily unavailable. Nothing was generated.",
}


def _excerpt(text: str, limit: int) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3].rstrip() + "..."


def assemble_context(project: Project) -> str:
    """Project title, description, whiteboard, and a bounded excerpt of recent notes."""
    config = get_config()
    limit = config.get("recent_notes_limit", DEFAULT_RECENT_NOTES)
    excerpt_chars = config.get("note_excerpt_chars", DEFAULT_EXCERPT_CHARS)

    recent = NoteLedger(project).recent(limit)
    if recent:
        notes = "\n".join(
            f"- [{note_category(n)}] {_excerpt(n['content'], excerpt_chars)}" for n in recent
        )
    else:
        notes = "(no notes yet)"

    return (
        f"Project: {project.get('title', '')}\n"
        f"Description: {project.get('description', '')}\n\n"
        f"## Whiteboard\n{project.get('whiteboard', '') or '(empty)'}\n\n"
        f"## Recent Notes\n{notes}"
    )


class ChatHistory:
    """Append-only speaker/text log for the GENERIC chat role.

    Owned by whoever drives the conversation; the dispatcher replays it in
    full on every chat call and never truncates it.
    """

    def __init__(self, turns: list[ChatTurn] | None = None):
        self.turns: list[ChatTurn] = list(turns or [])

    def append(self, speaker: str, text: str) -> ChatTurn:
        if speaker not in ("user", "agent"):
            raise ValueError(f"Invalid speaker '{speaker}'. Must be 'user' or 'agent'.")
        turn: ChatTurn = {"speaker": speaker, "text": text}
        self.turns.append(turn)
        return turn

    def __len__(self) -> int:
        return len(self.turns)


class AgentDispatcher:
    """Selects a role frame, assembles context, and calls the text service."""

    MODEL_KEYS = {
        "ENGINEER": "engineer_model",
        "RESEARCHER": "researcher_model",
        "GENERIC": "generic_model",
    }

    def build_request(
        self, role: str, user_input: str, project: Project, task: str | None = None
    ) -> AgentRequest:
        if role not in VALID_ROLES:
            raise ValueError(f"Invalid role '{role}'. Must be one of: {VALID_ROLES}")
        if role == "GENERIC":
            task = task or "CHAT"
            if task not in VALID_TASKS:
                raise ValueError(f"Invalid task '{task}'. Must be one of: {VALID_TASKS}")
        else:
            task = None
        return {
            "role": role,
            "task": task,
            "user_input": user_input,
            "assembled_context": assemble_context(project),
        }

    def _system_prompt(self, request: AgentRequest) -> str:
        frame = ROLE_FRAMES[request["role"]]
        instruction = TASK_INSTRUCTIONS.get(request["task"] or "", "")
        if instruction:
            frame = f"{frame}\n\nTask: {instruction}"
        return with_persona(frame)

    def _user_prompt(self, request: AgentRequest) -> str:
        query = request["user_input"].strip() or "(no additional instructions)"
        return f"## Current Project Context\n{request['assembled_context']}\n\n## User Query\n{query}"

    async def dispatch(
        self, role: str, user_input: str, project: Project, task: str | None = None
    ) -> str:
        """Run one stateless agent call. Returns the raw text or a role fallback."""
        request = self.build_request(role, user_input, project, task)
        try:
            return await generate_text(
                self.MODEL_KEYS[role], self._system_prompt(request), self._user_prompt(request)
            )
        except TextGenerationError as exc:
            report(f"{role} agent call failed ({exc}). Returning fallback.")
            return FALLBACKS[role]

    async def chat(self, user_input: str, project: Project, history: ChatHistory) -> str:
        """GENERIC multi-turn chat.

        Replays every prior turn, then appends the user turn and the reply to
        ``history``. On failure the history is left as it was.
        """
        request = self.build_request("GENERIC", user_input, project, "CHAT")
        role = request["role"]
        try:
            reply = await generate_text(
                self.MODEL_KEYS[role],
                self._system_prompt(request),
                self._user_prompt(request),
                history=history.turns,
            )
        except TextGenerationError as exc:
            report(f"Chat call failed ({exc}). History left unchanged.")
            return FALLBACKS[role]

        history.append("user", user_input)
        history.append("agent", reply)
        return reply
