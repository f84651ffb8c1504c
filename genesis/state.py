"""Genesis state — the Project aggregate, the wizard session, and agent requests."""

from typing import Literal, TypedDict

ProjectStatus = Literal["IDEA", "IN_PROGRESS", "ON_HOLD", "COMPLETED"]
NoteCategory = Literal["GENERAL", "IDEA", "PLAN", "RESEARCH", "LOG"]
WizardState = Literal["IDLE", "INPUT_IDEA", "AI_QUESTIONING", "USER_ANSWERING", "GENERATING_PLAN"]
AgentRole = Literal["ENGINEER", "RESEARCHER", "GENERIC"]
Speaker = Literal["user", "agent"]

VALID_STATUSES = {"IDEA", "IN_PROGRESS", "ON_HOLD", "COMPLETED"}
VALID_CATEGORIES = {"GENERAL", "IDEA", "PLAN", "RESEARCH", "LOG"}
VALID_ROLES = {"ENGINEER", "RESEARCHER", "GENERIC"}
ALL_CATEGORIES = "ALL"


class ProjectNote(TypedDict):
    id: str
    content: str
    category: NoteCategory
    createdAt: str  # UTC ISO-8601


class Project(TypedDict):
    id: str
    title: str
    description: str
    whiteboard: str  # Accumulated project understanding. One per project.
    status: ProjectStatus
    notes: list[ProjectNote]  # Newest first.


class WizardSession(TypedDict):
    session_id: str  # Token used to drop responses that arrive after cancel.
    state: WizardState
    idea: str
    questions: list[str]
    answers: list[str]  # Aligned with questions; "" for unanswered slots.


class GenesisState(TypedDict):
    """State passed through the genesis graph nodes."""

    idea: str
    questions: list[str]
    answers: list[str]
    whiteboard: str


class AgentRequest(TypedDict):
    role: AgentRole
    task: str | None  # GENERIC only: BRAINSTORM | PLAN | CRITIQUE | CHAT
    user_input: str
    assembled_context: str


class ChatTurn(TypedDict):
    speaker: Speaker
    text: str
