"""Project wizard — the genesis state machine and the controller that drives it.

States: IDLE -> INPUT_IDEA -> AI_QUESTIONING -> USER_ANSWERING -> GENERATING_PLAN -> IDLE.
``cancel`` returns to IDLE from anywhere. ``transition`` is a pure function
over WizardSession values; WizardController adds the service calls, the
project creation, and the discarding of responses that outlive their session.
"""

import uuid

from genesis.agents.scoping import DEFAULT_QUESTIONS
from genesis.config import get_config
from genesis.graph import run_single_step
from genesis.project import new_project
from genesis.state import Project, WizardSession
from genesis.utils.parsing import report
from genesis.utils.store import ProjectRepository
from genesis.utils.validator import validate_input

DEFAULT_NEW_PROJECT_STATUS = "IN_PROGRESS"


def new_session() -> WizardSession:
    """An empty IDLE session with a fresh token."""
    return {
        "session_id": uuid.uuid4().hex,
        "state": "IDLE",
        "idea": "",
        "questions": [],
        "answers": [],
    }


def _start(session: WizardSession, _payload) -> WizardSession:
    if session["state"] != "IDLE":
        return session
    return {**new_session(), "state": "INPUT_IDEA"}


def _submit_idea(session: WizardSession, idea) -> WizardSession:
    if session["state"] != "INPUT_IDEA":
        return session
    try:
        idea = validate_input(idea)
    except ValueError:
        return session
    return {**session, "state": "AI_QUESTIONING", "idea": idea}


def _questions_ready(session: WizardSession, questions) -> WizardSession:
    if session["state"] != "AI_QUESTIONING":
        return session
    questions = [q for q in (questions or []) if isinstance(q, str) and q.strip()]
    if not questions:
        questions = list(DEFAULT_QUESTIONS)
    return {
        **session,
        "state": "USER_ANSWERING",
        "questions": questions,
        "answers": [""] * len(questions),
    }


def _set_answer(session: WizardSession, payload) -> WizardSession:
    if session["state"] != "USER_ANSWERING":
        return session
    index, text = payload
    if not 0 <= index < len(session["answers"]):
        return session
    answers = list(session["answers"])
    answers[index] = text or ""
    return {**session, "answers": answers}


def _submit_answers(session: WizardSession, _payload) -> WizardSession:
    if session["state"] != "USER_ANSWERING" or not can_submit_answers(session):
        return session
    return {**session, "state": "GENERATING_PLAN"}


def _plan_ready(session: WizardSession, _payload) -> WizardSession:
    if session["state"] != "GENERATING_PLAN":
        return session
    return new_session()


def _cancel(session: WizardSession, _payload) -> WizardSession:
    return new_session()


_TRANSITIONS = {
    "start": _start,
    "submit_idea": _submit_idea,
    "questions_ready": _questions_ready,
    "set_answer": _set_answer,
    "submit_answers": _submit_answers,
    "plan_ready": _plan_ready,
    "cancel": _cancel,
}


def transition(session: WizardSession, event: str, payload=None) -> WizardSession:
    """Return the session that follows ``event``.

    Events that are not valid in the current state return ``session`` itself,
    unchanged. Unknown event names raise ValueError.
    """
    if event not in _TRANSITIONS:
        raise ValueError(f"Unknown wizard event '{event}'. Must be one of: {set(_TRANSITIONS)}")
    return _TRANSITIONS[event](session, payload)


def can_submit_answers(session: WizardSession) -> bool:
    """Answers may be submitted once every question has an initialised slot."""
    return (
        session["state"] == "USER_ANSWERING"
        and bool(session["questions"])
        and len(session["answers"]) == len(session["questions"])
    )


class WizardController:
    """Drives one wizard session at a time and creates the resulting Project."""

    def __init__(self, repository: ProjectRepository | None = None):
        self.repository = repository
        self.session = new_session()

    @property
    def state(self) -> str:
        return self.session["state"]

    def _is_current(self, session_id: str, expected_state: str) -> bool:
        return self.session["session_id"] == session_id and self.state == expected_state

    def start(self) -> WizardSession:
        """Open a new session, discarding any session already in flight."""
        if self.state != "IDLE":
            self.cancel()
        self.session = transition(self.session, "start")
        return self.session

    def cancel(self) -> WizardSession:
        self.session = transition(self.session, "cancel")
        return self.session

    async def submit_idea(self, idea: str) -> bool:
        """Submit the idea and wait for the scoping questions.

        Returns False if the idea was rejected or the session was cancelled
        while the questions were being generated.
        """
        next_session = transition(self.session, "submit_idea", idea)
        if next_session is self.session:
            return False
        self.session = next_session
        session_id = self.session["session_id"]

        result = await run_single_step(
            {"idea": self.session["idea"], "questions": [], "answers": [], "whiteboard": ""},
            "questioning",
        )
        if not self._is_current(session_id, "AI_QUESTIONING"):
            report("Wizard session ended before questions arrived. Discarding them.")
            return False

        self.session = transition(self.session, "questions_ready", result["questions"])
        return True

    def set_answer(self, index: int, text: str) -> None:
        self.session = transition(self.session, "set_answer", (index, text))

    @property
    def can_submit_answers(self) -> bool:
        return can_submit_answers(self.session)

    async def submit_answers(self) -> Project | None:
        """Synthesize the whiteboard and create the project.

        Returns the new Project, or None if submission was not allowed or the
        session was cancelled while the whiteboard was being generated.
        """
        next_session = transition(self.session, "submit_answers")
        if next_session is self.session:
            return None
        self.session = next_session
        session_id = self.session["session_id"]
        idea = self.session["idea"]

        result = await run_single_step(
            {
                "idea": idea,
                "questions": list(self.session["questions"]),
                "answers": list(self.session["answers"]),
                "whiteboard": "",
            },
            "planning",
        )
        if not self._is_current(session_id, "GENERATING_PLAN"):
            report("Wizard session ended before the whiteboard arrived. No project created.")
            return None

        status = get_config().get("new_project_status", DEFAULT_NEW_PROJECT_STATUS)
        project = new_project(idea, result["whiteboard"], status)
        if self.repository is not None:
            self.repository.add(project)

        self.session = transition(self.session, "plan_ready")
        return project
