"""Project aggregate helpers — creation and direct user edits."""

import uuid

from genesis.state import VALID_STATUSES, Project

TITLE_WORDS = 5


def derive_title(idea: str) -> str:
    """Auto title: the first few words of the idea, marked as truncated."""
    words = idea.split()
    if len(words) <= TITLE_WORDS:
        return " ".join(words)
    return " ".join(words[:TITLE_WORDS]) + "..."


def new_project(idea: str, whiteboard: str, status: str = "IN_PROGRESS") -> Project:
    """Build a Project from a wizard idea and its synthesized whiteboard."""
    if status not in VALID_STATUSES:
        raise ValueError(f"Invalid status '{status}'. Must be one of: {VALID_STATUSES}")
    return {
        "id": uuid.uuid4().hex,
        "title": derive_title(idea),
        "description": idea,
        "whiteboard": whiteboard,
        "status": status,
        "notes": [],
    }


def set_status(project: Project, status: str) -> Project:
    if status not in VALID_STATUSES:
        raise ValueError(f"Invalid status '{status}'. Must be one of: {VALID_STATUSES}")
    project["status"] = status
    return project


def set_description(project: Project, description: str) -> Project:
    project["description"] = description
    return project
