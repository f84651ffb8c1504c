"""Note Ledger — append-only, category-tagged timeline of project notes.

Notes are stored newest first. The ledger mutates the ``notes`` list of the
Project dict it wraps; it never edits a note once created.
"""

import uuid
from datetime import datetime, timezone

from genesis.state import ALL_CATEGORIES, VALID_CATEGORIES, Project, ProjectNote

DEFAULT_CATEGORY = "GENERAL"

# Static metadata per category, independent of any renderer.
CATEGORIES = {
    "GENERAL": {"label": "General", "icon": "notes", "group": "reference"},
    "IDEA": {"label": "Ideas", "icon": "lightbulb", "group": "thinking"},
    "PLAN": {"label": "Plans", "icon": "assignment", "group": "execution"},
    "RESEARCH": {"label": "Research", "icon": "science", "group": "thinking"},
    "LOG": {"label": "Build Logs", "icon": "history_edu", "group": "execution"},
}

# Which category AI output lands in when the user saves it, keyed by the
# agent role or GENERIC task that produced it.
SOURCE_CATEGORIES = {
    "BRAINSTORM": "IDEA",
    "PLAN": "PLAN",
    "CRITIQUE": "RESEARCH",
    "RESEARCHER": "RESEARCH",
    "ENGINEER": "LOG",
    "CHAT": "GENERAL",
}


def category_for_source(source: str | None) -> str:
    """Return the note category for output produced by ``source``."""
    if not source:
        return DEFAULT_CATEGORY
    return SOURCE_CATEGORIES.get(source.upper(), DEFAULT_CATEGORY)


def note_category(note: ProjectNote) -> str:
    """Category of a stored note; notes saved without one read as GENERAL."""
    return note.get("category") or DEFAULT_CATEGORY


class NoteLedger:
    """Categorized record of project activity, newest first."""

    def __init__(self, project: Project):
        self.project = project
        self.project.setdefault("notes", [])

    @property
    def notes(self) -> list[ProjectNote]:
        return self.project["notes"]

    def append(self, content: str, category: str = DEFAULT_CATEGORY) -> ProjectNote | None:
        """Insert a new note at the head of the ledger.

        Empty or whitespace-only content is rejected as a no-op and returns
        None. Raises ValueError for an unknown category.
        """
        if category not in VALID_CATEGORIES:
            raise ValueError(
                f"Invalid category '{category}'. Must be one of: {VALID_CATEGORIES}"
            )
        if not isinstance(content, str) or not content.strip():
            return None

        note: ProjectNote = {
            "id": uuid.uuid4().hex,
            "content": content,
            "category": category,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        self.notes.insert(0, note)
        return note

    def filter(self, category: str = ALL_CATEGORIES) -> list[ProjectNote]:
        """Return notes in ``category`` (or all of them), in ledger order."""
        if category == ALL_CATEGORIES:
            return list(self.notes)
        return [n for n in self.notes if note_category(n) == category]

    def recent(self, limit: int) -> list[ProjectNote]:
        """Return the ``limit`` newest notes."""
        return self.notes[: max(limit, 0)]

    def delete(self, note_id: str) -> bool:
        """Remove one note by id. Remaining notes keep their order."""
        for i, note in enumerate(self.notes):
            if note["id"] == note_id:
                del self.notes[i]
                return True
        return False

    def counts(self) -> dict[str, int]:
        """Number of notes per category, for filter tabs."""
        totals = {category: 0 for category in CATEGORIES}
        for note in self.notes:
            totals[note_category(note)] = totals.get(note_category(note), 0) + 1
        return totals
