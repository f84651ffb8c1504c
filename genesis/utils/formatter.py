"""Output Formatter — renders a project's whiteboard and note ledger as Markdown."""

import re
from pathlib import Path

from genesis.config import get_config
from genesis.ledger import CATEGORIES, note_category
from genesis.state import Project

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slugify(title: str) -> str:
    slug = _SLUG_RE.sub("-", title.lower()).strip("-")
    return slug or "project"


def _render_markdown(project: Project) -> str:
    """Convert a Project into a Markdown context book."""
    lines = []

    title = project.get("title") or "Untitled Project"
    lines.append(f"# {title}")
    lines.append("")
    lines.append(f"**Status:** {project.get('status', 'IDEA')}")
    lines.append("")

    description = project.get("description", "")
    if description:
        lines.append("## Description")
        lines.append("")
        lines.append(description)
        lines.append("")

    lines.append("## Whiteboard")
    lines.append("")
    lines.append(project.get("whiteboard") or "*Empty.*")
    lines.append("")

    notes = project.get("notes", [])
    if notes:
        lines.append("## Notes")
        lines.append("")
        for note in notes:
            label = CATEGORIES.get(note_category(note), CATEGORIES["GENERAL"])["label"]
            lines.append(f"### {label} — {note.get('createdAt', '')}")
            lines.append("")
            lines.append(note["content"])
            lines.append("")

    return "\n".join(lines)


def write_project(project: Project, output_dir: str | Path | None = None) -> Path:
    """Write the project's Markdown export and return its path."""
    if output_dir is None:
        output_dir = get_config().get("export_dir", "./output")
    path = Path(output_dir) / f"{_slugify(project.get('title', ''))}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_render_markdown(project), encoding="utf-8")
    return path
