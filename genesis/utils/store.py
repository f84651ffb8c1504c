"""Local persistence — a key -> JSON document store backed by one file.

Mirrors browser local storage: every ``set`` rewrites the whole file. The
ProjectRepository keeps the project collection under the ``app_projects`` key.
"""

import json
from pathlib import Path

from genesis.state import Project

PROJECTS_KEY = "app_projects"


class JsonStore:
    """Get/set whole JSON values by key."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        return json.loads(text) if text.strip() else {}

    def get(self, key: str, default=None):
        return self._load().get(key, default)

    def set(self, key: str, value) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)


class ProjectRepository:
    """Whole-Project reads and writes over a JsonStore."""

    def __init__(self, store: JsonStore):
        self.store = store

    def list(self) -> list[Project]:
        return self.store.get(PROJECTS_KEY, [])

    def get(self, project_id: str) -> Project | None:
        for project in self.list():
            if project["id"] == project_id:
                return project
        return None

    def add(self, project: Project) -> Project:
        projects = self.list()
        projects.append(project)
        self.store.set(PROJECTS_KEY, projects)
        return project

    def save(self, project: Project) -> Project:
        """Replace the stored copy of ``project`` (or add it if new)."""
        projects = self.list()
        for i, existing in enumerate(projects):
            if existing["id"] == project["id"]:
                projects[i] = project
                break
        else:
            projects.append(project)
        self.store.set(PROJECTS_KEY, projects)
        return project

    def delete(self, project_id: str) -> bool:
        projects = self.list()
        remaining = [p for p in projects if p["id"] != project_id]
        if len(remaining) == len(projects):
            return False
        self.store.set(PROJECTS_KEY, remaining)
        return True
