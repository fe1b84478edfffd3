"""
Saved projects, kept in a single JSON file.
"""

import json
import logging
import random
import string
import time
from pathlib import Path
from typing import List, Union
from pydantic import ValidationError
from .errors import ProjectNotFoundError
from .models import Project

logger = logging.getLogger("harvester")

ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id(length: int = 9) -> str:
    """Short random base36 identifier."""
    return ''.join(random.choice(ID_ALPHABET) for _ in range(length))


class ProjectStore:
    """Reads and writes projects, newest first."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def list(self) -> List[Project]:
        if not self.path.exists():
            return []
        try:
            with open(self.path) as f:
                data = json.load(f)
            return [Project.model_validate(p) for p in data]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.error("Failed to load projects from %s: %s", self.path, e)
            return []

    def get(self, project_id: str) -> Project:
        for project in self.list():
            if project.id == project_id:
                return project
        raise ProjectNotFoundError(project_id)

    def save(self, project: Project) -> List[Project]:
        """Insert a new project at the front, or replace an existing one."""
        projects = self.list()
        now = time.time()

        for i, existing in enumerate(projects):
            if existing.id == project.id:
                projects[i] = project.model_copy(update={"updated_at": now})
                break
        else:
            projects.insert(0, project.model_copy(update={"created_at": now, "updated_at": now}))

        self._write(projects)
        return projects

    def delete(self, project_id: str) -> List[Project]:
        projects = [p for p in self.list() if p.id != project_id]
        self._write(projects)
        return projects

    def _write(self, projects: List[Project]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump([p.model_dump(mode='json', by_alias=True) for p in projects], f, indent=2)
