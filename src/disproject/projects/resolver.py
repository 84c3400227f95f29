"""ProjectResolver: path -> Project, plus known-project bookkeeping."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ..core.utils import canonical_path, is_under
from .models import Project, VCSBackend
from .registry import KnownProjectsRegistry
from .workspace import Workspace

logger = logging.getLogger(__name__)


class ProjectResolver:
    """Resolve paths to projects and keep the known-projects registry current.

    Never prompts: a failed resolution returns None and the caller decides.
    """

    def __init__(self, registry: KnownProjectsRegistry, workspace: Workspace | None = None):
        self.registry = registry
        self.workspace = workspace or Workspace()

    def lookup(self, path: str | Path) -> Project | None:
        """Resolve without touching the registry."""
        root = self.workspace.find_project_root(canonical_path(path))
        if root is None:
            return None
        root = canonical_path(root)
        return Project(root=root, backend=self.workspace.backend_for(root))

    def resolve(self, path: str | Path) -> Project | None:
        project = self.lookup(path)
        if project is None:
            logger.debug("no project found for %s", path)
            return None
        self.remember(project)
        return project

    def remember(self, project: Project) -> None:
        self.registry.remember(project.root)

    def known_projects(self) -> list[Project]:
        projects = []
        for root in self.registry.roots():
            if root.is_dir():
                projects.append(Project(root=root, backend=self.workspace.backend_for(root)))
            else:
                projects.append(Project(root=root, backend=VCSBackend.NONE))
        return projects

    def active_projects(self, open_paths: Iterable[str | Path]) -> list[Project]:
        """Projects owning the given open resources, in order, one per root."""
        seen: dict[Path, Project] = {}
        for path in open_paths:
            project = self.lookup(path)
            if project is not None and project.root not in seen:
                seen[project.root] = project
        return list(seen.values())

    def forget(self, project: Project | Path) -> bool:
        root = project.root if isinstance(project, Project) else canonical_path(project)
        return bool(self.registry.forget_many([root]))

    def forget_under(self, path: str | Path) -> list[Path]:
        base = canonical_path(path)
        doomed = [r for r in self.registry.roots() if is_under(r, base)]
        return self.registry.forget_many(doomed)

    def forget_zombies(self) -> list[Path]:
        """Forget projects whose root directory no longer exists."""
        zombies = [r for r in self.registry.roots() if not r.is_dir()]
        return self.registry.forget_many(zombies)

    def remember_under(self, path: str | Path, max_depth: int = 3) -> list[Path]:
        """Register every project found at or below *path*; returns the new ones."""
        base = canonical_path(path)
        if not base.is_dir():
            return []
        found = [canonical_path(r) for r in self.workspace.discover(base, max_depth)]
        before = {str(r) for r in self.registry.roots()}
        self.registry.remember_many(found)
        return [r for r in found if str(r) not in before]
