"""Projects: resolution, workspace markers, and the known-projects registry."""

from .models import Project, VCSBackend
from .registry import KnownProjectsRegistry
from .resolver import ProjectResolver
from .workspace import Workspace

__all__ = [
    "KnownProjectsRegistry",
    "Project",
    "ProjectResolver",
    "VCSBackend",
    "Workspace",
]
