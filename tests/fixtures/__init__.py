"""Shared testing fixtures for the docmorph test suite."""

from .backends import RecordingBackends, build_docx  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "RecordingBackends",
    "WorkspaceBuilder",
    "build_docx",
    "build_tree",
]
