"""Services layer: orchestration on top of core, git and output."""

from .batch import BatchService, build_workflow

__all__ = ["BatchService", "build_workflow"]
