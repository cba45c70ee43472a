"""Adapt operations over a project's build output."""

from .flow import AdaptReport, adapt_project
from .runner import copy_files, transform_files
from .steps import Adapter

__all__ = ["AdaptReport", "Adapter", "adapt_project", "copy_files", "transform_files"]
