"""Exceptions raised while generating a project.

Every fatal condition carries the file or command it concerns so the caller
can report something actionable.  Nothing here is retried automatically.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class GenerationError(Exception):
    """Base class for every fatal generation failure."""


class ConfigurationError(GenerationError):
    """Raised when the config or the output location is unusable.

    Always raised before anything is written to disk.
    """


class TemplateTreeError(GenerationError):
    """Raised when the bundled template tree itself is inconsistent."""


class TemplateRenderError(GenerationError):
    """Raised when a template fails to parse or references an undefined name."""

    def __init__(self, template_path: str, message: str, lineno: Optional[int] = None):
        self.template_path = template_path
        self.lineno = lineno
        location = f"{template_path}:{lineno}" if lineno else template_path
        super().__init__(f"Error rendering template {location}: {message}")


class OutputWriteError(GenerationError):
    """Raised when a destination directory or file cannot be written."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"Error writing {path}: {message}")


class ToolchainError(GenerationError):
    """Raised when a fatal toolchain step (module init, tidy) fails."""

    def __init__(
        self,
        message: str,
        command: str = "",
        stderr: str = "",
        returncode: Optional[int] = None,
    ):
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(message)
