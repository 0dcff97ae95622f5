"""Go toolchain bootstrap for a freshly generated project.

Runs ``go mod init``, ``go mod tidy`` and an import formatter, one process at a
time, inside the project directory.  Module init and tidy are FATAL: the
project is unusable without them, so a failure raises :class:`ToolchainError`
and later steps never run.  The formatter is ADVISORY: a failure (including the
tool not being installed) becomes a warning and generation still succeeds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.markup import escape

from service_bootstrap.config import ToolchainConfig
from service_bootstrap.errors import ToolchainError
from service_bootstrap.utils import print_warning, run_command


class Severity(str, Enum):
    FATAL = "fatal"
    ADVISORY = "advisory"


@dataclass(frozen=True)
class ToolchainStep:
    """One external command run against the generated tree."""

    name: str
    args: tuple[str, ...]
    severity: Severity

    @property
    def command(self) -> str:
        return " ".join(self.args)


@dataclass
class StepResult:
    step: ToolchainStep
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0


@dataclass
class BootstrapResult:
    """Steps that ran and the warnings from advisory failures."""

    steps: list[StepResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def default_steps(module_path: str, settings: ToolchainConfig) -> tuple[ToolchainStep, ...]:
    """Build the fixed step sequence for *module_path*."""
    steps = [
        ToolchainStep(
            "module init",
            (settings.go_binary, "mod", "init", module_path),
            Severity.FATAL,
        ),
        ToolchainStep(
            "dependency tidy",
            (settings.go_binary, "mod", "tidy"),
            Severity.FATAL,
        ),
    ]
    if not settings.skip_format and settings.formatter:
        steps.append(
            ToolchainStep("import formatting", tuple(settings.formatter), Severity.ADVISORY)
        )
    return tuple(steps)


class ToolchainBootstrapper:
    """Runs the toolchain steps in order against a project directory."""

    def __init__(self, settings: Optional[ToolchainConfig] = None) -> None:
        self.settings = settings or ToolchainConfig()

    async def run(self, project_dir: str | Path, module_path: str) -> BootstrapResult:
        """Run every step, stopping at the first FATAL failure.

        Raises:
            ToolchainError: If module init or dependency tidy fails.
        """
        result = BootstrapResult()
        for step in default_steps(module_path, self.settings):
            step_result = await _run_step(step, Path(project_dir))
            result.steps.append(step_result)
            if step_result.ok:
                continue

            reason = step_result.error or f"exit {step_result.returncode}"
            if step_result.stderr:
                reason = f"{reason}: {step_result.stderr}"
            if step.severity is Severity.FATAL:
                raise ToolchainError(
                    f"Failed to run '{step.command}' ({step.name}): {reason}",
                    command=step.command,
                    stderr=step_result.stderr,
                    returncode=step_result.returncode,
                )

            warning = f"'{step.command}' failed, generated sources left unformatted: {reason}"
            result.warnings.append(warning)
            print_warning(f"Warning: {escape(warning)}")

        return result


async def _run_step(step: ToolchainStep, cwd: Path) -> StepResult:
    try:
        returncode, stdout, stderr = await run_command(list(step.args), cwd=cwd)
    except FileNotFoundError as exc:
        # Also raised for a missing working directory; only the program name
        # means the tool is not installed.
        if exc.filename == step.args[0]:
            return StepResult(step, error=f"executable not found: {step.args[0]}")
        return StepResult(step, error=str(exc))
    except OSError as exc:
        return StepResult(step, error=str(exc))
    return StepResult(step, returncode=returncode, stdout=stdout, stderr=stderr)
