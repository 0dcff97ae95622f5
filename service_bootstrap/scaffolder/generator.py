"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and generates a Go service directory from the
bundled template tree, then bootstraps the Go module inside it.

Every file entry of the tree is consulted in order: the inclusion policy
decides whether it is emitted, the path mapper decides where it lands and the
renderer produces its bytes.  The walk is fail-fast; files already written
are left in place when a later entry fails.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rich.markup import escape

from service_bootstrap.config import ProjectConfig, ToolchainConfig
from service_bootstrap.errors import ConfigurationError, OutputWriteError
from service_bootstrap.utils import print_success

from .policy import should_emit
from .templates import TemplateRenderer, TemplateTree, default_tree, map_destination
from .toolchain import BootstrapResult, ToolchainBootstrapper


@dataclass
class GenerationResult:
    """Outcome of a generation run.

    Only returned when generation succeeded; every fatal failure is raised
    instead, so there is no success flag.
    """

    project_dir: Path
    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    bootstrap: Optional[BootstrapResult] = None

    @property
    def warnings(self) -> list[str]:
        return list(self.bootstrap.warnings) if self.bootstrap else []


class ProjectGenerator:
    """Renders the template tree for one ``ProjectConfig``.

    The config is never modified.  One generator instance corresponds to one
    output tree; nothing is carried over between runs.
    """

    def __init__(
        self,
        config: ProjectConfig,
        tree: Optional[TemplateTree] = None,
        toolchain: Optional[ToolchainConfig] = None,
    ) -> None:
        self.config = config
        self.tree = tree if tree is not None else default_tree()
        self.renderer = TemplateRenderer(self.tree)
        self.bootstrapper = ToolchainBootstrapper(toolchain)

    # -- Public API --------------------------------------------------------

    def resolve_project_dir(self, output_dir: str | Path | None = None) -> Path:
        """Return the absolute directory the project is generated into.

        ``project_name`` is joined onto *output_dir* (default: the current
        directory); an absolute ``project_name`` is used as is.

        Raises:
            ConfigurationError: If the path cannot be resolved or names an
                existing non-directory.
        """
        base = Path(output_dir) if output_dir is not None else Path.cwd()
        try:
            project_dir = (base / self.config.project_name).resolve()
        except (OSError, RuntimeError) as exc:
            raise ConfigurationError(
                f"Could not resolve project path for {self.config.project_name!r}: {exc}"
            ) from exc
        if project_dir.exists() and not project_dir.is_dir():
            raise ConfigurationError(f"Project path exists and is not a directory: {project_dir}")
        return project_dir

    async def generate(
        self,
        output_dir: str | Path | None = None,
        *,
        bootstrap: bool = True,
    ) -> GenerationResult:
        """Generate the project tree and bootstrap the Go module.

        Args:
            output_dir: Parent directory for the project folder.  Defaults to
                the current working directory.
            bootstrap: Run the toolchain steps after writing files.

        Returns:
            A ``GenerationResult`` listing written and skipped entries.

        Raises:
            ConfigurationError: Before anything is written.
            TemplateRenderError: A template failed; partial output remains.
            OutputWriteError: A file or directory could not be written.
            ToolchainError: Module init or dependency tidy failed.
        """
        project_dir = self.resolve_project_dir(output_dir)
        result = GenerationResult(project_dir=project_dir)

        try:
            await asyncio.to_thread(project_dir.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteError(project_dir, exc.strerror or str(exc)) from exc

        await self.render_tree(project_dir, result)

        if bootstrap:
            result.bootstrap = await self.bootstrapper.run(project_dir, self.config.module)

        print_success(f"Project '{escape(self.config.project_name)}' generated successfully!")
        return result

    async def render_tree(self, project_dir: Path, result: GenerationResult) -> None:
        """Walk the template tree, writing every emitted entry under *project_dir*."""
        context = self.config.template_context()

        for entry in self.tree:
            # Directories are created on demand when their files are written.
            if entry.is_dir:
                continue

            if not should_emit(entry.path, self.config):
                result.skipped.append(entry.path)
                continue

            destination = map_destination(entry.path, project_dir)
            try:
                await self.renderer.render_to_file(entry.path, destination, context)
            except OSError as exc:
                raise OutputWriteError(destination, exc.strerror or str(exc)) from exc
            result.written.append(destination)
