"""Shared pytest fixtures for the Go Service Bootstrap test suite.

Provides reusable fixtures for:
- Temporary output directories
- Representative ``ProjectConfig`` values
- Small in-memory template trees
- Mock subprocess helpers for the Go toolchain steps
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable
from unittest.mock import AsyncMock, MagicMock

import pytest

from service_bootstrap.config import (
    ConfigFormat,
    Database,
    HttpFramework,
    ProjectConfig,
    TaskRunner,
)
from service_bootstrap.scaffolder.templates import TemplateEntry, TemplateTree


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Parent directory projects are generated into (auto-cleanup)."""
    out = tmp_path / "output"
    out.mkdir()
    return out


# ---------------------------------------------------------------------------
# Configs
# ---------------------------------------------------------------------------

@pytest.fixture
def echo_config() -> ProjectConfig:
    """Echo service with no database and no task runner."""
    return ProjectConfig(project_name="svc1", http_framework=HttpFramework.ECHO)


@pytest.fixture
def postgres_config() -> ProjectConfig:
    """Postgres service with a Makefile."""
    return ProjectConfig(
        project_name="svc2",
        database=Database.POSTGRES,
        task_runner=TaskRunner.MAKEFILE,
    )


@pytest.fixture
def full_config() -> ProjectConfig:
    """Every optional feature switched on."""
    return ProjectConfig(
        project_name="full-svc",
        module_path="github.com/acme/full-svc",
        http_framework=HttpFramework.FIBER,
        database=Database.SQLITE,
        task_runner=TaskRunner.TASKFILE,
        config_format=ConfigFormat.YAML,
        websocket=True,
        bot=True,
        html=True,
    )


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

def make_tree(files: dict[str, str]) -> TemplateTree:
    """Build an in-memory ``TemplateTree`` from ``{path: content}``.

    Parent directory entries are synthesised so the ordering matches a tree
    scanned from disk.
    """
    entries: list[TemplateEntry] = []
    seen_dirs: set[str] = set()
    for path in sorted(files):
        parts = path.split("/")
        for i in range(1, len(parts)):
            directory = "/".join(parts[:i])
            if directory not in seen_dirs:
                seen_dirs.add(directory)
                entries.append(TemplateEntry(directory, is_dir=True))
        entries.append(TemplateEntry(path, is_dir=False, content=files[path]))
    return TemplateTree(tuple(entries))


@pytest.fixture
def tree_factory():
    """Expose ``make_tree`` to tests that need a custom tree."""
    return make_tree


@pytest.fixture
def small_tree() -> TemplateTree:
    """A miniature template tree exercising each inclusion rule kind."""
    return make_tree({
        "README.md.j2": "# {{ project_name }}\n",
        "Makefile.j2": "run:\n\tgo run ./cmd/app\n",
        "Taskfile.yml.j2": "version: \"3\"\n",
        "cmd/app/main.go.j2": "package main // {{ module_path }}\n",
        "internal/domain/user.go.j2": "package domain\n",
        "internal/repository/postgres/user.go.j2": "package postgres\n",
        "internal/repository/mysql/user.go.j2": "package mysql\n",
        "LICENSE": "plain text\n",
    })


# ---------------------------------------------------------------------------
# Mock Subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


class FakeExec:
    """Stand-in for ``asyncio.create_subprocess_exec`` that records calls.

    Commands whose leading arguments match an entry of *failing* exit with
    status 1; programs listed in *missing* raise ``FileNotFoundError``.
    """

    def __init__(
        self,
        factory: Any,
        failing: Iterable[tuple[str, ...]] = (),
        missing: Iterable[str] = (),
    ) -> None:
        self.factory = factory
        self.failing = [tuple(f) for f in failing]
        self.missing = set(missing)
        self.calls: list[tuple[str, ...]] = []
        self.cwds: list[Any] = []

    async def __call__(self, *args: str, **kwargs: Any) -> AsyncMock:
        self.calls.append(tuple(args))
        self.cwds.append(kwargs.get("cwd"))
        if args[0] in self.missing:
            raise FileNotFoundError(2, "No such file or directory", args[0])
        for prefix in self.failing:
            if tuple(args[: len(prefix)]) == prefix:
                return self.factory(stderr=f"{' '.join(args)}: failed", returncode=1)
        return self.factory()


@pytest.fixture
def fake_exec(mock_subprocess):
    """Factory for ``FakeExec`` instances.

    Usage:
        def test_bootstrap(fake_exec):
            fake = fake_exec(missing=["goimports"])
            with patch("asyncio.create_subprocess_exec", new=fake):
                ...
    """
    def factory(
        failing: Iterable[tuple[str, ...]] = (),
        missing: Iterable[str] = (),
    ) -> FakeExec:
        return FakeExec(mock_subprocess, failing=failing, missing=missing)

    return factory
