"""Bundled template tree and Jinja2 rendering for project scaffolding.

The template tree under ``service_bootstrap/scaffolder/templates/`` is read
once per process into an immutable :class:`TemplateTree`.  Rendering runs
against that in-memory copy through a ``DictLoader``, so it never touches the
filesystem after the tree is loaded.
"""

from __future__ import annotations

import asyncio
import functools
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

from jinja2 import (
    DictLoader,
    Environment,
    StrictUndefined,
    TemplateError,
    TemplateSyntaxError,
)

from service_bootstrap.errors import TemplateRenderError, TemplateTreeError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

TEMPLATE_SUFFIX = ".j2"

_IGNORED_NAMES = frozenset({"__pycache__", ".DS_Store"})


# ---------------------------------------------------------------------------
# Template tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateEntry:
    """A single node of the template tree.

    ``path`` is POSIX-style and relative to the tree root.  Directories carry
    no content.
    """

    path: str
    is_dir: bool
    content: Optional[str] = None


class TemplateTree:
    """Immutable, ordered view of a template directory.

    Entries are ordered depth-first with names sorted, so every directory is
    listed before anything it contains.
    """

    def __init__(self, entries: tuple[TemplateEntry, ...]) -> None:
        self._entries = entries
        _check_destinations(entries)

    @classmethod
    def from_directory(cls, root: str | Path) -> "TemplateTree":
        root = Path(root)
        if not root.is_dir():
            raise TemplateTreeError(f"Template directory not found: {root}")
        return cls(tuple(_scan(root, "")))

    def __iter__(self) -> Iterator[TemplateEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[TemplateEntry, ...]:
        return self._entries

    def files(self) -> list[TemplateEntry]:
        return [e for e in self._entries if not e.is_dir]

    def sources(self) -> dict[str, str]:
        """Return ``{path: content}`` for every file entry."""
        return {e.path: e.content or "" for e in self._entries if not e.is_dir}


@functools.lru_cache(maxsize=None)
def default_tree() -> TemplateTree:
    """Return the bundled template tree, loading it on first use."""
    return TemplateTree.from_directory(_DEFAULT_TEMPLATE_DIR)


def _scan(directory: Path, prefix: str) -> Iterator[TemplateEntry]:
    for child in sorted(directory.iterdir(), key=lambda p: p.name):
        if child.name in _IGNORED_NAMES:
            continue
        rel = f"{prefix}{child.name}"
        if child.is_dir():
            yield TemplateEntry(rel, is_dir=True)
            yield from _scan(child, rel + "/")
        else:
            yield TemplateEntry(rel, is_dir=False, content=child.read_text(encoding="utf-8"))


def _check_destinations(entries: tuple[TemplateEntry, ...]) -> None:
    """Reject trees where two files would be written to the same place."""
    seen: dict[str, str] = {}
    for entry in entries:
        if entry.is_dir:
            continue
        target = strip_template_suffix(entry.path)
        if target in seen:
            raise TemplateTreeError(
                f"Templates {seen[target]!r} and {entry.path!r} both map to {target!r}"
            )
        seen[target] = entry.path


# ---------------------------------------------------------------------------
# Path mapping
# ---------------------------------------------------------------------------


def strip_template_suffix(path: str) -> str:
    if path.endswith(TEMPLATE_SUFFIX):
        return path[: -len(TEMPLATE_SUFFIX)]
    return path


def map_destination(template_path: str, output_dir: str | Path) -> Path:
    """Map a tree-relative template path to its destination file.

    ``internal/app/app.go.j2`` under ``/work/svc`` becomes
    ``/work/svc/internal/app/app.go``.
    """
    return Path(output_dir).joinpath(*strip_template_suffix(template_path).split("/"))


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template-tree entries with a project context.

    Undefined names are errors (``StrictUndefined``), so a typo in a template
    fails generation instead of silently producing an empty string.
    """

    def __init__(self, tree: Optional[TemplateTree] = None) -> None:
        self.tree = tree if tree is not None else default_tree()
        self.env = Environment(
            loader=DictLoader(self.tree.sources()),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["slugify"] = _slugify_filter

    def render(self, template_path: str, context: dict[str, Any]) -> bytes:
        """Render the tree entry at *template_path* to UTF-8 bytes.

        Raises:
            TemplateRenderError: On a syntax error or an undefined name.
        """
        try:
            template = self.env.get_template(template_path)
            text = template.render(**context)
        except TemplateSyntaxError as exc:
            raise TemplateRenderError(template_path, exc.message or str(exc), exc.lineno) from exc
        except TemplateError as exc:
            raise TemplateRenderError(template_path, str(exc)) from exc
        return text.encode("utf-8")

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically; an existing file is
        truncated.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: bytes) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
