"""Inclusion rules deciding which template-tree files are emitted.

Rules are matched against the template-tree path relative to the tree root
(e.g. ``internal/repository/postgres/user.go.j2``), never against the
destination path.  The destination contains the output directory, and path
mapping strips the template suffix, so either could add or remove the very
tokens the rules key on.

A path is skipped as soon as one rule matches it while the rule's feature is
disabled.  No rule ever re-includes a skipped path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from service_bootstrap.config import ProjectConfig

from .templates import TEMPLATE_SUFFIX

MatchKind = Literal["contains", "segment", "suffix"]


@dataclass(frozen=True)
class InclusionRule:
    """Skip paths matching *pattern* unless *feature* is enabled.

    ``feature`` names a boolean attribute of :class:`ProjectConfig`.
    """

    pattern: str
    match: MatchKind
    feature: str

    def matches(self, path: str) -> bool:
        if self.match == "contains":
            return self.pattern in path
        if self.match == "segment":
            # Directory segments only; the file name itself never counts.
            return self.pattern in path.split("/")[:-1]
        # suffix
        if path.endswith(TEMPLATE_SUFFIX):
            path = path[: -len(TEMPLATE_SUFFIX)]
        return path.endswith(self.pattern)

    def enabled(self, config: ProjectConfig) -> bool:
        return bool(getattr(config, self.feature))


RULES: tuple[InclusionRule, ...] = (
    # Database-backed layers
    InclusionRule("domain", "segment", "has_database"),
    InclusionRule("usecase", "segment", "has_database"),
    InclusionRule("postgres", "contains", "has_postgres"),
    InclusionRule("mysql", "contains", "has_mysql"),
    InclusionRule("sqlite", "contains", "has_sqlite"),
    # Transport
    InclusionRule("http", "segment", "has_http"),
    InclusionRule("echo", "segment", "is_echo"),
    InclusionRule("fiber", "segment", "is_fiber"),
    InclusionRule("websocket", "segment", "websocket"),
    # Optional features
    InclusionRule("web", "segment", "html"),
    InclusionRule("bot", "segment", "bot"),
    # Task runners
    InclusionRule("Makefile", "suffix", "has_makefile"),
    InclusionRule("Taskfile.yml", "suffix", "has_taskfile"),
    # Config formats
    InclusionRule("config.yaml", "suffix", "has_yaml_config"),
    InclusionRule(".env", "suffix", "has_dotenv_config"),
)


def skipping_rule(
    path: str,
    config: ProjectConfig,
    rules: tuple[InclusionRule, ...] = RULES,
) -> Optional[InclusionRule]:
    """Return the first rule that excludes *path*, or ``None`` if it is emitted."""
    for rule in rules:
        if rule.matches(path) and not rule.enabled(config):
            return rule
    return None


def should_emit(
    path: str,
    config: ProjectConfig,
    rules: tuple[InclusionRule, ...] = RULES,
) -> bool:
    """Return ``True`` if the template at *path* is generated for *config*."""
    return skipping_rule(path, config, rules) is None
