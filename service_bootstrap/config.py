"""Go Service Bootstrap configuration.

Typed configuration for the generator. ``ProjectConfig`` is the resolved,
immutable record of the user's choices; ``ToolchainConfig`` holds the knobs for
the post-generation Go toolchain steps. Both are Pydantic v2 models so they are
validated at construction time and serialise to/from JSON without boiler-plate.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from service_bootstrap.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Single-choice groups
# ---------------------------------------------------------------------------


class HttpFramework(str, Enum):
    NONE = "none"
    ECHO = "echo"
    FIBER = "fiber"


class Database(str, Enum):
    NONE = "none"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class TaskRunner(str, Enum):
    NONE = "none"
    MAKEFILE = "makefile"
    TASKFILE = "taskfile"


class ConfigFormat(str, Enum):
    NONE = "none"
    YAML = "yaml"
    DOTENV = "dotenv"


# Wizard labels -> (field, value).  Toggles map to ``True``.
OPTION_LABELS: dict[str, tuple[str, Any]] = {
    "Echo": ("http_framework", HttpFramework.ECHO),
    "Fiber": ("http_framework", HttpFramework.FIBER),
    "PostgreSQL": ("database", Database.POSTGRES),
    "MySQL": ("database", Database.MYSQL),
    "SQLite": ("database", Database.SQLITE),
    "Makefile": ("task_runner", TaskRunner.MAKEFILE),
    "Taskfile": ("task_runner", TaskRunner.TASKFILE),
    "YAML": ("config_format", ConfigFormat.YAML),
    ".env": ("config_format", ConfigFormat.DOTENV),
    "gorilla/websocket": ("websocket", True),
    "Telegram bot": ("bot", True),
    "Enable HTML templates": ("html", True),
}

_SINGLE_CHOICE_FIELDS = ("http_framework", "database", "task_runner", "config_format")


class TemplateDefaults(BaseModel):
    """Fixed substitution values exposed to every template."""

    model_config = ConfigDict(frozen=True)

    http_port: str = "8080"
    db_user: str = "user"
    db_pass: str = "password"
    db_name: str = "mydatabase"
    db_port: str = "5432"
    mysql_port: str = "3306"


class ProjectConfig(BaseModel):
    """The user's resolved choices for one generation run.

    Each single-choice group is a single enum field, so at most one member of a
    group can ever be selected.  The boolean ``is_*``/``has_*`` properties are
    views over those fields for use in templates and inclusion rules.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Output directory name and default module path")
    module_path: Optional[str] = Field(
        default=None, description="Go module path (defaults to project_name)"
    )
    http_framework: HttpFramework = HttpFramework.NONE
    database: Database = Database.NONE
    task_runner: TaskRunner = TaskRunner.NONE
    config_format: ConfigFormat = ConfigFormat.NONE
    websocket: bool = False
    bot: bool = False
    html: bool = False
    defaults: TemplateDefaults = Field(default_factory=TemplateDefaults)

    @field_validator("project_name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("project_name must not be empty")
        return value

    @field_validator("module_path")
    @classmethod
    def _module_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def module(self) -> str:
        return self.module_path or self.project_name

    @property
    def is_echo(self) -> bool:
        return self.http_framework is HttpFramework.ECHO

    @property
    def is_fiber(self) -> bool:
        return self.http_framework is HttpFramework.FIBER

    @property
    def has_http(self) -> bool:
        return self.http_framework is not HttpFramework.NONE

    @property
    def has_postgres(self) -> bool:
        return self.database is Database.POSTGRES

    @property
    def has_mysql(self) -> bool:
        return self.database is Database.MYSQL

    @property
    def has_sqlite(self) -> bool:
        return self.database is Database.SQLITE

    @property
    def has_database(self) -> bool:
        """True iff a database engine was chosen."""
        return self.database is not Database.NONE

    @property
    def has_makefile(self) -> bool:
        return self.task_runner is TaskRunner.MAKEFILE

    @property
    def has_taskfile(self) -> bool:
        return self.task_runner is TaskRunner.TASKFILE

    @property
    def has_yaml_config(self) -> bool:
        return self.config_format is ConfigFormat.YAML

    @property
    def has_dotenv_config(self) -> bool:
        return self.config_format is ConfigFormat.DOTENV

    def template_context(self) -> dict[str, Any]:
        """Build the flat variable mapping rendered templates see."""
        return {
            "project_name": self.project_name,
            "module_path": self.module,
            "http_framework": self.http_framework.value,
            "database": self.database.value,
            "task_runner": self.task_runner.value,
            "config_format": self.config_format.value,
            "has_websocket": self.websocket,
            "has_bot": self.bot,
            "has_html": self.html,
            "is_echo": self.is_echo,
            "is_fiber": self.is_fiber,
            "has_http": self.has_http,
            "has_postgres": self.has_postgres,
            "has_mysql": self.has_mysql,
            "has_sqlite": self.has_sqlite,
            "has_database": self.has_database,
            "has_makefile": self.has_makefile,
            "has_taskfile": self.has_taskfile,
            "has_yaml_config": self.has_yaml_config,
            "has_dotenv_config": self.has_dotenv_config,
            **self.defaults.model_dump(),
        }

    # ------------------------------------------------------------------
    # Construction from wizard labels
    # ------------------------------------------------------------------

    @classmethod
    def from_options(
        cls,
        project_name: str,
        options: Iterable[str],
        module_path: Optional[str] = None,
    ) -> "ProjectConfig":
        """Build a config from the wizard's selected option labels.

        Raises:
            ConfigurationError: If a label is unknown, or two labels select
                different members of the same single-choice group.
        """
        values: dict[str, Any] = {}
        for label in options:
            try:
                field, value = OPTION_LABELS[label]
            except KeyError:
                raise ConfigurationError(f"Unknown option: {label!r}") from None
            current = values.get(field)
            if field in _SINGLE_CHOICE_FIELDS and current is not None and current != value:
                raise ConfigurationError(
                    f"Conflicting choices for {field}: "
                    f"{current.value!r} and {value.value!r}"
                )
            values[field] = value

        try:
            return cls(project_name=project_name, module_path=module_path, **values)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ProjectConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)


class ToolchainConfig(BaseModel):
    """Commands used to bootstrap the generated Go module."""

    go_binary: str = Field(default="go")
    formatter: list[str] = Field(default_factory=lambda: ["goimports", "-w", "."])
    skip_format: bool = Field(default=False)

    @classmethod
    def from_env(cls) -> "ToolchainConfig":
        """Build a ``ToolchainConfig`` from environment variables.

        Recognised variables (all optional):
            GSB_GO_BINARY, GSB_FORMATTER, GSB_SKIP_FORMAT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("GSB_GO_BINARY"):
            kwargs["go_binary"] = os.environ["GSB_GO_BINARY"]
        if os.environ.get("GSB_FORMATTER"):
            kwargs["formatter"] = os.environ["GSB_FORMATTER"].split()
        if os.environ.get("GSB_SKIP_FORMAT"):
            kwargs["skip_format"] = os.environ["GSB_SKIP_FORMAT"].strip().lower() in (
                "1",
                "true",
                "yes",
            )
        return cls(**kwargs)
