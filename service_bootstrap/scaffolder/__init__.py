"""Go Service Bootstrap scaffolder -- generates Go service source trees.

This module takes a ``ProjectConfig`` as input, renders the bundled template
tree into a project directory and bootstraps the Go module inside it.

Quick usage::

    from service_bootstrap.config import Database, HttpFramework, ProjectConfig
    from service_bootstrap.scaffolder import ProjectGenerator

    config = ProjectConfig(
        project_name="my-service",
        http_framework=HttpFramework.ECHO,
        database=Database.POSTGRES,
    )
    result = await ProjectGenerator(config).generate("/tmp/output")
"""

from service_bootstrap.scaffolder.generator import GenerationResult, ProjectGenerator
from service_bootstrap.scaffolder.policy import RULES, InclusionRule, should_emit
from service_bootstrap.scaffolder.templates import (
    TemplateRenderer,
    TemplateTree,
    default_tree,
    map_destination,
)
from service_bootstrap.scaffolder.toolchain import (
    BootstrapResult,
    Severity,
    ToolchainBootstrapper,
)

__all__ = [
    "BootstrapResult",
    "GenerationResult",
    "InclusionRule",
    "ProjectGenerator",
    "RULES",
    "Severity",
    "TemplateRenderer",
    "TemplateTree",
    "ToolchainBootstrapper",
    "default_tree",
    "map_destination",
    "should_emit",
]
