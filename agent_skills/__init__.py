"""
Agent Skills CLI - Install versioned agent skill docs into a project

Public API:
    - Config: settings for one CLI run
    - list_skills / list_versions: enumerate bundled skills and versions
    - resolve_skill / resolve_version: locate a skill version or raise NotFound
    - copy_tree: copy a version tree honoring force / dry-run
    - TARGETS / install_targets: per-assistant directory layouts
    - UpdateChecker: rate-limited self-update notifier

CLI Entry Points:
    - main: agent-skills
    - odoo_main: odoo-cli
"""

__version__ = "1.2.0"

from .core import (
    # Configuration
    Config,

    # Logging
    Colors,
    log_info,
    log_success,
    log_warning,
    log_error,

    # Errors
    AgentSkillsError,
    NotFoundError,
    SkillNotFoundError,
    VersionNotFoundError,
    UnknownTargetError,

    # Skill Discovery
    list_skills,
    list_versions,
    resolve_skill,
    resolve_version,

    # Tree Copying
    CopyOptions,
    copy_file,
    copy_tree,
    md_to_mdc,
    write_text_if_allowed,
)

from .targets import (
    TARGETS,
    InstallResult,
    InstallTarget,
    install_targets,
    select_targets,
)

from .update import UpdateChecker, UpdateReport

from .cli import CLIInvocation, Dispatcher, parse_args, main
from .odoo_cli import OdooDispatcher, main as odoo_main

__all__ = [
    # Configuration
    "Config",

    # Logging
    "Colors",
    "log_info",
    "log_success",
    "log_warning",
    "log_error",

    # Errors
    "AgentSkillsError",
    "NotFoundError",
    "SkillNotFoundError",
    "VersionNotFoundError",
    "UnknownTargetError",

    # Skill Discovery
    "list_skills",
    "list_versions",
    "resolve_skill",
    "resolve_version",

    # Tree Copying
    "CopyOptions",
    "copy_file",
    "copy_tree",
    "md_to_mdc",
    "write_text_if_allowed",

    # Install Targets
    "TARGETS",
    "InstallResult",
    "InstallTarget",
    "install_targets",
    "select_targets",

    # Update Check
    "UpdateChecker",
    "UpdateReport",

    # CLI
    "CLIInvocation",
    "Dispatcher",
    "OdooDispatcher",
    "parse_args",
    "main",
    "odoo_main",
]
