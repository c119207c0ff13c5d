"""
Agent Skills Core Library

This module contains the logic shared by both installer CLIs, independent of
argument handling, so it can be reused by other Python programs.

Main Features:
    - Configuration: explicit settings value handed to the dispatcher
    - Skill discovery: list and resolve bundled skills and their versions
    - Tree copying: install a version tree honoring force / dry-run
    - Terminal output: colored info / success / warning / error helpers

Design Principles:
    - Zero runtime dependencies beyond the standard library
    - Library code raises, the CLI layer turns errors into exit codes
    - Never clobber a local edit unless --force is given
"""

import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Callable, Optional


# =============================================================================
# Global Configuration
# =============================================================================

# Bundled documentation sets live next to this module
PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_ASSET_ROOT = PACKAGE_ROOT / "skills"

DEFAULT_AI = "cursor"
DEFAULT_SKILL = "odoo"
DEFAULT_VERSION = "18.0"

PYPI_PACKAGE = "agent-skills-cli"
GITHUB_REPO = "unclecatvn/agent-skills"

# Per-user state directory for the update notifier
DEFAULT_CONFIG_DIR = Path.home() / ".agent-skills"
UPDATE_CHECK_FILE = "update-check.json"
UPDATE_CHECK_INTERVAL = 24 * 60 * 60  # seconds

ASSETS_ENV = "AGENT_SKILLS_ASSETS"
CONFIG_DIR_ENV = "AGENT_SKILLS_CONFIG_DIR"


@dataclass
class Config:
    """
    Settings for one CLI run.

    Built once and passed into the dispatcher, so tests (or several
    invocations in one process) never share mutable module state.
    """
    asset_root: Path = DEFAULT_ASSET_ROOT
    default_ai: str = DEFAULT_AI
    default_skill: str = DEFAULT_SKILL
    default_version: str = DEFAULT_VERSION
    config_dir: Path = DEFAULT_CONFIG_DIR
    update_check_interval: float = UPDATE_CHECK_INTERVAL
    notice_delay: float = 0.5
    request_timeout: float = 3.0
    package_name: str = PYPI_PACKAGE
    github_repo: str = GITHUB_REPO
    cli_version: str = field(default_factory=lambda: _package_version())

    @property
    def update_check_file(self) -> Path:
        return self.config_dir / UPDATE_CHECK_FILE

    @classmethod
    def from_env(cls, environ: Optional[dict] = None, **overrides) -> "Config":
        """Build a Config, letting environment variables relocate assets and state."""
        environ = os.environ if environ is None else environ
        values = {}
        if environ.get(ASSETS_ENV):
            values["asset_root"] = Path(environ[ASSETS_ENV]).expanduser()
        if environ.get(CONFIG_DIR_ENV):
            values["config_dir"] = Path(environ[CONFIG_DIR_ENV]).expanduser()
        values.update(overrides)
        return cls(**values)


def _package_version() -> str:
    from . import __version__
    return __version__


# =============================================================================
# Terminal Color Handling
# =============================================================================

class Colors:
    """
    ANSI color code wrapper class.

    Design considerations:
        - Uses class attributes instead of instance, as colors are global settings
        - Provides disable() method for consoles without ANSI support
    """
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"

    @classmethod
    def disable(cls):
        """Disable all color output."""
        cls.RESET = cls.BOLD = cls.RED = cls.GREEN = ""
        cls.YELLOW = cls.BLUE = cls.CYAN = ""


# Legacy cmd.exe needs colorama to translate ANSI sequences;
# Windows Terminal (WT_SESSION) handles them natively
if sys.platform == "win32" and not os.environ.get("WT_SESSION"):
    import colorama
    colorama.just_fix_windows_console()

def color_supported(stream=None, environ=None) -> bool:
    """ANSI colours only on an interactive terminal, and never with NO_COLOR set."""
    environ = os.environ if environ is None else environ
    stream = sys.stdout if stream is None else stream
    if environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


if not color_supported():
    Colors.disable()


# =============================================================================
# Logging Functions
# =============================================================================

def log_info(msg: str):
    """Info message (blue ℹ)."""
    print(f"{Colors.BLUE}ℹ{Colors.RESET} {msg}")


def log_success(msg: str):
    """Success message (green ✓)."""
    print(f"{Colors.GREEN}✓{Colors.RESET} {msg}")


def log_warning(msg: str):
    """Warning message (yellow ⚠)."""
    print(f"{Colors.YELLOW}⚠{Colors.RESET} {msg}")


def log_error(msg: str):
    """Error message (red ✗)."""
    print(f"{Colors.RED}✗ Error:{Colors.RESET} {msg}", file=sys.stderr)


# =============================================================================
# Errors
# =============================================================================

class AgentSkillsError(Exception):
    """Base class for errors reported to the user with exit code 1."""


class NotFoundError(AgentSkillsError):
    """
    A requested identifier does not exist.

    Carries the valid alternatives so the CLI can guide the user.
    """
    kind = "Item"

    def __init__(self, identifier: str, alternatives: list[str]):
        super().__init__(f"{self.kind} not found: {identifier}")
        self.identifier = identifier
        self.alternatives = alternatives


class SkillNotFoundError(NotFoundError):
    kind = "Skill"


class VersionNotFoundError(NotFoundError):
    kind = "Version"

    def __init__(self, skill: str, version: str, alternatives: list[str]):
        super().__init__(f"{skill}/{version}", alternatives)
        self.skill = skill
        self.version = version


class UnknownTargetError(AgentSkillsError):
    def __init__(self, selector: str, valid: list[str]):
        super().__init__(f"Unknown --ai value: {selector}")
        self.selector = selector
        self.valid = valid


# =============================================================================
# Skill Discovery
# =============================================================================

def _is_hidden(name: str) -> bool:
    return name.startswith(".") or name.startswith("_")


def _subdirs(directory: Path) -> list[str]:
    return sorted(
        item.name for item in directory.iterdir()
        if item.is_dir() and not _is_hidden(item.name)
    )


def list_skills(asset_root: Path) -> list[str]:
    """
    List the bundled skills.

    Criteria: a directory under the asset root holding at least one
    version subdirectory.

    Returns:
        Skill names sorted lexicographically
    """
    if not asset_root.is_dir():
        return []
    return [name for name in _subdirs(asset_root) if _subdirs(asset_root / name)]


def list_versions(skill_dir: Path) -> list[str]:
    """List version labels (subdirectory names) of a skill, sorted."""
    if not skill_dir.is_dir():
        return []
    return _subdirs(skill_dir)


def resolve_skill(asset_root: Path, name: str) -> Path:
    """
    Return the directory of a bundled skill.

    Raises:
        SkillNotFoundError: listing every valid skill as alternatives
    """
    skills = list_skills(asset_root)
    if name not in skills:
        raise SkillNotFoundError(name, skills)
    return asset_root / name


def resolve_version(asset_root: Path, skill: str, version: str) -> Path:
    """
    Return the directory of one version of a skill.

    Raises:
        SkillNotFoundError: unknown skill
        VersionNotFoundError: unknown version, listing the skill's versions
    """
    skill_dir = resolve_skill(asset_root, skill)
    versions = list_versions(skill_dir)
    if version not in versions:
        raise VersionNotFoundError(skill, version, versions)
    return skill_dir / version


# =============================================================================
# Tree Copying
# =============================================================================

RenameFn = Callable[[PurePath], PurePath]


@dataclass
class CopyOptions:
    force: bool = False
    dry_run: bool = False


def md_to_mdc(relative_path: PurePath) -> PurePath:
    """Rename transform: `*.md` files become `*.mdc`, anything else is kept."""
    if relative_path.suffix == ".md":
        return relative_path.with_suffix(".mdc")
    return relative_path


def copy_file(source: Path, dest: Path, options: CopyOptions) -> bool:
    """
    Copy one file unless the destination exists and force is off.

    Without force the destination is opened with exclusive creation, so the
    existence check and the write are one operation.

    Returns:
        True if the file was (or, under dry-run, would be) written
    """
    if options.dry_run:
        return options.force or not dest.exists()

    dest.parent.mkdir(parents=True, exist_ok=True)
    if options.force:
        shutil.copyfile(source, dest)
        return True

    try:
        with open(source, "rb") as src, open(dest, "xb") as dst:
            shutil.copyfileobj(src, dst)
    except FileExistsError:
        return False
    return True


def write_text_if_allowed(dest: Path, content: str, options: CopyOptions) -> bool:
    """Write a generated file with the same overwrite / dry-run policy as copy_file."""
    if options.dry_run:
        return options.force or not dest.exists()

    dest.parent.mkdir(parents=True, exist_ok=True)
    mode = "w" if options.force else "x"
    try:
        with open(dest, mode, encoding="utf-8", newline="\n") as f:
            f.write(content)
    except FileExistsError:
        return False
    return True


def copy_tree(
    source_dir: Path,
    dest_dir: Path,
    options: CopyOptions,
    rename: Optional[RenameFn] = None,
) -> list[Path]:
    """
    Recursively copy a directory tree.

    Every file lands at `dest_dir / rename(relative_path)`. Existing files are
    skipped silently unless options.force is set. There is no rollback; an
    interrupted copy is repaired by re-running with force.

    Returns:
        Destination paths written, or that would be written under dry-run
    """
    written = []
    _copy_dir(source_dir, source_dir, dest_dir, options, rename, written)
    return written


def _copy_dir(root, current, dest_dir, options, rename, written):
    for entry in sorted(current.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            _copy_dir(root, entry, dest_dir, options, rename, written)
            continue

        relative = PurePath(entry.relative_to(root))
        if rename is not None:
            relative = rename(relative)
        dest = dest_dir / relative
        if copy_file(entry, dest, options):
            written.append(dest)
