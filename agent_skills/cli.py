"""
Agent Skills Command Line Interface

Argument parsing and command dispatch; the core module does the real work.
"""

import argparse
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .core import (
    Colors,
    Config,
    CopyOptions,
    NotFoundError,
    SkillNotFoundError,
    UnknownTargetError,
    list_skills,
    list_versions,
    log_error,
    log_info,
    log_success,
    resolve_skill,
    resolve_version,
)
from .targets import TARGETS, WILDCARD, install_targets
from .update import UpdateChecker


# =============================================================================
# Argument Parsing
# =============================================================================

@dataclass
class CLIInvocation:
    command: str = "help"
    ai: Optional[str] = None
    skill: Optional[str] = None
    version: Optional[str] = None
    dest: str = "."
    force: bool = False
    dry_run: bool = False
    offline: bool = False
    show_version: bool = False
    positionals: list[str] = field(default_factory=list)


class _ParseFailure(Exception):
    pass


class _TolerantParser(argparse.ArgumentParser):
    """ArgumentParser that reports problems to the caller instead of exiting."""

    def error(self, message):
        raise _ParseFailure(message)


VALUE_FLAGS = ("--ai", "--skill", "--version", "--dest")


def bind_flag_values(argv: list[str]) -> list[str]:
    """
    Join every value flag with the token after it (`--ai x` -> `--ai=x`).

    argparse refuses to take a flag-shaped word as a value, but a value flag
    always consumes the next token, even `--force` or `-x`. A value flag at
    the end of the line is dropped so the default stays.
    """
    bound = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token in VALUE_FLAGS:
            if i + 1 < len(argv):
                bound.append(f"{token}={argv[i + 1]}")
            i += 2
            continue
        bound.append(token)
        i += 1
    return bound


def build_parser(prog: str = "agent-skills") -> argparse.ArgumentParser:
    parser = _TolerantParser(prog=prog, add_help=False, allow_abbrev=False)
    parser.add_argument("tokens", nargs="*")
    parser.add_argument("--ai", nargs="?")
    parser.add_argument("--skill", nargs="?")
    parser.add_argument("--version", nargs="?")
    parser.add_argument("--dest", nargs="?")
    parser.add_argument("--force", action="store_true")
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--offline", action="store_true")
    parser.add_argument("-V", "--cli-version", action="store_true")
    parser.add_argument("-h", "--help", action="store_true")
    return parser


def parse_args(argv: list[str], prog: str = "agent-skills") -> CLIInvocation:
    """
    Turn raw arguments into a CLIInvocation.

    The first non-flag token is the command, later ones are positionals.
    Unknown flags are dropped; nothing here is validated, later stages
    reject bad values.
    """
    invocation = CLIInvocation(dest=os.getcwd())

    try:
        ns, extras = build_parser(prog).parse_known_intermixed_args(bind_flag_values(argv))
    except _ParseFailure:
        return invocation

    if ns.cli_version:
        invocation.show_version = True
        return invocation
    if ns.help:
        return invocation

    # words that follow an unknown flag land in extras
    tokens = (ns.tokens or []) + [t for t in extras if not t.startswith("-")]
    if tokens:
        invocation.command = tokens[0]
        invocation.positionals = tokens[1:]

    invocation.ai = ns.ai
    invocation.skill = ns.skill
    invocation.version = ns.version
    if ns.dest:
        invocation.dest = ns.dest
    invocation.force = ns.force
    invocation.dry_run = ns.dry_run
    invocation.offline = ns.offline
    return invocation


def normalize(value: Optional[str]) -> str:
    return (value or "").strip()


# =============================================================================
# Output Helpers
# =============================================================================

def print_list(title: str, items: list[str], empty: Optional[str] = None):
    """Print a titled bullet list, or `empty` instead when there is nothing to list."""
    if not items and empty is not None:
        print(empty)
        return
    print(title)
    for item in items:
        print(f"- {item}")


USAGE = """
{prog} - Install agent skills docs by version

Usage:
  {prog} init --ai <assistant> <skill> [version]
  {prog} init --ai <assistant> <skill> --version <version>
  {prog} versions [skill]
  {prog} skills
  {prog} update
  {prog} help

Options:
  --ai <assistant>        {ai_choices}
  --skill <skill>         Skill folder name (default: {default_skill})
  --version <version>     Version (default: {default_version})
  --dest <path>           Destination directory (default: current directory)
  --force                 Overwrite existing files
  --dry-run               Show what would be copied
  --offline               Skip the update check
  -V, --cli-version       Print CLI version
"""


# =============================================================================
# Command Dispatcher
# =============================================================================

class Dispatcher:
    """
    Top-level control flow for one CLI run.

    Subclasses change the program name, the usage text, the supported
    commands and the install targets.
    """
    prog = "agent-skills"
    usage = USAGE
    targets = TARGETS
    check_updates = True

    def __init__(self, config: Optional[Config] = None, update_checker: Optional[UpdateChecker] = None):
        self.config = config or Config.from_env()
        self.update_checker = update_checker or UpdateChecker(self.config)
        self.commands = {
            "init": self.cmd_init,
            "versions": self.cmd_versions,
            "skills": self.cmd_skills,
            "update": self.cmd_update,
        }

    def run(self, argv: list[str]) -> int:
        args = parse_args(argv, self.prog)

        if args.show_version:
            print(self.config.cli_version)
            return 0

        command = normalize(args.command).lower()
        background = None
        if self.check_updates and command != "update" and not args.offline:
            background = self.update_checker.maybe_check_for_updates()

        try:
            return self.dispatch(command, args)
        finally:
            if background is not None:
                self.update_checker.wait(self.config.request_timeout + self.config.notice_delay)

    def dispatch(self, command: str, args: CLIInvocation) -> int:
        handler = self.commands.get(command, self.cmd_help)
        try:
            return handler(args)
        except NotFoundError as e:
            log_error(str(e))
            print()
            self.print_alternatives(e)
            return 1
        except UnknownTargetError as e:
            log_error(str(e))
            self.print_help()
            return 1

    def print_alternatives(self, error: NotFoundError):
        if isinstance(error, SkillNotFoundError):
            print_list("Available skills:", error.alternatives, "No skills found.")
        else:
            print_list(f"Available versions for {error.skill}:", error.alternatives)

    def print_help(self):
        ai_choices = " | ".join(list(self.targets) + [WILDCARD])
        print(self.usage.format(
            prog=self.prog,
            ai_choices=ai_choices,
            default_skill=self.config.default_skill,
            default_version=self.config.default_version,
        ).strip())

    # -- commands -------------------------------------------------------------

    def cmd_help(self, args: CLIInvocation) -> int:
        self.print_help()
        return 0

    def cmd_skills(self, args: CLIInvocation) -> int:
        """skills: list bundled skills."""
        print_list("Available skills:", list_skills(self.config.asset_root), "No skills found.")
        return 0

    def cmd_versions(self, args: CLIInvocation) -> int:
        """versions: list versions of one skill."""
        skill = normalize(
            (args.positionals[0] if args.positionals else None)
            or args.skill
            or self.config.default_skill
        )
        # a directory without version subfolders is not a skill, so this never lists nothing
        skill_dir = resolve_skill(self.config.asset_root, skill)
        print_list(f"Available versions for {skill}:", list_versions(skill_dir))
        return 0

    def resolve_init(self, args: CLIInvocation) -> tuple[str, str, str]:
        """Pick (ai, skill, version) from flags, then positionals, then defaults."""
        positional = args.positionals
        ai = normalize(args.ai or self.config.default_ai).lower()
        skill = normalize(args.skill or (positional[0] if positional else None) or self.config.default_skill)
        version = normalize(
            args.version
            or (positional[1] if len(positional) > 1 else None)
            or self.config.default_version
        )
        return ai, skill, version

    def cmd_init(self, args: CLIInvocation) -> int:
        """init: install a skill version for one or all assistants."""
        ai, skill, version = self.resolve_init(args)
        if ai != WILDCARD and ai not in self.targets:
            raise UnknownTargetError(ai, list(self.targets) + [WILDCARD])

        version_dir = resolve_version(self.config.asset_root, skill, version)
        options = CopyOptions(force=args.force, dry_run=args.dry_run)
        dest_root = Path(args.dest).expanduser()

        results = install_targets(ai, skill, version, version_dir, dest_root, options, self.targets)
        self.print_install_report(results, options)
        return 0

    def print_install_report(self, results, options: CopyOptions):
        if options.dry_run:
            print("Dry run. Planned installs:")
        else:
            print("Install complete:")
        for result in results:
            for label, path in result.entries:
                print(f"- {label} -> {path}")

        # shared trees are reported once even when several targets share them
        files = list(dict.fromkeys(path for result in results for path in result.files))
        if options.dry_run:
            if files:
                print("\nFiles that would be written:")
                for path in files:
                    print(f"  {Colors.CYAN}•{Colors.RESET} {path}")
            log_info(f"[DRY RUN] {len(files)} files would be written")
        else:
            log_success(f"{len(files)} files written")

    def cmd_update(self, args: CLIInvocation) -> int:
        """update: foreground version check."""
        print(f"Current version: {self.config.cli_version}")
        if args.offline:
            print("Offline mode: Skipping update check.")
            return 0

        print("Checking for updates...\n")
        report = self.update_checker.check_now()

        if report.update_available:
            print(f"{Colors.YELLOW}New version available on PyPI: {report.latest}{Colors.RESET}")
            print(f"To update, run: {Colors.CYAN}pip install -U {self.config.package_name}{Colors.RESET}\n")
        elif report.latest:
            print(f"{Colors.GREEN}CLI is up to date!{Colors.RESET}\n")
        else:
            print("No update information available.\n")

        if report.release:
            print(f"Latest GitHub release: {report.release['tag']}")
            if report.release.get("url"):
                print(f"Release notes: {report.release['url']}\n")
        return 0


# =============================================================================
# Main Entry Point
# =============================================================================

def run_main(dispatcher_cls, argv: Optional[list[str]] = None) -> int:
    """Run a dispatcher with the shared interrupt / unexpected-error handling."""
    argv = sys.argv[1:] if argv is None else argv

    try:
        return dispatcher_cls(Config.from_env()).run(argv)
    except KeyboardInterrupt:
        print()
        return 130
    except Exception as e:
        log_error(str(e))
        if os.environ.get("DEBUG"):
            raise
        return 1


def main(argv: Optional[list[str]] = None) -> int:
    """agent-skills entry point."""
    return run_main(Dispatcher, argv)


if __name__ == "__main__":
    sys.exit(main())
