"""
odoo-cli: the single-skill installer that predates agent-skills.

Kept for projects that still call it. It installs the bundled `odoo` skill
only, writes Cursor rules as `.mdc` files and drops the Claude entry files
into the project root. There is no update check.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .cli import CLIInvocation, Dispatcher, normalize, print_list, run_main
from .core import CopyOptions, copy_file, list_versions, md_to_mdc, resolve_skill
from .targets import InstallResult, InstallTarget


@dataclass
class RootFilesTarget:
    """Copies selected files of a version straight into the destination root."""
    name: str
    file_names: tuple[str, ...]

    def install(self, skill, version, version_dir: Path, dest_root: Path, options: CopyOptions) -> InstallResult:
        result = InstallResult(target=self.name)
        for file_name in self.file_names:
            dest = dest_root / file_name
            result.entries.append((self.name, dest))
            source = version_dir / file_name
            if source.is_file() and copy_file(source, dest, options):
                result.files.append(dest)
        return result


ODOO_TARGETS = {
    "cursor": InstallTarget(
        name="cursor",
        tree_parts=(".cursor", "rules", "{skill}", "{version}"),
        rename=md_to_mdc,
    ),
    "docs": InstallTarget(
        name="docs",
        tree_parts=("docs", "{skill}", "{version}"),
    ),
    "claude": RootFilesTarget(name="claude", file_names=("CLAUDE.md", "SKILL.md")),
}


ODOO_USAGE = """
{prog} - Install Odoo AI agent docs by version

Usage:
  {prog} init --ai <assistant> --version <odoo-version>
  {prog} versions
  {prog} help

Options:
  --ai <assistant>        {ai_choices}
  --version <version>     Odoo version (default: {default_version})
  --dest <path>           Destination directory (default: current directory)
  --force                 Overwrite existing files
  --dry-run               Show what would be copied
  -V, --cli-version       Print CLI version
"""


class OdooDispatcher(Dispatcher):
    prog = "odoo-cli"
    usage = ODOO_USAGE
    targets = ODOO_TARGETS
    check_updates = False

    def __init__(self, config=None, update_checker=None):
        super().__init__(config, update_checker)
        self.commands = {
            "init": self.cmd_init,
            "versions": self.cmd_versions,
        }

    def resolve_init(self, args: CLIInvocation) -> tuple[str, str, str]:
        ai = normalize(args.ai or self.config.default_ai).lower()
        version = normalize(
            args.version
            or (args.positionals[0] if args.positionals else None)
            or self.config.default_version
        )
        return ai, self.config.default_skill, version

    def cmd_versions(self, args: CLIInvocation) -> int:
        """versions: list bundled Odoo versions."""
        skill_dir = resolve_skill(self.config.asset_root, self.config.default_skill)
        print_list("Available Odoo versions:", list_versions(skill_dir))
        return 0


def main(argv: Optional[list[str]] = None) -> int:
    """odoo-cli entry point."""
    return run_main(OdooDispatcher, argv)


if __name__ == "__main__":
    import sys
    sys.exit(main())
