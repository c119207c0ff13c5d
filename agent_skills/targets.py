"""
Install targets: one directory layout per AI assistant host.

Each target copies a skill version into a fixed subpath of the destination
root and, for hosts that expect a single entry file, writes a small pointer
file into the shared tree.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .core import (
    CopyOptions,
    RenameFn,
    UnknownTargetError,
    copy_tree,
    write_text_if_allowed,
)


WILDCARD = "all"

POINTER_TEMPLATE = """# {skill} ({version})

Use the docs in `.shared/{skill}/{version}/` as the source of truth for this skill.
"""


def build_pointer_content(skill: str, version: str) -> str:
    return POINTER_TEMPLATE.format(skill=skill, version=version)


@dataclass
class InstallResult:
    """What one target installed: report lines plus every file written."""
    target: str
    entries: list[tuple[str, Path]] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)


@dataclass
class InstallTarget:
    """
    A host layout.

    tree_parts / pointer_parts are path templates relative to the
    destination root; `{skill}` and `{version}` are substituted.
    """
    name: str
    tree_parts: tuple[str, ...]
    tree_label: Optional[str] = None
    pointer_parts: Optional[tuple[str, ...]] = None
    rename: Optional[RenameFn] = None

    def tree_dir(self, dest_root: Path, skill: str, version: str) -> Path:
        return _render(dest_root, self.tree_parts, skill, version)

    def pointer_path(self, dest_root: Path, skill: str) -> Optional[Path]:
        if self.pointer_parts is None:
            return None
        return _render(dest_root, self.pointer_parts, skill, "")

    def install(
        self,
        skill: str,
        version: str,
        version_dir: Path,
        dest_root: Path,
        options: CopyOptions,
    ) -> InstallResult:
        result = InstallResult(target=self.name)

        pointer = self.pointer_path(dest_root, skill)
        if pointer is not None:
            result.entries.append((self.name, pointer))

        tree_dir = self.tree_dir(dest_root, skill, version)
        result.files.extend(copy_tree(version_dir, tree_dir, options, self.rename))
        result.entries.append((self.tree_label or self.name, tree_dir))

        if pointer is not None:
            content = build_pointer_content(skill, version)
            if write_text_if_allowed(pointer, content, options):
                result.files.append(pointer)

        return result


def _render(dest_root: Path, parts: tuple[str, ...], skill: str, version: str) -> Path:
    return dest_root.joinpath(*(p.format(skill=skill, version=version) for p in parts))


SHARED_TREE = (".shared", "{skill}", "{version}")

# Order matters: "all" installs in this sequence
TARGETS = {
    "cursor": InstallTarget(
        name="cursor",
        tree_parts=SHARED_TREE,
        tree_label="shared",
        pointer_parts=(".cursor", "commands", "{skill}.md"),
    ),
    "antigravity": InstallTarget(
        name="antigravity",
        tree_parts=SHARED_TREE,
        tree_label="shared",
        pointer_parts=(".agent", "workflows", "{skill}.md"),
    ),
    "kiro": InstallTarget(
        name="kiro",
        tree_parts=SHARED_TREE,
        tree_label="shared",
        pointer_parts=(".kiro", "steering", "{skill}.md"),
    ),
    "docs": InstallTarget(
        name="docs",
        tree_parts=("docs", "{skill}", "{version}"),
    ),
    "claude": InstallTarget(
        name="claude",
        tree_parts=(".claude", "skills", "{skill}", "{version}"),
    ),
}


def select_targets(selector: str, targets: Optional[dict] = None) -> list[InstallTarget]:
    """
    Map an --ai value to the targets it installs.

    Raises:
        UnknownTargetError: selector is neither a target name nor "all"
    """
    targets = TARGETS if targets is None else targets
    if selector == WILDCARD:
        return list(targets.values())
    if selector not in targets:
        raise UnknownTargetError(selector, list(targets) + [WILDCARD])
    return [targets[selector]]


def install_targets(
    selector: str,
    skill: str,
    version: str,
    version_dir: Path,
    dest_root: Path,
    options: CopyOptions,
    targets: Optional[dict] = None,
) -> list[InstallResult]:
    """
    Run every target matching the selector, in order.

    A failing copy aborts the remaining targets.
    """
    return [
        target.install(skill, version, version_dir, dest_root, options)
        for target in select_targets(selector, targets)
    ]
