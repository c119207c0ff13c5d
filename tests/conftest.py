import tempfile
from pathlib import Path

import pytest

from agent_skills import Config


SKILL_MD = "---\nname: odoo-18\ndescription: Odoo 18 guidance\n---\nBody\n"
MODEL_GUIDE = "# Model guide\n\nUse _name and _description.\n"


def build_asset_tree(root: Path) -> Path:
    """odoo/{17.0,18.0} plus a nested file, and a folder that is not a skill."""
    v18 = root / "odoo" / "18.0"
    (v18 / "dev").mkdir(parents=True, exist_ok=True)
    (v18 / "SKILL.md").write_text(SKILL_MD)
    (v18 / "odoo-18-model-guide.md").write_text(MODEL_GUIDE)
    (v18 / "CLAUDE.md").write_text("# Claude entry\n")
    (v18 / "dev" / "notes.txt").write_text("plain text\n")

    (root / "odoo" / "17.0").mkdir(parents=True, exist_ok=True)
    (root / "odoo" / "17.0" / "SKILL.md").write_text("---\nname: odoo-17\n---\n")

    (root / "nextjs" / "15").mkdir(parents=True, exist_ok=True)
    (root / "nextjs" / "15" / "SKILL.md").write_text("# Next\n")

    (root / "empty-skill").mkdir(exist_ok=True)
    (root / "__pycache__" / "x").mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def workspace():
    """Temporary asset root, destination and config dir."""
    with tempfile.TemporaryDirectory() as tmp:
        tmp = Path(tmp)
        assets = build_asset_tree(tmp / "assets")
        dest = tmp / "proj"
        dest.mkdir()
        config = Config(
            asset_root=assets,
            config_dir=tmp / "state",
            notice_delay=0,
            cli_version="1.0.0",
        )
        yield config, dest


def snapshot(directory: Path) -> dict:
    """Relative path -> bytes for every file under a directory."""
    return {
        str(p.relative_to(directory)): p.read_bytes()
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    }
