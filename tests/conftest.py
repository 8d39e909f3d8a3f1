from pathlib import Path

import pytest

from helpers import write_tree
from vibe_generate.utils.config import CONFIG_ENV, ENV_OVERRIDES


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in [CONFIG_ENV, *ENV_OVERRIDES.values()]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    root = tmp_path / "checkout" / "templates"
    write_tree(root / "hello", {
        "src/{{project-name}}.rs": "mod {{project-name}};\n",
        "README.md": "# {{project-name}}\n",
    })
    write_tree(root / "nextjs", {"package.json": '{"name": "{{project-name}}"}\n'})
    return root
