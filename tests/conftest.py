"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from bem_examples.config.models import LevelSetConfig

BUTTON_FRAGMENT = "{ block: 'button', text: 'Click me!' }"
BUTTON_IDENTITY = "ZdCndyPSZy08Bui3OnfQKEc9cnI"

BUTTON_DOC = f"""# Button

A simple button.

```bemjson
{BUTTON_FRAGMENT}
```
"""


def write(root: Path, relative: str, content: str = "") -> Path:
    """Create a file under root, parents included."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write_file():
    """Helper creating files below a root."""
    return write


@pytest.fixture
def button_fragment() -> str:
    """Body of the inline example in ``button.md``."""
    return BUTTON_FRAGMENT


@pytest.fixture
def button_identity() -> str:
    """Content identity of :func:`button_fragment`."""
    return BUTTON_IDENTITY


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project with two levels of blocks.

    ``blocks`` comes first in the search path and shadows ``desktop.blocks``::

        blocks/button/button.md                              (inline example)
        blocks/button/button.examples/10-simple.bemjson.js
        blocks/button/button.examples/20-nested.blocks/button/button.css
        blocks/link/link.examples/10-link.bemjson.js
        desktop.blocks/button/button.examples/10-simple.bemjson.js
        desktop.blocks/button/button.examples/30-desktop.bemjson.js
    """
    write(tmp_path, "blocks/button/button.md", BUTTON_DOC)
    write(tmp_path, "blocks/button/button.examples/10-simple.bemjson.js", "({ block: 'button' })")
    write(
        tmp_path,
        "blocks/button/button.examples/20-nested.blocks/button/button.css",
        ".button { color: red; }",
    )
    write(tmp_path, "blocks/link/link.examples/10-link.bemjson.js", "({ block: 'link' })")
    write(
        tmp_path,
        "desktop.blocks/button/button.examples/10-simple.bemjson.js",
        "({ block: 'button', mods: { view: 'desktop' } })",
    )
    write(
        tmp_path,
        "desktop.blocks/button/button.examples/30-desktop.bemjson.js",
        "({ block: 'button', mods: { size: 'l' } })",
    )
    return tmp_path


@pytest.fixture
def levels(project_root: Path) -> list[Path]:
    """Search path of the sample project."""
    return [project_root / "blocks", project_root / "desktop.blocks"]


@pytest.fixture
def set_config() -> LevelSetConfig:
    """Level-set config for the sample project."""
    return LevelSetConfig(destPath="set.examples", levels=["blocks", "desktop.blocks"])
