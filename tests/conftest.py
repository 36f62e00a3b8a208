"""
Pytest fixtures and configuration for docs-toc tests.
"""

import pytest
from pathlib import Path


@pytest.fixture
def write_doc(tmp_path: Path):
    """Write a list of lines as a document and return its path."""
    def _write(lines: list[str], name: str = "README.md", newline: str = "\n") -> Path:
        path = tmp_path / name
        path.write_bytes(newline.join(lines).encode("utf-8"))
        return path
    return _write


@pytest.fixture
def read_lines():
    """Read a document back as LF-split lines."""
    def _read(path: Path) -> list[str]:
        return path.read_bytes().decode("utf-8").split("\n")
    return _read


@pytest.fixture
def docs_project(tmp_path: Path) -> Path:
    """Create a small project with a docs tree and a README carrying a mark."""
    docs = tmp_path / "docs"
    (docs / "guide").mkdir(parents=True)
    (docs / "api").mkdir()
    (docs / "node_modules" / "pkg").mkdir(parents=True)

    (docs / "10-faq.md").write_text("# FAQ\n\nQuestions.\n", encoding="utf-8")
    (docs / "2-install.md").write_text(
        "---\ntitle: Installation\n---\n\n# Install\n", encoding="utf-8"
    )
    (docs / "guide" / "intro.md").write_text("# Introduction\n", encoding="utf-8")
    (docs / "guide" / "advanced.md").write_text(
        "---\norder: 1\n---\n# Advanced Usage\n", encoding="utf-8"
    )
    (docs / "api" / "draft.md").write_text(
        "---\nignore: true\n---\n# Draft\n", encoding="utf-8"
    )
    (docs / "api" / "reference.md").write_text("No heading here.\n", encoding="utf-8")
    (docs / "node_modules" / "pkg" / "readme.md").write_text("# Vendored\n", encoding="utf-8")

    (tmp_path / "README.md").write_text(
        "# My Project\n\n## Contents\n\n<!--toc-->\n\n## License\n", encoding="utf-8"
    )
    return tmp_path
