"""
Tests for packaging metadata.
"""

from __future__ import annotations

from pathlib import Path

import envbind

ROOT = Path(__file__).resolve().parents[1]


def test_pyproject_declares_runtime_and_test_dependencies() -> None:
    pyproject = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    assert "PyYAML" in pyproject
    assert "[project.optional-dependencies]" in pyproject
    assert "pytest" in pyproject
    assert 'envbind = "envbind.cli:main"' in pyproject


def test_package_version_matches_pyproject() -> None:
    pyproject = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    assert f'version = "{envbind.__version__}"' in pyproject


def test_public_api_is_exported() -> None:
    for name in envbind.__all__:
        assert hasattr(envbind, name), name
