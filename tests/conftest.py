"""Shared test fixtures for mergegen."""

import shutil
from pathlib import Path

import pytest

from mergegen.engine import TemplateEngine

FIXTURES = Path(__file__).parent / "fixtures"
TEMPLATES = FIXTURES / "templates"
TARGETS = FIXTURES / "targets"


@pytest.fixture
def engine():
    return TemplateEngine()


@pytest.fixture
def inject_target(tmp_path):
    """Output folder pre-populated with a hand-written file to patch."""
    out = tmp_path / "inject"
    shutil.copytree(TARGETS / "inject", out)
    return out
