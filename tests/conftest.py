"""Shared test fixtures for all test modules."""

import sys
import tempfile
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import EngineConfig
from engine import SigilEngine


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_lists():
    """Small fantasy table store for testing."""
    return {
        "weapon": {
            "melee": ["sword", "axe", "mace ^2"],
            "ranged": ["bow", "crossbow"],
        },
        "materials": ["iron", "steel", "oak"],
        "creature": ["goblin", "owl", "ogre"],
        "colors": ["red", "blue"],
        "single": ["TEST"],
        "description": ["[materials] [weapon.melee]"],
        "empty": [],
        "not_a_list": "just a string",
    }


@pytest.fixture
def sample_templates():
    """Named templates matching sample_lists."""
    return {
        "loot": ["{a} [weapon.melee] of [materials]"],
        "encounter": ["{1-4} [creature.pluralForm]", "a lone [creature]"],
    }


@pytest.fixture
def engine(sample_lists, sample_templates):
    """Seeded engine over sample_lists."""
    return SigilEngine(sample_lists, templates=sample_templates, config=EngineConfig(seed="tests"))


def make_engine(lists: dict, **config) -> SigilEngine:
    """Build an engine over lists with optional EngineConfig overrides."""
    config.setdefault("seed", "tests")
    return SigilEngine(lists, config=EngineConfig(**config))


def write_yaml(directory: Path, name: str, content: str) -> Path:
    """Write a YAML file into directory and return its path."""
    path = directory / name
    path.write_text(content)
    return path
