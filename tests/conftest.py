"""
Pytest configuration and fixtures for beyond-foundry tests.
"""

import json
import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing beyond_foundry
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def ddb_sample():
    """Level 5 Wood Elf evocation wizard."""
    return load_fixture("ddb_character_sample.json")


@pytest.fixture
def ddb_druid():
    """Level 3 druid, wrapped in a {"data": ...} envelope."""
    return load_fixture("ddb_druid_level3.json")

