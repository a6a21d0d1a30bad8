import sys
from pathlib import Path

import pytest

# Project root, so pillar_detection imports without installation
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Sibling helpers module
TESTS = Path(__file__).resolve().parent
if str(TESTS) not in sys.path:
    sys.path.insert(0, str(TESTS))

from helpers import FakeEngine  # noqa: E402


@pytest.fixture
def engine():
    return FakeEngine()
