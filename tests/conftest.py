"""Pytest configuration for the pylox test suite."""

import sys
from pathlib import Path

import pytest

# Add src directory to path for pylox imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pylox.tokens import TK_IDENT, Token  # noqa: E402


@pytest.fixture
def ident():
    """Build an identifier token, as the parser would hand to the environment."""

    def make(name: str, line: int = 1) -> Token:
        return Token(TK_IDENT, name, line, 1)

    return make
