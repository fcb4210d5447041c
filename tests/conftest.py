"""Pytest configuration for supabase_compat tests."""
import sys
from pathlib import Path

# Add src/ to path for src-layout imports without an editable install
_PROJECT_ROOT = Path(__file__).parent.parent
_SRC = _PROJECT_ROOT / 'src'
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import pytest


@pytest.fixture
def token_path(tmp_path):
    """Path for a file-backed token slot inside a temp dir."""
    return tmp_path / 'auth' / 'token.json'
