import os
import sys
import tempfile
from pathlib import Path

import pytest

# Ensure project root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# api_app reads its config at import time, so point it at a throwaway SQLite DB first
_DB_DIR = tempfile.mkdtemp(prefix="pricing-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{Path(_DB_DIR) / 'test.db'}")
os.environ["API_KEY"] = "test-key"

from quantity_transformer import QuantityGroup  # noqa: E402


@pytest.fixture()
def mock_group():
    return QuantityGroup(
        id="test-group-1",
        name="Test Quantities",
        values="100,250,500,1000,custom",
        default_value="500",
        custom_min=10,
        custom_max=50000,
    )


@pytest.fixture()
def mock_group_no_custom():
    return QuantityGroup(
        id="test-group-2",
        name="Standard Quantities",
        values="25,50,100,250",
        default_value="100",
    )
