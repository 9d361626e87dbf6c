import os
import sys
import shutil
import tempfile
from pathlib import Path

import pytest

# Ensure project root is importable and env defaults exist before app modules are imported
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

_STORAGE_DIR = tempfile.mkdtemp(prefix='blob-gateway-tests-')
os.environ.setdefault('BLOB_BACKEND', 'memory')
os.environ.setdefault('LOCAL_STORAGE_PATH', os.path.join(_STORAGE_DIR, 'local'))
os.environ.setdefault('DATABASE_URL', f"sqlite://{os.path.join(_STORAGE_DIR, 'test_db.sqlite3')}")
os.environ.setdefault('KV_ACCOUNT_ID', '')
os.environ.setdefault('KV_NAMESPACE_ID', '')
os.environ.setdefault('KV_API_TOKEN', '')


@pytest.fixture(autouse=True, scope='session')
def cleanup_test_storage():
    """Remove the temporary storage directory once the session is over."""
    yield
    shutil.rmtree(_STORAGE_DIR, ignore_errors=True)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
