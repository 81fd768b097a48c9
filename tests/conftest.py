"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local kvindex package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from kvindex.config.models import KvIndexConfig  # noqa: E402
from kvindex.core.logging import clear_correlation_id  # noqa: E402
from kvindex.model.store import DocumentStore  # noqa: E402
from kvindex.store.memory import MemoryAdapter  # noqa: E402


@pytest.fixture
def adapter() -> MemoryAdapter:
    return MemoryAdapter()


@pytest.fixture
def store(adapter: MemoryAdapter) -> DocumentStore:
    """A store over a fresh memory adapter with every test document type registered."""
    from tests.support.documents import ALL_DOCUMENTS

    store = DocumentStore(adapter, KvIndexConfig.model_validate({"store": {"namespace": "test"}}))
    store.register(*ALL_DOCUMENTS)
    return store


@pytest.fixture(autouse=True)
def _clear_correlation() -> Generator[None, None, None]:
    yield
    clear_correlation_id()
