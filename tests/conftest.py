import pytest
from board_store import DuckDBStore, MemoryStore
from board_service import BoardService


@pytest.fixture(params=["memory", "duckdb"])
def store(request):
    """Every store-backed test runs against both stores."""
    s = MemoryStore() if request.param == "memory" else DuckDBStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def service(store):
    return BoardService(store)
