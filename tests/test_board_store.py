import pytest
from board_store import DuckDBStore
from boards import Generation
from life_errors import StepConflictError, StorageError


def _board_with_history(store, states=("010\n111\n010", "111\n101\n111")):
    board = store.create_board(states[0], 3, 3)
    for idx, state in enumerate(states):
        store.persist_generation(board, Generation(board.id, idx, state))
    return board


def test_create_and_load_board(store):
    board = store.create_board("01\n10", 2, 2)
    loaded = store.load_board(board.id)
    assert loaded.id == board.id
    assert (loaded.initial_state, loaded.rows, loaded.cols) == ("01\n10", 2, 2)
    assert loaded.created_at is not None


def test_board_ids_are_distinct(store):
    ids = {store.create_board("0", 1, 1).id for _ in range(3)}
    assert len(ids) == 3


def test_unknown_board_is_none(store):
    assert store.load_board(12345) is None


def test_persist_and_load_generations(store):
    board = _board_with_history(store)
    assert store.count_generations(board) == 2
    assert store.load_generation(board, 1).state == "111\n101\n111"
    assert store.load_generation(board, 2) is None


def test_append_guard_rejects_duplicate_step(store):
    board = _board_with_history(store)
    with pytest.raises(StepConflictError):
        store.persist_generation(board, Generation(board.id, 1, "000\n000\n000"))
    assert store.load_generation(board, 1).state == "111\n101\n111"


def test_append_guard_rejects_gap(store):
    board = _board_with_history(store)
    with pytest.raises(StepConflictError):
        store.persist_generation(board, Generation(board.id, 5, "000\n000\n000"))
    assert store.count_generations(board) == 2


def test_persist_for_missing_board_fails(store):
    board = store.create_board("0", 1, 1)
    store.delete_board(board)
    with pytest.raises(StorageError):
        store.persist_generation(board, Generation(board.id, 0, "0"))


def test_persist_rejects_foreign_generation(store):
    a = store.create_board("0", 1, 1)
    b = store.create_board("0", 1, 1)
    with pytest.raises(StorageError):
        store.persist_generation(a, Generation(b.id, 0, "0"))


def test_delete_cascades_to_generations(store):
    board = _board_with_history(store)
    other = _board_with_history(store)

    assert store.delete_board(board) is True
    assert store.load_board(board.id) is None
    assert store.count_generations(board) == 0
    assert store.load_generation(board, 0) is None
    # other boards are untouched
    assert store.count_generations(other) == 2

    assert store.delete_board(board) is False


def test_transaction_rolls_back_on_error(store):
    created = []
    with pytest.raises(RuntimeError):
        with store.transaction():
            board = store.create_board("1", 1, 1)
            created.append(board)
            store.persist_generation(board, Generation(board.id, 0, "1"))
            raise RuntimeError("boom")

    assert store.load_board(created[0].id) is None
    assert store.count_generations(created[0]) == 0


def test_transaction_commits(store):
    with store.transaction():
        board = store.create_board("1", 1, 1)
        store.persist_generation(board, Generation(board.id, 0, "1"))
    assert store.load_board(board.id) is not None
    assert store.count_generations(board) == 1


def test_duckdb_file_persists_between_connections(tmp_path):
    path = str(tmp_path / "nested" / "life.duckdb")   # nested dir exercises mkdir
    with DuckDBStore(path) as store:
        board = _board_with_history(store)

    with DuckDBStore(path) as store:
        loaded = store.load_board(board.id)
        assert loaded.initial_state == "010\n111\n010"
        assert store.count_generations(loaded) == 2
        # the id sequence continues instead of restarting
        assert store.create_board("0", 1, 1).id != board.id
