import pytest

from undo_engine.common.errors import NoBackupError, OperationFailed, UndoEngineError, as_failure
from undo_engine.common.result import Result


def test_ok_result_unwraps_value() -> None:
    res = Result.ok(3)
    assert res.is_ok and not res.is_err
    assert bool(res)
    assert res.unwrap() == 3
    assert res.unwrap_or(0) == 3


def test_failed_result_raises_on_unwrap() -> None:
    err = NoBackupError("never applied")
    res = Result.fail(err)
    assert res.is_err
    assert not res
    assert res.unwrap_or("fallback") == "fallback"
    with pytest.raises(NoBackupError):
        res.unwrap()


def test_fail_requires_error() -> None:
    with pytest.raises(TypeError):
        Result.fail(None)  # type: ignore[arg-type]


def test_as_failure_wraps_foreign_exceptions() -> None:
    original = KeyError("title")
    wrapped = as_failure(original)
    assert isinstance(wrapped, OperationFailed)
    assert wrapped.cause is original

    engine_err = UndoEngineError("kept")
    assert as_failure(engine_err) is engine_err
