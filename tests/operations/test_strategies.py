from types import MappingProxyType

import pytest

from undo_engine.common.errors import NoBackupError, OperationFailed
from undo_engine.operations import (
    IncrementOperation,
    ReplaceStateOperation,
    SetFieldsOperation,
    SnapshotOperation,
    set_field,
)


class ExplodingDict(dict):
    """Mapping that refuses to store one key."""

    def __init__(self, *args, forbidden: str, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.forbidden = forbidden

    def __setitem__(self, key, value) -> None:
        if key == self.forbidden and value != "original":
            raise RuntimeError(f"{key} is read-only")
        super().__setitem__(key, value)


def test_set_field_round_trip(doc) -> None:
    op = set_field(doc, "title", "V1")
    assert op.description == "Set title"
    res = op.apply()
    assert res.is_ok
    assert res.value == {"title": "V1"}
    assert doc.title == "V1"
    assert op.backup == {"title": "untitled"}

    assert op.revert().is_ok
    assert doc.title == "untitled"
    assert not op.has_backup


def test_delta_captures_only_assigned_fields(doc) -> None:
    op = SetFieldsOperation(doc, {"title": "new", "views": 7})
    op.apply()
    assert set(op.backup) == {"title", "views"}


def test_revert_without_apply_returns_no_backup(doc) -> None:
    op = set_field(doc, "title", "V1")
    res = op.revert()
    assert res.is_err
    assert isinstance(res.error, NoBackupError)
    assert doc.title == "untitled"


def test_revert_after_discard_returns_no_backup(doc) -> None:
    op = set_field(doc, "title", "V1")
    op.apply()
    op.discard_backup()
    assert isinstance(op.revert().error, NoBackupError)
    assert doc.title == "V1"


def test_apply_twice_is_refused(doc) -> None:
    op = IncrementOperation(doc, "views", 2)
    assert op.apply().is_ok
    res = op.apply()
    assert isinstance(res.error, OperationFailed)
    assert doc.views == 2


def test_missing_field_fails_without_capture(doc) -> None:
    op = set_field(doc, "subtitle", "x")
    res = op.apply()
    assert isinstance(res.error, OperationFailed)
    assert not op.has_backup
    assert not hasattr(doc, "subtitle")


def test_partial_forward_failure_restores_receiver() -> None:
    receiver = ExplodingDict({"a": 1, "b": "original"}, forbidden="b")
    op = SetFieldsOperation(receiver, {"a": 2, "b": "changed"})
    res = op.apply()
    assert isinstance(res.error, OperationFailed)
    assert isinstance(res.error.cause, RuntimeError)
    assert dict(receiver) == {"a": 1, "b": "original"}
    assert not op.has_backup


def test_mapping_receivers_are_supported() -> None:
    receiver = {"title": "old"}
    op = set_field(receiver, "title", "new")
    op.apply()
    assert receiver == {"title": "new"}
    op.revert()
    assert receiver == {"title": "old"}


def test_snapshot_is_immutable_and_deep_copied(doc) -> None:
    doc.tags = ["a"]

    def add_tag(receiver) -> int:
        receiver.tags.append("b")
        receiver.title = "tagged"
        return len(receiver.tags)

    op = SnapshotOperation(doc, ["tags", "title"], add_tag, description="Tag")
    res = op.apply()
    assert res.value == 2
    assert isinstance(op.backup, MappingProxyType)
    assert op.backup["tags"] == ["a"]

    op.revert()
    assert doc.tags == ["a"]
    assert doc.title == "untitled"


def test_snapshot_recovers_when_mutator_raises(doc) -> None:
    def half_done(receiver) -> None:
        receiver.title = "half"
        raise ValueError("disk full")

    op = SnapshotOperation(doc, ["title"], half_done)
    res = op.apply()
    assert isinstance(res.error, OperationFailed)
    assert doc.title == "untitled"


def test_snapshot_without_mutator_fails(doc) -> None:
    res = SnapshotOperation(doc, ["title"]).apply()
    assert res.is_err
    assert doc.title == "untitled"


def test_replace_state_snapshots_wider_field_set(doc) -> None:
    op = ReplaceStateOperation(doc, {"title": "T"}, fields=["title", "body"])
    op.apply()
    assert dict(op.backup) == {"title": "untitled", "body": ""}
    doc.body = "edited elsewhere"
    op.revert()
    assert doc.title == "untitled"
    assert doc.body == ""


def test_replace_state_rejects_unsnapshotted_fields(doc) -> None:
    op = ReplaceStateOperation(doc, {"title": "T", "body": "B"}, fields=["title"])
    assert isinstance(op.apply().error, OperationFailed)
    assert doc.title == "untitled"


def test_increment_uses_computed_inverse(doc) -> None:
    op = IncrementOperation(doc, "views", 5)
    assert op.apply().value == 5
    assert op.backup is None
    doc.views += 1  # unrelated change survives the inverse
    assert op.revert().value == 1


def test_increment_rejects_non_numeric_field(doc) -> None:
    op = IncrementOperation(doc, "title")
    assert isinstance(op.apply().error, OperationFailed)
    assert doc.title == "untitled"


@pytest.mark.parametrize("amount", ["1", 0.2, True])
def test_increment_requires_integer_amount(doc, amount) -> None:
    with pytest.raises(TypeError):
        IncrementOperation(doc, "views", amount)  # type: ignore[arg-type]


@pytest.mark.parametrize("start", [0.1, True])
def test_increment_refuses_non_integer_field(start) -> None:
    receiver = {"score": start}
    op = IncrementOperation(receiver, "score")
    assert isinstance(op.apply().error, OperationFailed)
    assert receiver["score"] is start
    assert not op.has_backup


def test_set_fields_requires_values(doc) -> None:
    with pytest.raises(ValueError):
        SetFieldsOperation(doc, {})


def test_set_fields_keeps_recorded_value_across_undo_and_redo(doc) -> None:
    tags = ["draft"]
    op = set_field(doc, "tags", tags)
    assert op.apply().is_ok
    doc.tags.append("edited in place")
    tags.append("caller edit")
    assert op.revert().is_ok
    assert doc.tags == []

    assert op.apply().is_ok
    assert doc.tags == ["draft"]
    assert op.to_state(encode=lambda child: {})["values"] == {"tags": ["draft"]}
