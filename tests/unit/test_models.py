from datetime import datetime, timezone

from bulletin.models.database import MessageRecord
from bulletin.models.message import MessageBoundary


def test_message_record_repr():
    record = MessageRecord(
        id="abc",
        target="t@example.com",
        sender="s@example.com",
        title="Hi",
        publication_timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
        urgent=True,
    )
    assert "abc" in repr(record)


def test_message_record_indexes():
    """Test that the lookup columns and the sort order are indexed."""
    table = MessageRecord.__table__
    indexed = {col.name for index in table.indexes for col in index.columns}

    assert {"target", "sender", "urgent", "publication_timestamp", "id"} <= indexed


def test_boundary_fields_are_optional():
    """Test that an empty payload parses, leaving validation to the service."""
    boundary = MessageBoundary.model_validate({})

    assert boundary.target is None
    assert boundary.urgent is None
    assert boundary.extra_attributes is None


def test_boundary_accepts_camel_case_and_field_names():
    by_alias = MessageBoundary.model_validate({
        "publicationTimestamp": "2026-01-01T00:00:00Z",
        "extraAttributes": {"a": 1},
    })
    by_name = MessageBoundary.model_validate({"extra_attributes": {"a": 1}})

    assert by_alias.publication_timestamp.year == 2026
    assert by_alias.extra_attributes == by_name.extra_attributes == {"a": 1}
