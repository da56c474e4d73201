"""Unit tests for the core data types.

Tests cover:
- Moderation state classification
- Credential construction and header rendering
- Lenient parsing of upstream form and submission objects
- The wire representation of output rows
"""

import pytest

from guestbook_feed.types import (
    Credential,
    FormSummary,
    ModerationState,
    OutputRow,
    Submission,
)


class TestModerationState:
    """Test classification of upstream moderation states."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("verified", ModerationState.VERIFIED),
            ("spam", ModerationState.SPAM),
            ("ham", ModerationState.OTHER),
            ("", ModerationState.OTHER),
            (None, ModerationState.OTHER),
        ],
    )
    def test_classify(self, raw, expected):
        """Test that raw states map to verified, spam or other."""
        assert ModerationState.classify(raw) == expected


class TestCredential:
    """Test credential construction."""

    def test_empty_token_rejected(self):
        """Test that an empty token cannot build a Credential."""
        with pytest.raises(ValueError):
            Credential(token="")

    def test_empty_site_scope_becomes_none(self):
        """Test that an empty site scope means no scoping."""
        assert Credential(token="t", site_scope="").site_scope is None

    def test_auth_headers(self):
        """Test the bearer Authorization header."""
        assert Credential(token="abc").auth_headers() == {"Authorization": "Bearer abc"}

    def test_repr_hides_token(self):
        """Test that the token never appears in the repr."""
        assert "secret" not in repr(Credential(token="secret"))


class TestFormSummary:
    """Test FormSummary parsing from upstream objects."""

    def test_from_dict(self):
        """Test parsing a complete form object, ignoring unknown members."""
        form = FormSummary.from_dict({"id": "f1", "name": "guestbook", "site_id": "s1", "paths": []})
        assert form == FormSummary(id="f1", name="guestbook", site_id="s1")

    def test_numeric_id_and_null_name(self):
        """Test that a numeric id is stringified and a null name becomes empty."""
        form = FormSummary.from_dict({"id": 42, "name": None})
        assert form.id == "42"
        assert form.name == ""
        assert form.site_id is None

    def test_non_string_members_stringified(self):
        """Test that drifted name and site_id values are stringified."""
        form = FormSummary.from_dict({"id": "f1", "name": 7, "site_id": 99})
        assert form.name == "7"
        assert form.site_id == "99"


class TestSubmission:
    """Test Submission parsing from upstream objects."""

    def test_missing_data_is_empty_bag(self):
        """Test that a submission without data gets an empty bag."""
        sub = Submission.from_dict({"created_at": "2024-01-01", "state": "verified"})
        assert sub.data == {}

    def test_null_data_is_empty_bag(self):
        """Test that null data becomes an empty bag."""
        assert Submission.from_dict({"data": None}).data == {}

    @pytest.mark.parametrize("data", [[], ["name", "Ann"], "name=Ann", 3])
    def test_non_object_data_is_empty_bag(self, data):
        """Test that list, string or numeric data becomes an empty bag."""
        assert Submission.from_dict({"data": data, "state": "verified"}).data == {}

    def test_non_string_timestamp_and_state_stringified(self):
        """Test that numeric created_at and state are stringified."""
        sub = Submission.from_dict({"data": {}, "created_at": 1704067200, "state": 1})
        assert sub.created_at == "1704067200"
        assert sub.state == "1"

    def test_is_spam(self):
        """Test spam detection from the moderation state."""
        assert Submission(state="spam").is_spam is True
        assert Submission(state="verified").is_spam is False
        assert Submission().is_spam is False


class TestOutputRow:
    """Test the wire representation of output rows."""

    def test_to_dict_uses_wire_keys(self):
        """Test that to_dict emits name, message, from, created_at and state."""
        row = OutputRow(name="Ann", message="Hi", from_="Paris", created_at="2024-01-01", state="verified")
        assert row.to_dict() == {
            "name": "Ann",
            "message": "Hi",
            "from": "Paris",
            "created_at": "2024-01-01",
            "state": "verified",
        }

    def test_state_omitted_when_unknown(self):
        """Test that state is left out when the upstream sent none."""
        row = OutputRow(name="", message="", from_="", created_at="2024-01-01")
        assert "state" not in row.to_dict()

    def test_created_at_omitted_when_unknown(self):
        """Test that created_at is left out when the upstream sent none."""
        row = OutputRow(name="Ann", message="Hi", from_="Ann", state="verified")
        assert row.to_dict() == {"name": "Ann", "message": "Hi", "from": "Ann", "state": "verified"}

    def test_from_dict(self):
        """Test that from_dict reads the wire representation back."""
        data = {"name": "Ann", "message": "Hi", "from": "Ann", "created_at": "x", "state": "spam"}
        assert OutputRow.from_dict(data).to_dict() == data
