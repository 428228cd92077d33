"""
Tests for the participant roster.
"""

import pytest
from pydantic import ValidationError

from src.split import ParticipantNotFoundError, ParticipantRoster


class TestParticipantRoster:
    """Tests for ParticipantRoster."""

    def test_default_rows(self):
        """Test the default roster has three blank rows."""
        roster = ParticipantRoster()
        assert [(p.id, p.name, p.currency) for p in roster] == [
            (1, "", "NGN"),
            (2, "", "USD"),
            (3, "", "GBP"),
        ]

    def test_never_empty(self):
        """Test an empty starting list still yields one participant."""
        roster = ParticipantRoster(currencies=[], default_currency="EUR")
        assert len(roster) == 1
        assert roster.participants[0].currency == "EUR"

    def test_add_uses_default_currency(self):
        """Test new rows get the default currency and a fresh id."""
        roster = ParticipantRoster()
        added = roster.add()
        assert added.id == 4
        assert added.currency == "USD"
        assert roster.participants[-1] is added

    def test_ids_not_reused_after_removal(self):
        """Test removing the last row does not free its id."""
        roster = ParticipantRoster()
        assert roster.remove(3)
        assert roster.add().id == 4

    def test_remove_keeps_order(self):
        """Test removal preserves the order of the remaining rows."""
        roster = ParticipantRoster(currencies=["A", "B", "C", "D"])
        roster.remove(2)
        assert [p.currency for p in roster] == ["A", "C", "D"]

    def test_cannot_remove_last_participant(self):
        """Test removal below one participant is a no-op."""
        roster = ParticipantRoster(currencies=["USD"])
        assert roster.remove(1) is False
        assert len(roster) == 1

    def test_remove_unknown_id(self):
        """Test removing an unknown id changes nothing."""
        roster = ParticipantRoster()
        assert roster.remove(99) is False
        assert len(roster) == 3

    def test_update_in_place(self):
        """Test edits apply to the row with that id only."""
        roster = ParticipantRoster()
        row = roster.get(2)
        roster.update(2, name="Bob", currency="EUR")
        assert row.name == "Bob"
        assert row.currency == "EUR"
        assert roster.get(1).name == ""

    def test_update_unknown_id(self):
        """Test editing an unknown id raises."""
        with pytest.raises(ParticipantNotFoundError):
            ParticipantRoster().update(42, name="Ghost")

    def test_update_accepts_long_name(self):
        """Test long names are stored without truncation or errors."""
        roster = ParticipantRoster()
        roster.update(1, name="x" * 101)
        assert roster.get(1).name == "x" * 101

    def test_update_rejects_empty_currency(self):
        """Test currency codes are validated on assignment."""
        with pytest.raises(ValidationError):
            ParticipantRoster().update(1, currency="")

    def test_snapshot_is_detached(self):
        """Test snapshot copies do not follow later edits."""
        roster = ParticipantRoster()
        snapshot = roster.snapshot()
        roster.update(1, name="Later")
        assert snapshot[0].name == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
