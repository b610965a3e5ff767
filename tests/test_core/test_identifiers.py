"""Unit tests for uuid-derived names (mc_relay/core/identifiers.py)."""

import pytest

from mc_relay.core.identifiers import channel_name_for, channel_topic_for, truncate_uuid

UUID = "069A79F4-44E9-4726-A5BE-FCA90E38AAF5"


@pytest.mark.unit
class TestTruncateUuid:
    def test_long_uuid_is_shortened(self):
        assert truncate_uuid(UUID) == "069A79F4…"

    def test_short_value_unchanged(self):
        assert truncate_uuid("abc") == "abc"
        assert truncate_uuid("12345678") == "12345678"

    def test_custom_length(self):
        assert truncate_uuid(UUID, 4) == "069A…"


@pytest.mark.unit
class TestChannelNames:
    def test_name_is_lowercase_prefix(self):
        assert channel_name_for(UUID) == "updates-069a79"

    def test_name_is_deterministic(self):
        assert channel_name_for(UUID) == channel_name_for(UUID)

    def test_short_uuid(self):
        assert channel_name_for("AB") == "updates-ab"

    def test_topic_carries_full_uuid(self):
        assert UUID in channel_topic_for(UUID)
