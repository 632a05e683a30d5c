"""Tests for the msgspec serializer shared by the backends."""

from datetime import datetime, timedelta, timezone

import pytest

from kvcache.exceptions import DeserializationError, SerializationError
from kvcache.serialization import Envelope, Serializer


@pytest.fixture
def serializer():
    return Serializer()


class TestValues:
    @pytest.mark.parametrize(
        "value",
        [
            None,
            True,
            0,
            -17,
            2**63 - 1,
            -(2**63),
            3.25,
            "",
            "日本語 text",
            b"\x00raw",
            [],
            {},
            {"outer": {"inner": [1, {"x": None}]}},
        ],
    )
    def test_round_trip(self, serializer, value):
        assert serializer.loads(serializer.dumps(value)) == value

    def test_datetime_round_trip(self, serializer):
        moment = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        assert serializer.loads(serializer.dumps(moment)) == moment

    def test_offset_datetime_compares_equal(self, serializer):
        moment = datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=2)))

        assert serializer.loads(serializer.dumps(moment)) == moment

    @pytest.mark.parametrize(
        "value",
        [
            datetime(2024, 5, 17, 12, 30),
            {"at": datetime(2024, 5, 17, 12, 30)},
            [1, {"nested": (datetime(2024, 5, 17),)}],
            {datetime(2024, 5, 17): "key"},
        ],
    )
    def test_rejects_datetime_without_timezone(self, serializer, value):
        with pytest.raises(SerializationError, match="without a timezone"):
            serializer.dumps(value)

    def test_envelope_rejects_datetime_without_timezone(self, serializer):
        with pytest.raises(SerializationError, match="without a timezone"):
            serializer.dump_envelope({"at": datetime(2024, 5, 17)}, 10)

    def test_unsupported_type(self, serializer):
        with pytest.raises(SerializationError, match="object"):
            serializer.dumps(object())

    def test_integer_overflow(self, serializer):
        with pytest.raises(SerializationError):
            serializer.dumps(2**70)

    def test_corrupt_bytes(self, serializer):
        with pytest.raises(DeserializationError) as excinfo:
            serializer.loads(b"\xc1", location="somewhere")

        assert excinfo.value.location == "somewhere"
        assert isinstance(excinfo.value, SerializationError)


class TestEnvelope:
    def test_round_trip(self, serializer):
        data = serializer.dump_envelope({"a": [1, 2]}, 1234)

        envelope = serializer.load_envelope(data)

        assert envelope == Envelope(value={"a": [1, 2]}, expires_at=1234)

    def test_compact_array_layout(self, serializer):
        data = serializer.dump_envelope("v", 5)

        assert serializer.loads(data) == ["v", 5]

    def test_rejects_non_envelope(self, serializer):
        with pytest.raises(DeserializationError):
            serializer.load_envelope(serializer.dumps({"value": 1}))

    def test_rejects_bad_expiry_type(self, serializer):
        with pytest.raises(DeserializationError):
            serializer.load_envelope(serializer.dumps(["v", "soon"]))

    def test_truncated_payload(self, serializer):
        data = serializer.dump_envelope("a long enough value", 99)

        with pytest.raises(DeserializationError):
            serializer.load_envelope(data[:-3])
