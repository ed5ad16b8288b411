import pytest

from orderpad.schemas import OrderRecord, new_order_id, now_iso
from orderpad.services.recording import format_duration
from orderpad.services.transcription import deduplicate_lines, mask_credential, validate_credential


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1x Pizza\n1x Pizza\n2x Coke", "1x Pizza\n2x Coke"),
        ("1x Pizza\n\n   \n2x Coke\n", "1x Pizza\n2x Coke"),
        ("b\na\nb\na", "b\na"),
        ("", ""),
        ("1x Pizza\r\n1x Pizza", "1x Pizza"),
    ],
)
def test_deduplicate_lines(text, expected):
    assert deduplicate_lines(text) == expected


def test_deduplicate_lines_is_case_sensitive():
    assert deduplicate_lines("1x pizza\n1x Pizza") == "1x pizza\n1x Pizza"


@pytest.mark.parametrize(
    "value, valid",
    [
        ("sk-abc123", True),
        ("sk-", True),
        ("pk-abc123", False),
        ("", False),
        ("   ", False),
        (" sk-abc", False),
    ],
)
def test_validate_credential(value, valid):
    assert validate_credential(value) is valid


def test_mask_credential_keeps_prefix_and_last_four():
    assert mask_credential("sk-proj-1234567890abcd") == "sk-...abcd"


def test_mask_credential_hides_short_keys_entirely():
    assert mask_credential("sk-1234") == "sk-..."


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0:00"), (5.9, "0:05"), (65, "1:05"), (600, "10:00"), (-3, "0:00")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_now_iso_is_utc_with_milliseconds():
    stamp = now_iso()

    assert stamp.endswith("Z")
    assert len(stamp.split(".")[1]) == len("000Z")


def test_new_order_ids_are_distinct_and_numeric():
    ids = {new_order_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(i.isdigit() for i in ids)


def test_share_message():
    record = OrderRecord(
        id="1",
        audio_uri="",
        transcribed_text="1x Ramen",
        timestamp="2026-10-19T18:30:00.000Z",
        staff_name="Kim",
        duration="0:10",
    )

    assert record.share_message() == "Order from Kim\n\n1x Ramen\n\nRecorded: 2026-10-19 18:30"


def test_order_record_serializes_camel_case():
    record = OrderRecord(
        id="1",
        audio_uri="a.m4a",
        transcribed_text="1x Ramen",
        timestamp="2026-10-19T18:30:00.000Z",
        staff_name="Kim",
        duration="0:10",
        table_number=3,
    )

    data = record.model_dump(mode="json", by_alias=True)

    assert data["audioUri"] == "a.m4a"
    assert data["transcribedText"] == "1x Ramen"
    assert data["tableNumber"] == 3
    assert data["guestCount"] is None
    assert data["status"] == "open"


def test_order_record_rejects_bad_timestamp():
    with pytest.raises(ValueError):
        OrderRecord(
            id="1",
            audio_uri="",
            transcribed_text="x",
            timestamp="yesterday",
            staff_name="Kim",
            duration="0:10",
        )


@pytest.mark.parametrize(
    "value, stored",
    [
        ("2026-10-19T18:30:00Z", "2026-10-19T18:30:00.000Z"),
        ("2026-10-19T18:30:00.5Z", "2026-10-19T18:30:00.500Z"),
        ("2026-10-19T10:00:00+05:00", "2026-10-19T05:00:00.000Z"),
        ("2026-10-19T18:30:00", "2026-10-19T18:30:00.000Z"),
        ("2026-10-19", "2026-10-19T00:00:00.000Z"),
    ],
)
def test_order_record_normalizes_timestamp_to_utc(value, stored):
    record = OrderRecord(
        id="1",
        audio_uri="",
        transcribed_text="x",
        timestamp=value,
        staff_name="Kim",
        duration="0:10",
    )

    assert record.timestamp == stored
