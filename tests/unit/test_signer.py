"""
test_signer.py
"""
import pytest
from eth_account import Account

from src.feedrelay.oracle import bcs
from src.feedrelay.oracle.schemas import (
    IntentMessage,
    IntentScope,
    PriceFeedResult,
    SignedEnvelope,
)
from src.feedrelay.oracle.signer import EnclaveSigner, recover_signer

from fakes import TEST_KEY

TIMESTAMP = 1744038900000


def sample_payload(**overrides):
    values = {
        "oracle_id": "test_oracle",
        "price_feed_id": "test_price_feed_id",
        "price": 10_050_000_000,
        "timestamp_ms": TIMESTAMP,
    }
    values.update(overrides)
    return PriceFeedResult(**values)


def test_uleb128():
    assert bcs.encode_uleb128(0) == b"\x00"
    assert bcs.encode_uleb128(127) == b"\x7f"
    assert bcs.encode_uleb128(128) == b"\x80\x01"
    assert bcs.encode_uleb128(300) == b"\xac\x02"


def test_primitive_encodings():
    assert bcs.encode_u8(7) == b"\x07"
    assert bcs.encode_u64(1) == b"\x01" + b"\x00" * 7
    assert bcs.encode_str("abc") == b"\x03abc"
    with pytest.raises(ValueError):
        bcs.encode_u64(2**64)
    with pytest.raises(ValueError):
        bcs.encode_u8(256)


def test_intent_message_layout():
    message = IntentMessage(
        intent=IntentScope.PRICE_FEED, timestamp_ms=TIMESTAMP, data=sample_payload(),
    )
    expected = (
        b"\x00"
        + TIMESTAMP.to_bytes(8, "little")
        + b"\x0btest_oracle"
        + b"\x12test_price_feed_id"
        + (10_050_000_000).to_bytes(8, "little")
        + TIMESTAMP.to_bytes(8, "little")
    )
    assert message.to_bcs() == expected


def test_scope_is_part_of_signed_bytes():
    payload = sample_payload()
    a = IntentMessage(intent=IntentScope.PRICE_FEED, timestamp_ms=TIMESTAMP, data=payload)
    b = IntentMessage(intent=IntentScope.PROCESS_DATA, timestamp_ms=TIMESTAMP, data=payload)
    assert a.to_bcs() != b.to_bcs()
    assert a.to_bcs()[1:] == b.to_bcs()[1:]


def test_signing_is_deterministic():
    signer = EnclaveSigner(private_key=TEST_KEY)
    first = signer.build(sample_payload(), TIMESTAMP, IntentScope.PRICE_FEED)
    second = signer.build(sample_payload(), TIMESTAMP, IntentScope.PRICE_FEED)

    assert first.signature == second.signature
    assert first.model_dump() == second.model_dump()
    assert len(bytes.fromhex(first.signature)) == 65


@pytest.mark.parametrize("change", [
    {"payload": {"price": 10_050_000_001}},
    {"payload": {"oracle_id": "other_oracle"}},
    {"payload": {"price_feed_id": "other_feed"}},
    {"payload": {"timestamp_ms": TIMESTAMP + 1}},
    {"timestamp_ms": TIMESTAMP + 1},
    {"scope": IntentScope.PROCESS_DATA},
])
def test_any_field_change_changes_signature(change):
    signer = EnclaveSigner(private_key=TEST_KEY)
    base = signer.build(sample_payload(), TIMESTAMP, IntentScope.PRICE_FEED)

    changed = signer.build(
        sample_payload(**change.get("payload", {})),
        change.get("timestamp_ms", TIMESTAMP),
        change.get("scope", IntentScope.PRICE_FEED),
    )
    assert changed.signature != base.signature


def test_signature_recovers_signer_address():
    signer = EnclaveSigner(private_key=TEST_KEY[2:])
    envelope = signer.build(sample_payload(), TIMESTAMP, IntentScope.PRICE_FEED)

    assert signer.address == Account.from_key(TEST_KEY).address
    assert recover_signer(envelope) == signer.address


def test_envelope_round_trips_through_json():
    signer = EnclaveSigner(private_key=TEST_KEY)
    envelope = signer.build(sample_payload(), TIMESTAMP, IntentScope.PRICE_FEED)

    dumped = envelope.model_dump(mode="json")
    assert dumped["response"]["intent"] == 0
    assert dumped["response"]["timestamp_ms"] == TIMESTAMP
    assert dumped["response"]["data"]["price"] == 10_050_000_000

    restored = SignedEnvelope.model_validate(dumped)
    assert restored == envelope
    assert recover_signer(restored) == signer.address


def test_ephemeral_keys_differ():
    assert EnclaveSigner().address != EnclaveSigner().address
