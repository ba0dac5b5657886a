"""
Minimal BCS (Binary Canonical Serialization) encoder.

Only the primitives the signed intent message needs:

  - ``u8``: 1 byte.
  - ``u64``: 8 bytes, little endian.
  - ``string``: ULEB128 byte length followed by UTF-8 bytes.
  - structs: fields concatenated in declaration order.

The encoding must match what the on-chain verifier reconstructs byte for
byte, so there is no support for maps or floats.
"""
U8_MAX = 2**8 - 1
U64_MAX = 2**64 - 1
# BCS caps sequence lengths at 2**31 - 1.
MAX_SEQUENCE_LENGTH = 2**31 - 1


def encode_uleb128(value: int) -> bytes:
    if value < 0:
        raise ValueError(f"ULEB128 cannot encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_u8(value: int) -> bytes:
    if not 0 <= value <= U8_MAX:
        raise ValueError(f"u8 out of range: {value}")
    return bytes([value])


def encode_u64(value: int) -> bytes:
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"u64 out of range: {value}")
    return value.to_bytes(8, "little")


def encode_str(value: str) -> bytes:
    raw = value.encode("utf-8")
    if len(raw) > MAX_SEQUENCE_LENGTH:
        raise ValueError(f"string too long for BCS: {len(raw)} bytes")
    return encode_uleb128(len(raw)) + raw
