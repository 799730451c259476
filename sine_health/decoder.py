"""Heart Rate Measurement (0x2A37) decoder.

Only the heart rate field is read. Sensor contact, energy expended and RR
interval bits may be set in the flags byte; the bytes they describe follow
the heart rate field and are never examined.
"""

from collections.abc import Sequence

# Flags bit 0: HR value format (0 = uint8, 1 = uint16 little-endian)
HR_VALUE_FORMAT_UINT16 = 0b1


def decode_heart_rate(data: bytes | bytearray | Sequence[int]) -> int | None:
    """Decode the heart rate value from a Heart Rate Measurement payload.

    Args:
        data: Raw bytes from HR measurement characteristic (0x2A37)

    Returns:
        Heart rate in BPM, or None if the payload is empty or too short for
        the format declared by its flags byte
    """
    if not data:
        return None

    flags = data[0]
    is_16_bit = flags & HR_VALUE_FORMAT_UINT16 != 0

    if is_16_bit and len(data) >= 3:
        return data[1] | (data[2] << 8)
    # A uint16 payload truncated to 2 bytes is dropped, not read as uint8
    if not is_16_bit and len(data) >= 2:
        return data[1]
    return None
