"""Decode-and-record pipeline fed by the BLE transport."""

from collections.abc import Sequence

from .decoder import decode_heart_rate
from .history import DEFAULT_CAPACITY, HeartRateHistory
from .log import sample_logger


class HeartRateSession:
    """Current heart rate and rolling history for one device connection.

    The transport calls on_sample() with each raw characteristic value,
    whether it arrived as a notification or from a periodic read.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self.history = HeartRateHistory(capacity)
        self.current: int | None = None
        self.dropped = 0

    def on_sample(self, data: bytes | bytearray | Sequence[int]) -> int | None:
        """Decode a raw sample and record it.

        Returns:
            The decoded BPM, or None if the sample was dropped. A dropped
            sample leaves the current value and history untouched.
        """
        bpm = decode_heart_rate(data)
        if bpm is None:
            self.dropped += 1
            sample_logger().debug("Dropped unparseable HR sample: %s", list(data))
            return None

        self.current = bpm
        self.history.append(bpm)
        return bpm

    def reset(self) -> None:
        """Clear the current value and history, e.g. after a disconnect.

        The dropped counter spans connections and is kept.
        """
        self.history.reset()
        self.current = None

    def snapshot(self) -> tuple[int, ...]:
        """Oldest-first copy of the history."""
        return self.history.snapshot()
