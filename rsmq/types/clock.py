"""
Store clock snapshot.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StoreTime:
    """
    A single reading of the store's clock, as returned by Redis ``TIME``.

    Every timing decision of an operation (visibility scores, first-receive
    time, the id prefix of a new message) derives from one snapshot so that
    callers with skewed local clocks still agree.
    """

    seconds: int
    microseconds: int

    @property
    def micros(self) -> int:
        """Microseconds since epoch."""
        return self.seconds * 1_000_000 + self.microseconds

    @property
    def millis(self) -> int:
        """Milliseconds since epoch, truncated."""
        return self.micros // 1_000

    def after(self, seconds: int) -> int:
        """Score (ms) that lies ``seconds`` after this snapshot."""
        return self.millis + seconds * 1_000
