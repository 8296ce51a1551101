"""
Message type definitions.
"""

from dataclasses import dataclass


@dataclass
class Message:
    """
    A message handed out by receive or pop.

    ``sent`` is decoded from the id prefix, ``fr`` is the store time of the
    first receive. Both are milliseconds since epoch.
    """

    id: str
    message: str
    rc: int
    fr: int
    sent: int

    @property
    def is_redelivery(self) -> bool:
        """Check if the message was received before."""
        return self.rc > 1
