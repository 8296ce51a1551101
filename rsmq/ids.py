"""
Message identifier generation and decoding.

An id is the base-36 encoding of the store time in microseconds, padded to
a fixed width, followed by random alphanumerics. Ids therefore sort
lexicographically in send order and carry their send time.
"""

import re
import secrets

from rsmq.constants import (
    BASE36_ALPHABET,
    ID_CHARACTERS,
    ID_RANDOM_LENGTH,
    ID_TIMESTAMP_PATTERN,
    ID_TIMESTAMP_WIDTH,
    MESSAGE_ID_PATTERN,
)
from rsmq.errors import InvalidMessageIdError
from rsmq.types.clock import StoreTime

_ID_RE = re.compile(MESSAGE_ID_PATTERN)
_TIMESTAMP_RE = re.compile(ID_TIMESTAMP_PATTERN)


def base36_encode(n: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if n < 0:
        raise ValueError("base36_encode expects a non-negative integer")
    if n == 0:
        return "0"

    result = ""
    while n:
        n, i = divmod(n, 36)
        result = BASE36_ALPHABET[i] + result
    return result


def make_message_id(time: StoreTime) -> str:
    """
    Derive a new message id from a store clock snapshot.

    Args:
        time: The snapshot the message's score is computed from.

    Returns:
        A 32 character id.
    """
    prefix = base36_encode(time.micros).rjust(ID_TIMESTAMP_WIDTH, "0")
    suffix = "".join(secrets.choice(ID_CHARACTERS) for _ in range(ID_RANDOM_LENGTH))
    return prefix + suffix


def decode_sent(message_id: str) -> int:
    """
    Recover the send time (ms since epoch) embedded in a message id.

    Raises:
        InvalidMessageIdError: If the timestamp prefix cannot be parsed.
    """
    prefix = message_id[:ID_TIMESTAMP_WIDTH]
    if len(prefix) != ID_TIMESTAMP_WIDTH:
        raise InvalidMessageIdError(message_id, "Message id too short to decode")
    # int() alone would also take signs, underscores and whitespace
    if not _TIMESTAMP_RE.fullmatch(prefix):
        raise InvalidMessageIdError(message_id, "Undecodable message id prefix")
    return int(prefix, 36) // 1_000


def is_valid_message_id(message_id: str) -> bool:
    """Check an id against the accepted id format."""
    return bool(_ID_RE.match(message_id))
