"""
Application constants.
Centralized location for key layout, queue limits and observability names.
"""

from enum import StrEnum


class CreateQueueResult(StrEnum):
    """
    Outcome of an idempotent queue creation.

    Creation never overwrites an existing configuration, so the caller
    learns whether its options were applied or an earlier creator won.
    Store failures are raised rather than reported here.
    """

    CREATED = "created"
    EXISTED = "existed"


# Key layout
DEFAULT_NAMESPACE = "rsmq"
NAMESPACE_SEP = ":"
QUEUE_HASH_SUFFIX = "Q"
QUEUES_SET_SUFFIX = "QUEUES"

# Queue hash fields
FIELD_VT = "vt"
FIELD_DELAY = "delay"
FIELD_MAXSIZE = "maxsize"
FIELD_TOTAL_RECV = "totalrecv"
FIELD_TOTAL_SENT = "totalsent"
FIELD_CREATED = "created"
FIELD_MODIFIED = "modified"

# Per-message sidecar field suffixes
FIELD_RC = "rc"
FIELD_FR = "fr"

# Queue option defaults and limits
DEFAULT_VT = 30
DEFAULT_DELAY = 0
DEFAULT_MAXSIZE = 65536

MIN_VT = 0
MAX_VT = 9_999_999
MIN_DELAY = 0
MAX_DELAY = 9_999_999
MIN_MAXSIZE = 1024
MAX_MAXSIZE = 65536
MAXSIZE_UNLIMITED = -1

# Identifiers
QUEUE_NAME_PATTERN = r"^[a-zA-Z0-9_-]{1,160}$"
MESSAGE_ID_PATTERN = r"^[a-zA-Z0-9:]{32}$"
ID_CHARACTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
ID_RANDOM_LENGTH = 22
ID_TIMESTAMP_WIDTH = 10
ID_TIMESTAMP_PATTERN = r"^[0-9a-z]{10}$"
BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

# API constants
API_V1_PREFIX = "/v1"

# Metrics names
METRIC_QUEUE_DEPTH = "rsmq_queue_depth"
METRIC_QUEUE_HIDDEN = "rsmq_queue_hidden_messages"
METRIC_MESSAGES_SENT = "rsmq_messages_sent_total"
METRIC_MESSAGES_RECEIVED = "rsmq_messages_received_total"
METRIC_MESSAGES_DELETED = "rsmq_messages_deleted_total"
METRIC_EMPTY_RECEIVES = "rsmq_empty_receives_total"
METRIC_MESSAGES_PROCESSED = "rsmq_messages_processed_total"
METRIC_PROCESSING_DURATION = "rsmq_message_processing_seconds"
METRIC_API_REQUESTS = "rsmq_api_requests_total"
METRIC_API_LATENCY = "rsmq_api_request_latency_seconds"

# Trace span names
SPAN_HANDLE_MESSAGE = "handle_message"
SPAN_EXTEND_VISIBILITY = "extend_visibility"
