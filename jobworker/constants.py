"""
Application constants.
Centralized location for all constant values used across the worker.
"""

from enum import IntEnum
from typing import Any

from jobworker.exceptions import InvalidStatus


class JobStatus(IntEnum):
    """
    Job lifecycle states, encoded with the transport's integer tags.

    State transitions:
    - WAITING -> RESERVED (message popped by a worker)
    - RESERVED -> DONE (processing finished, successfully or not)
    """

    WAITING = 1
    RESERVED = 2
    DONE = 3

    @classmethod
    def waiting(cls) -> "JobStatus":
        return cls.WAITING

    @classmethod
    def reserved(cls) -> "JobStatus":
        return cls.RESERVED

    @classmethod
    def done(cls) -> "JobStatus":
        return cls.DONE

    @classmethod
    def from_tag(cls, tag: Any) -> "JobStatus":
        """
        Build a status from an untrusted tag.

        Args:
            tag: Raw value, usually read back from a transport.

        Returns:
            The matching status.

        Raises:
            InvalidStatus: If the tag is not one of the valid integer tags.
        """
        if isinstance(tag, bool) or not isinstance(tag, int):
            raise InvalidStatus(tag, cls.valid_names())
        try:
            return cls(tag)
        except ValueError:
            raise InvalidStatus(tag, cls.valid_names()) from None

    @classmethod
    def valid_names(cls) -> dict[str, int]:
        """Map of qualified member names to their tags."""
        return {f"{cls.__name__}.{member.name}": member.value for member in cls}

    def is_waiting(self) -> bool:
        return self is JobStatus.WAITING

    def is_reserved(self) -> bool:
        return self is JobStatus.RESERVED

    def is_done(self) -> bool:
        return self is JobStatus.DONE


# Default method names for type-only declarations
DEFAULT_HANDLER_METHOD = "execute"
DEFAULT_CONSUME_MIDDLEWARE_METHOD = "process_consume"
DEFAULT_FAILURE_MIDDLEWARE_METHOD = "process_failure"

# Printed in place of a message id the transport has not assigned yet
NULL_MESSAGE_ID = "null"

# Log templates; placeholders are filled from the event's own fields
LOG_PROCESSING_MESSAGE = "Processing message #{message}."
LOG_PROCESSING_STOPPED = "Processing of message #{message} is stopped because of an exception:\n{error}"
LOG_HANDLER_NOT_RESOLVED = "Queue handler {handler} can not be resolved: {cause}"
LOG_MESSAGE_PUSHED = "Message #{message} pushed."
LOG_MESSAGE_SENT_AGAIN = "Message #{message} is sent again, attempt {attempt} of {max_attempts}."

# Metadata keys
SEND_AGAIN_ATTEMPTS_KEY = "send_again_attempts"
SEND_AGAIN_MIDDLEWARE_ID = "failure-strategy-send-again"

# Metrics names
METRIC_MESSAGES_PROCESSED = "messages_processed_total"
METRIC_MESSAGE_DURATION = "message_processing_duration_seconds"

# Processing outcomes, used as metric labels
OUTCOME_SUCCEEDED = "succeeded"
OUTCOME_SUPPRESSED = "suppressed"
OUTCOME_FAILED = "failed"

# Trace span names
SPAN_PROCESS_MESSAGE = "process_message"
