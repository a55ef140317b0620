"""
Queue message envelope.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from jobworker.constants import NULL_MESSAGE_ID, JobStatus


class Message(BaseModel):
    """
    A unit of work as handed over by the transport.

    Only the transport assigns `id` and `status`; pipelines read the
    message and pass it on.
    """

    model_config = ConfigDict(validate_assignment=True)

    handler_name: str = Field(min_length=1)
    data: Any = None
    id: str | None = None
    status: JobStatus | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def display_id(self) -> str:
        """Identifier as printed in logs and errors."""
        return self.id if self.id is not None else NULL_MESSAGE_ID
