"""
Middleware system for message processing.

Two pipelines share the same shape: an ordered chain of middleware,
each of which can

- run code before and after the rest of the chain
- pass control on by calling `call_next`
- stop the chain by not calling `call_next`

The consume pipeline ends in the handler call, the failure pipeline
in raising `JobFailure`.
"""

from jobworker.middleware.base import MiddlewareFactory, MiddlewarePipeline
from jobworker.middleware.consume import ConsumeMiddlewarePipeline
from jobworker.middleware.failure import (
    FailureMiddlewarePipeline,
    SendAgainMiddleware,
    raise_job_failure,
)

__all__ = [
    "MiddlewareFactory",
    "MiddlewarePipeline",
    "ConsumeMiddlewarePipeline",
    "FailureMiddlewarePipeline",
    "SendAgainMiddleware",
    "raise_job_failure",
]
