"""
Job Queue Worker Core

Message-processing core of a job queue consumer: handler resolution,
consume and failure middleware pipelines, and the failure-propagation
contract between them.
"""

__version__ = "1.0.0"
