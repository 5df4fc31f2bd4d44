"""
In-memory domain records.
"""
from narrator.models.job import Job, JobResult, JobStatus

__all__ = ['Job', 'JobResult', 'JobStatus']
