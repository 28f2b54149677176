"""Data models shared by the registry and its callers."""

from .process import AdmittedProcess, Ordering, Priority, Process, TerminateHook

__all__ = [
    'AdmittedProcess',
    'Ordering',
    'Priority',
    'Process',
    'TerminateHook',
]
