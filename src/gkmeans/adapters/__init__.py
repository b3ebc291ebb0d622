"""Adapters between application records and feature vectors."""

from .records import RecordSchema, RecordVectorAdapter, RecordKMeans

__all__ = [
    'RecordSchema',
    'RecordVectorAdapter',
    'RecordKMeans'
]
