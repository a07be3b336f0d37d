"""
Persistence media for the key-value store
"""
from hms.storage.backends import KeyValueBackend, MemoryBackend, SqlBackend, KeyValueEntry

__all__ = ['KeyValueBackend', 'MemoryBackend', 'SqlBackend', 'KeyValueEntry']
