"""Test fixture package for batchin.

Fixture modules are loaded as plugins from tests/conftest.py:
- catalog: the catalog database (in-memory SQLite with the batchin tables)
- transport: the Redis transport
"""
