"""Deterministic distribution of module names across index shards."""

from __future__ import annotations

import os
from collections.abc import Iterable

_FNV32_OFFSET = 0x811C9DC5
_FNV32_PRIME = 0x01000193
_FILES_PER_SHARD = 2000


def _fnv1a_32(data: bytes) -> int:
    """Return the 32-bit FNV-1a hash of ``data``."""
    value = _FNV32_OFFSET
    for byte in data:
        value ^= byte
        value = (value * _FNV32_PRIME) & 0xFFFFFFFF
    return value


def shard_count(total_files: int) -> int:
    """Return the number of shards for ``total_files`` files.

    One shard per 2000 files, clamped to ``[1, cpu count]``.
    """
    if total_files <= 0:
        return 1
    cpus = os.cpu_count() or 1
    return max(1, min(cpus, total_files // _FILES_PER_SHARD))


def shard_for_id(doc_id: str, n: int) -> int:
    """Return the shard index in ``[0, n)`` for a document id."""
    if n <= 1:
        return 0
    return _fnv1a_32(doc_id.encode("utf-8")) % n


def split_by_hash(items: Iterable[str], n: int) -> list[list[str]]:
    """Distribute ``items`` into ``n`` groups according to :func:`shard_for_id`."""
    groups: list[list[str]] = [[] for _ in range(n)]
    for item in items:
        groups[shard_for_id(item, n)].append(item)
    return groups