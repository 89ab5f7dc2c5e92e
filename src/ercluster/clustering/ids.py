"""Cluster id generators.

A generator maps the member ids of a newly formed cluster to a cluster id.
Counters yield a fresh id per call; the content hash is deterministic for a
given member set, so re-forming the same group yields the same id.
"""

import hashlib
import itertools
from collections.abc import Callable, Sequence
from typing import Any

__all__ = [
    "int_generator",
    "string_generator",
    "content_hash_generator",
    "compute_cluster_id",
]


def int_generator(start: int = 0) -> Callable[[Sequence[Any]], int]:
    """Return a generator producing consecutive integers from ``start``.

    Parameters
    ----------
    start : int, optional
        First id, by default 0.

    Returns
    -------
    Callable[[Sequence[Any]], int]
        Id generator ignoring the member ids.
    """
    counter = itertools.count(start)
    return lambda member_ids: next(counter)


def string_generator(prefix: str) -> Callable[[Sequence[Any]], str]:
    """Return a generator producing ``prefix0``, ``prefix1``, ...

    Parameters
    ----------
    prefix : str
        Prefix of every id.

    Returns
    -------
    Callable[[Sequence[Any]], str]
        Id generator ignoring the member ids.
    """
    counter = itertools.count()
    return lambda member_ids: f"{prefix}{next(counter)}"


def compute_cluster_id(member_ids: Sequence[Any], prefix: str = "c:") -> str:
    """Compute deterministic cluster ID from member ids.

    Parameters
    ----------
    member_ids : Sequence[Any]
        Record ids in cluster; order does not matter.
    prefix : str, optional
        Id prefix, by default "c:".

    Returns
    -------
    str
        Cluster ID in format "{prefix}{sha256_prefix}".
    """
    content = "\n".join(sorted(str(member_id) for member_id in member_ids))
    hash_digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    return f"{prefix}{hash_digest[:12]}"


def content_hash_generator(prefix: str = "c:") -> Callable[[Sequence[Any]], str]:
    """Return a generator deriving the id from the member ids.

    Parameters
    ----------
    prefix : str, optional
        Id prefix, by default "c:".

    Returns
    -------
    Callable[[Sequence[Any]], str]
        Deterministic id generator.
    """
    return lambda member_ids: compute_cluster_id(member_ids, prefix)
