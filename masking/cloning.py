"""
Deep cloning of heterogeneous value trees.

One clone function per kind of value:
    - mappings    -> new dict, values cloned
    - lists       -> new list, items cloned
    - tuples      -> new tuple, items cloned
    - scalars, datetime/date/time/timedelta, compiled regexes -> returned as
      is (immutable, so sharing them cannot leak a mutation)
    - anything else -> copy.deepcopy, or the object itself (with a warning)
      when it cannot be copied

Containers at max_depth are replaced by the full mask token (with a warning),
so no object of the input can reach the output through them.
"""

import copy
import datetime
import decimal
import logging
import re
import uuid
from collections.abc import Mapping
from functools import singledispatch
from typing import Any

from .config import DEFAULT_MAX_DEPTH
from .strategies import FULL_MASK

logger = logging.getLogger(__name__)


def deep_clone(value: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Return a structurally independent copy of value."""
    return _clone(value, 0, max_depth)


@singledispatch
def _clone(value: Any, depth: int, max_depth: int) -> Any:
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error, RecursionError) as e:
        logger.warning(f"Cannot copy {type(value).__name__} ({e}); passing it through uncloned")
        return value


@_clone.register(type(None))
@_clone.register(str)
@_clone.register(bytes)
@_clone.register(int)
@_clone.register(float)
@_clone.register(complex)
@_clone.register(decimal.Decimal)
@_clone.register(uuid.UUID)
@_clone.register(datetime.date)
@_clone.register(datetime.time)
@_clone.register(datetime.timedelta)
@_clone.register(re.Pattern)
def _clone_immutable(value: Any, depth: int, max_depth: int) -> Any:
    return value


def _depth_exceeded(depth: int, max_depth: int) -> bool:
    if depth < max_depth:
        return False
    logger.warning(f"Maximum depth {max_depth} reached; masking subtree")
    return True


@_clone.register(Mapping)
def _clone_mapping(value: Mapping, depth: int, max_depth: int) -> Any:
    if _depth_exceeded(depth, max_depth):
        return FULL_MASK
    return {key: _clone(item, depth + 1, max_depth) for key, item in value.items()}


@_clone.register(list)
def _clone_list(value: list, depth: int, max_depth: int) -> Any:
    if _depth_exceeded(depth, max_depth):
        return FULL_MASK
    return [_clone(item, depth + 1, max_depth) for item in value]


@_clone.register(tuple)
def _clone_tuple(value: tuple, depth: int, max_depth: int) -> Any:
    if _depth_exceeded(depth, max_depth):
        return FULL_MASK
    return tuple(_clone(item, depth + 1, max_depth) for item in value)
