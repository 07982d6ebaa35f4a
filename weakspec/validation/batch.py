# Copyright Rand Arete @ Weakspec 2025
# Licensed under the Apache License, Version 2.0
"""Demand-driven batching of a program source."""

from __future__ import annotations

import collections.abc
import logging
from typing import AsyncIterable, AsyncIterator, Iterable, List, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _close(source: object) -> None:
    aclose = getattr(source, "aclose", None)
    if aclose is not None:
        await aclose()
        return
    close = getattr(source, "close", None)
    if close is not None:
        close()


async def batch(
    source: Union[Iterable[T], AsyncIterable[T]],
    size: int = 100,
    max: int | None = None,
) -> AsyncIterator[List[T]]:
    """Group items of a source into lists of at most size items.

    Items are pulled only when the consumer asks for the next batch, and no
    more than max items are ever pulled in total. The source is closed when
    batching stops early, when the consumer closes this generator, and when
    the source raises.

    Args:
        source: A sync or async iterable, possibly infinite
        size: Maximum items per batch
        max: Maximum items overall (None for no bound)

    Yields:
        Non-empty lists of items, in source order
    """
    if size < 1:
        raise ValueError("batch size must be at least 1")

    if isinstance(source, collections.abc.AsyncIterable):
        iterator = source.__aiter__()
        is_async = True
    else:
        iterator = iter(source)
        is_async = False

    taken = 0
    try:
        while max is None or taken < max:
            limit = size if max is None else min(size, max - taken)
            current: List[T] = []
            while len(current) < limit:
                try:
                    if is_async:
                        item = await iterator.__anext__()
                    else:
                        item = next(iterator)
                except (StopIteration, StopAsyncIteration):
                    break
                current.append(item)

            if not current:
                return

            taken += len(current)
            logger.debug("batched %d items (%d total)", len(current), taken)
            yield current

            if len(current) < limit:
                return
    finally:
        await _close(iterator)
