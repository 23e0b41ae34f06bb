from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class SequentialTaskQueue:
    """Run one task per item, strictly in input order, with a pause between tasks.

    Results come back in input order. The first failing task aborts the run and
    its exception propagates; results gathered so far are discarded.
    """

    delay_s: float = 0.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    async def run(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R]],
        on_done: Optional[Callable[[int, R], Awaitable[None]]] = None,
    ) -> List[R]:
        results: List[R] = []
        for idx, item in enumerate(items):
            result = await worker(item)
            results.append(result)
            if on_done is not None:
                await on_done(idx, result)
            if idx < len(items) - 1 and self.delay_s > 0:
                await self.sleep(self.delay_s)
        return results
