"""Progress reporting hooks.

Each phase calls ``total`` once with its amount of work and then
``advance`` with the running position.  Both are fire-and-forget.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

ProgressFn = Callable[[int], None]


def _ignore(_value: int) -> None:
    return None


@dataclass
class Progress:
    total: ProgressFn = _ignore
    advance: ProgressFn = _ignore


NO_PROGRESS = Progress()
