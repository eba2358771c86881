from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any


def _noop() -> None:
    return None


@dataclass
class OptimisticUpdate:
    """A local change that is shown before the server confirms it.

    ``apply`` runs synchronously before the request is sent. Exactly one of
    ``commit`` or ``revert`` runs once the request settles. ``revert`` must
    restore captured values rather than invert ``apply``.
    """

    apply: Callable[[], None]
    revert: Callable[[], None]
    commit: Callable[[], None] = _noop

    async def run(self, request: Callable[[], Awaitable[Any]]) -> Any:
        self.apply()
        try:
            result = await request()
        except Exception:
            self.revert()
            raise
        self.commit()
        return result
