"""In-process hook dispatcher."""

from __future__ import annotations

import bisect
import itertools
from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from orderlink.domain.ports.hooks import DEFAULT_PRIORITY

if TYPE_CHECKING:
    from orderlink.domain.ports.hooks import ActionCallback, FilterCallback

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, order=True)
class _Registration:
    priority: int
    sequence: int
    callback: FilterCallback = field(compare=False)


class InProcessHookDispatcher:
    """Run callbacks by ascending priority, then by registration order.

    Exceptions raised by callbacks propagate to whoever fired the hook.
    """

    def __init__(self) -> None:
        self._filters: defaultdict[str, list[_Registration]] = defaultdict(list)
        self._actions: defaultdict[str, list[_Registration]] = defaultdict(list)
        self._sequence = itertools.count()

    def _register(
        self,
        table: defaultdict[str, list[_Registration]],
        name: str,
        callback: FilterCallback,
        priority: int,
    ) -> None:
        registration = _Registration(priority, next(self._sequence), callback)
        bisect.insort(table[name], registration)
        log.debug("Registered %s on %s at priority %s", callback, name, priority)

    def add_filter(
        self, name: str, callback: FilterCallback, *, priority: int = DEFAULT_PRIORITY
    ) -> None:
        self._register(self._filters, name, callback, priority)

    def add_action(
        self, name: str, callback: ActionCallback, *, priority: int = DEFAULT_PRIORITY
    ) -> None:
        self._register(self._actions, name, callback, priority)

    def apply_filters(self, name: str, value: object, *args: object) -> object:
        for registration in tuple(self._filters.get(name, ())):
            value = registration.callback(value, *args)
        return value

    def do_action(self, name: str, *args: object) -> None:
        for registration in tuple(self._actions.get(name, ())):
            registration.callback(*args)

    def has_hook(self, name: str) -> bool:
        return bool(self._filters.get(name) or self._actions.get(name))

    def priorities(self, name: str) -> list[int]:
        """Registered priorities for ``name`` in execution order."""

        registrations = self._filters.get(name) or self._actions.get(name) or []
        return [registration.priority for registration in registrations]


if TYPE_CHECKING:
    from orderlink.domain.ports.hooks import HookDispatcher

    _dispatcher_check: HookDispatcher = InProcessHookDispatcher()
