"""Port for the host platform's hook/event dispatch."""

from __future__ import annotations

from collections.abc import Callable
from typing import Final, Protocol, runtime_checkable

ROWS_FOR_RECORD: Final[str] = "orders_table_rows_for_record"
SUBSCRIPTION_CREATED: Final[str] = "checkout_subscription_created"
ORDER_STATUS_PREFIX: Final[str] = "order_status_"

DEFAULT_PRIORITY: Final[int] = 10

type FilterCallback = Callable[..., object]
type ActionCallback = Callable[..., object]


def order_status_hook(status: str) -> str:
    """Name of the action fired when an order enters ``status``."""

    return f"{ORDER_STATUS_PREFIX}{status}"


@runtime_checkable
class HookDispatcher(Protocol):
    """Register handlers for named events and run them in priority order.

    Filters thread a value through every callback and return the final value.
    Actions run callbacks for their side effects only.
    """

    def add_filter(
        self, name: str, callback: FilterCallback, *, priority: int = DEFAULT_PRIORITY
    ) -> None: ...

    def add_action(
        self, name: str, callback: ActionCallback, *, priority: int = DEFAULT_PRIORITY
    ) -> None: ...

    def apply_filters(self, name: str, value: object, *args: object) -> object: ...

    def do_action(self, name: str, *args: object) -> None: ...
