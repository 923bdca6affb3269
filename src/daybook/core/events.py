"""Event bus and replaying channels for loose-coupled extensibility.

Two primitives live here:

* :class:`EventBus`: fire-and-forget publish/subscribe of named domain
  events. Hooks run synchronously on the emitting thread.
* :class:`Channel`: a stateful value cell. It holds the latest value,
  replays it to every new subscriber immediately, and then pushes each
  subsequent value to all subscribers in publish order.

Usage::

    from daybook.core.events import Channel, EventBus, Event, ENTRY_ADDED

    bus = EventBus()
    bus.on(ENTRY_ADDED, lambda event: print(event.payload["id"]))

    entries = Channel(())
    sub = entries.subscribe(lambda snapshot: print(len(snapshot)))  # prints 0
    entries.publish(("a",))                                         # prints 1
    sub.close()
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any, Generic, TypeVar

from loguru import logger

# ---------------------------------------------------------------------------
# Well-known event names
# ---------------------------------------------------------------------------

ENTRY_ADDED = "journal.entry.added"
ENTRY_UPDATED = "journal.entry.updated"
ENTRY_DELETED = "journal.entry.deleted"
TAG_DELETED = "journal.tag.deleted"
SETTINGS_UPDATED = "journal.settings.updated"
DRAFT_SAVED = "journal.draft.saved"
DRAFT_CLEARED = "journal.draft.cleared"

Hook = Callable[["Event"], None]

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Event:
    """An immutable event that flows through the bus."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)
    source: str = ""


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


class EventBus:
    """Simple pub/sub event bus. A failing hook is logged and skipped."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = defaultdict(list)
        self._wildcard_hooks: list[Hook] = []

    def on(self, event_name: str, hook: Hook) -> None:
        """Register *hook* for a specific event name."""
        self._hooks[event_name].append(hook)

    def on_all(self, hook: Hook) -> None:
        """Register *hook* for all events (wildcard)."""
        self._wildcard_hooks.append(hook)

    def off(self, event_name: str, hook: Hook) -> None:
        """Unregister *hook* from a specific event name."""
        try:
            self._hooks[event_name].remove(hook)
        except ValueError:
            pass

    def emit(self, event: Event) -> None:
        """Run every matching hook, in registration order, specific hooks first."""
        hooks = list(self._hooks.get(event.name, []))
        hooks.extend(self._wildcard_hooks)
        for hook in hooks:
            try:
                hook(event)
            except Exception as exc:
                logger.warning(f"Event hook failed for {event.name}: {exc}")


# ---------------------------------------------------------------------------
# Channel
# ---------------------------------------------------------------------------


Listener = Callable[[Any], None]


class Subscription:
    """Handle returned by :meth:`Channel.subscribe`. Call :meth:`close` to stop delivery."""

    def __init__(self, channel: Channel, listener: Listener, seen: int) -> None:
        self._channel = channel
        self._listener = listener
        self._seen = seen
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._channel._remove(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class Channel(Generic[T]):
    """Replay-last-then-push value channel.

    Delivery is synchronous. A publish issued while listeners are still
    being notified (for example from inside a listener) is queued and
    delivered once the current round completes, so every listener observes
    values in the exact order they were published.
    """

    def __init__(self, initial: T, name: str = "") -> None:
        self._value = initial
        self.name = name
        self._subscriptions: list[Subscription] = []
        self._pending: deque[tuple[int, T]] = deque()
        self._seq = 0
        self._delivering = False

    @property
    def value(self) -> T:
        """The latest published value."""
        return self._value

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, listener: Callable[[T], None]) -> Subscription:
        """Register *listener* and immediately deliver the current value to it."""
        # Values still queued for delivery are older than the replayed one.
        subscription = Subscription(self, listener, seen=self._seq)
        self._subscriptions.append(subscription)
        self._notify(subscription, self._value)
        return subscription

    def publish(self, value: T) -> None:
        """Set the current value and push it to every subscriber."""
        self._seq += 1
        self._value = value
        self._pending.append((self._seq, value))
        if self._delivering:
            return
        self._delivering = True
        try:
            while self._pending:
                seq, current = self._pending.popleft()
                for subscription in list(self._subscriptions):
                    if subscription.closed or subscription._seen >= seq:
                        continue
                    subscription._seen = seq
                    self._notify(subscription, current)
        finally:
            self._delivering = False

    def _notify(self, subscription: Subscription, value: T) -> None:
        try:
            subscription._listener(value)
        except Exception as exc:
            logger.warning(f"Channel listener failed on {self.name or 'channel'}: {exc}")

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass
