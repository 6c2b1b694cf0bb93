"""Listener registries for docforge.

Two kinds of registry live here:
- ListenerRegistry: per-request mapping of event name to listeners,
  handed to notify(). Each request owns its own copy.
- ListenerCatalog: process-wide catalog of named listener functions,
  referenced by name from listener bindings files.
"""

from collections.abc import Callable, Iterable, Iterator, Mapping

from docforge.hooks.types import (
    FunctionListener,
    Listener,
    ListenerFn,
    as_collections,
)


class ListenerRegistry(Mapping[str, tuple[Listener, ...]]):
    """Event name -> listeners, in registration order.

    Reads behave like a plain mapping; unknown events map to an empty
    tuple. Listeners are stored as tuples so a dispatch in progress never
    sees later registrations.

    Example:
        registry = ListenerRegistry()

        @registry.on("create", collections=["posts"])
        async def require_title(request, collection, data, context):
            return bool(data.get("title")) or False
    """

    def __init__(self, listeners: Mapping[str, Iterable[Listener]] | None = None):
        self._listeners: dict[str, tuple[Listener, ...]] = {}
        for event, entries in (listeners or {}).items():
            self._listeners[event] = tuple(entries)

    def __getitem__(self, event: str) -> tuple[Listener, ...]:
        return self._listeners[event]

    def __iter__(self) -> Iterator[str]:
        return iter(self._listeners)

    def __len__(self) -> int:
        return len(self._listeners)

    def get(self, event: str, default=()) -> tuple[Listener, ...]:  # type: ignore[override]
        return self._listeners.get(event, default)

    def add(
        self,
        event: str,
        listener: Listener | ListenerFn,
        name: str | None = None,
        collections: Iterable[str] | str | None = None,
    ) -> Listener:
        """Register a listener for an event.

        Args:
            event: Event name (e.g., "create", "get")
            listener: A Listener, or a plain function to wrap
            name: Display name for a wrapped function
            collections: Restrict a wrapped function to these collections

        Returns:
            The registered Listener
        """
        if not isinstance(listener, Listener):
            listener = FunctionListener(
                listener, name=name or "", collections=as_collections(collections)
            )
        self._listeners[event] = self.get(event) + (listener,)
        return listener

    def on(
        self,
        event: str,
        name: str | None = None,
        collections: Iterable[str] | str | None = None,
    ) -> Callable[[ListenerFn], ListenerFn]:
        """Decorator form of add()."""

        def decorator(fn: ListenerFn) -> ListenerFn:
            self.add(event, fn, name=name, collections=collections)
            return fn

        return decorator

    def copy(self) -> "ListenerRegistry":
        """Return an independent registry with the same listeners."""
        return ListenerRegistry(self._listeners)

    def count(self, event: str) -> int:
        return len(self.get(event))


class ListenerCatalog:
    """Catalog of named listener functions.

    Listeners must be registered here before a bindings file can refer
    to them. Registration is typically done at import time via the
    @listener decorator.

    Example:
        @listener("requireOwner")
        async def require_owner(request, collection, data, context):
            ...
    """

    _listeners: dict[str, ListenerFn] = {}

    @classmethod
    def register(cls, name: str, fn: ListenerFn) -> None:
        """Register a listener function by name.

        Idempotent — re-registering the same name is a no-op.
        """
        if name in cls._listeners:
            return
        cls._listeners[name] = fn

    @classmethod
    def get(cls, name: str) -> ListenerFn:
        """Get a registered listener function by name.

        Raises:
            ValueError: If the listener is not registered
        """
        if name not in cls._listeners:
            raise ValueError(
                f"Listener '{name}' is not registered. "
                "Listeners must be registered before bindings are loaded."
            )
        return cls._listeners[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._listeners

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered listener names, sorted."""
        return sorted(cls._listeners.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._listeners.clear()


def listener(name: str) -> Callable[[ListenerFn], ListenerFn]:
    """Decorator to add a function to the ListenerCatalog."""

    def decorator(fn: ListenerFn) -> ListenerFn:
        ListenerCatalog.register(name, fn)
        return fn

    return decorator
