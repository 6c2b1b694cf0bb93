"""Listener types for the docforge hook system.

Defines the structures shared by the dispatch engine and its callers:
- ListenerContext: per-invocation context passed to every listener
- Listener: the protocol a registered listener implements
- FunctionListener: adapts a plain (sync or async) function to Listener
"""

import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class ListenerContext:
    """Context passed as the fourth argument to every listener.

    Attributes:
        event: Name of the event being dispatched (e.g., "create")
    """

    event: str


@runtime_checkable
class Listener(Protocol):
    """Interface every registered listener implements.

    A listener approves an operation by returning a truthy decision,
    denies it with a falsy one, and abstains by returning None.

    Attributes:
        name: Display name, used for diagnostics only
        collections: Collections this listener is restricted to
            (None or empty means every collection)
    """

    name: str
    collections: frozenset[str] | None

    async def invoke(
        self,
        request: Any,
        collection: str,
        data: Any,
        context: ListenerContext,
    ) -> Any: ...


# Listener function signature: (request, collection, data, context) -> decision
ListenerFn = Callable[[Any, str, Any, ListenerContext], Any]


@dataclass
class FunctionListener:
    """A Listener backed by a plain function.

    The function may be sync or async; awaitable results are awaited.
    """

    fn: ListenerFn
    name: str = ""
    collections: frozenset[str] | None = None

    def __post_init__(self) -> None:
        if not self.name:
            self.name = getattr(self.fn, "__name__", repr(self.fn))

    async def invoke(
        self,
        request: Any,
        collection: str,
        data: Any,
        context: ListenerContext,
    ) -> Any:
        result = self.fn(request, collection, data, context)
        if inspect.isawaitable(result):
            result = await result
        return result


def as_collections(collections: Iterable[str] | str | None) -> frozenset[str] | None:
    """Normalize a collection restriction to a frozenset (or None)."""
    if collections is None:
        return None
    if isinstance(collections, str):
        return frozenset([collections])
    return frozenset(collections)


def applies_to(listener: Listener, collection: str) -> bool:
    """Check whether a listener should be consulted for a collection."""
    return not listener.collections or collection in listener.collections


@dataclass
class ListenerBinding:
    """A listener reference as declared in a bindings file.

    Attributes:
        name: Catalog name of the listener function
        collections: Optional collection restriction
    """

    name: str
    collections: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | str) -> "ListenerBinding":
        """Create a ListenerBinding from a YAML entry (dict or bare name)."""
        if isinstance(data, str):
            return cls(name=data)
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ValueError(f"Listener binding must be a name or have a 'name': {data!r}")
        collections = data.get("collections") or []
        if isinstance(collections, str):
            collections = [collections]
        return cls(name=data["name"], collections=list(collections))
