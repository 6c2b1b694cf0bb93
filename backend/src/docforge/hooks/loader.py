"""Load listener bindings from YAML.

A bindings file maps events to catalog listener names:

    listeners:
      create:
        - name: requireOwner
          collections: [posts]
        - auditWrites
      get:
        - name: hideDrafts
"""

import importlib
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml

from docforge.hooks.registry import ListenerCatalog, ListenerRegistry
from docforge.hooks.types import ListenerBinding

logger = logging.getLogger(__name__)


def parse_bindings(data: dict[str, Any] | None) -> dict[str, list[ListenerBinding]]:
    """Convert a parsed bindings document to ListenerBinding lists by event.

    Raises:
        ValueError: If the document or an event entry has the wrong shape
    """
    if not data:
        return {}
    if not isinstance(data, dict) or not isinstance(data.get("listeners", {}), dict):
        raise ValueError("Listener bindings must be a mapping under 'listeners'")

    bindings: dict[str, list[ListenerBinding]] = {}
    for event, entries in (data.get("listeners") or {}).items():
        if entries is None:
            continue
        if not isinstance(entries, list):
            raise ValueError(f"Listeners for event '{event}' must be a list")
        bindings[event] = [ListenerBinding.from_dict(entry) for entry in entries]
    return bindings


def build_registry(bindings: dict[str, list[ListenerBinding]]) -> ListenerRegistry:
    """Resolve bindings against the ListenerCatalog.

    Unregistered names are skipped with a warning.
    """
    registry = ListenerRegistry()
    for event, entries in bindings.items():
        for binding in entries:
            try:
                fn = ListenerCatalog.get(binding.name)
            except ValueError:
                logger.warning(
                    "Listener '%s' for event '%s' is not registered, skipping",
                    binding.name,
                    event,
                )
                continue
            registry.add(
                event, fn, name=binding.name, collections=binding.collections or None
            )
    return registry


def import_listener_modules(modules: Iterable[str]) -> None:
    """Import modules whose @listener decorators fill the catalog."""
    for module in modules:
        importlib.import_module(module)


def load_listener_bindings(path: Path | str) -> ListenerRegistry:
    """Load a bindings file into a ListenerRegistry.

    A missing file yields an empty registry.
    """
    path = Path(path)
    if not path.exists():
        logger.info("No listener bindings at %s", path)
        return ListenerRegistry()

    with open(path) as f:
        data = yaml.safe_load(f)
    return build_registry(parse_bindings(data))
