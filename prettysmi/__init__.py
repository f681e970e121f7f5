"""prettysmi — one-shot colored summary of rocm-smi telemetry.

Each enrichment step is a plain function living in prettysmi.collector.
Decorating it with register() adds it to REGISTRY; the collector runs the
steps in registration order after the primary device listing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from prettysmi.base import DeviceSnapshot


@dataclass(frozen=True)
class Enricher:
    """One `rocm-smi <args>` invocation and the function that merges its output."""
    name: str
    args: tuple[str, ...]
    apply: Callable[[list[DeviceSnapshot], str], None]


REGISTRY: dict[str, Enricher] = {}


def register(*args: str) -> Callable:
    """Decorator that adds an enrichment step fed by `rocm-smi *args`."""
    def wrap(fn: Callable[[list[DeviceSnapshot], str], None]):
        REGISTRY[fn.__name__] = Enricher(name=fn.__name__, args=tuple(args), apply=fn)
        return fn
    return wrap
