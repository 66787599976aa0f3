from __future__ import annotations
from typing import Dict, Callable
from .core import Colormap

_REGISTRY: Dict[str, Callable[[], Colormap]] = {}
_RESOLVED: Dict[str, Colormap] = {}


def register(name: str, factory: Callable[[], Colormap]) -> None:
    key = name.lower()
    if key in _REGISTRY:
        raise ValueError(f"Colormap already registered: {name}")
    _REGISTRY[key] = factory


def get(name: str) -> Colormap:
    """Resolve a registered ramp; the table is built once and copied out on every call."""
    key = name.lower()
    if key not in _REGISTRY:
        raise KeyError(f"Unknown colormap: {name} (available={available()})")
    if key not in _RESOLVED:
        _RESOLVED[key] = _REGISTRY[key]()
    cm = _RESOLVED[key]
    return Colormap(cm.name, cm.rgb.copy())


def available() -> list[str]:
    return sorted(_REGISTRY.keys())
