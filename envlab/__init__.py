"""envlab: environment config, log admission, feature flags and experiments."""

from __future__ import annotations

from importlib import import_module


def __getattr__(name: str):
    """Import ``envlab.<name>`` on first attribute access."""
    try:
        module = import_module(f"{__name__}.{name}")
    except ModuleNotFoundError as exc:
        raise AttributeError(f"envlab has no subpackage {name!r}") from exc
    globals()[name] = module
    return module
