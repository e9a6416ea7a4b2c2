"""Addon loader: makes capability bundles available before widget construction.

A bundle is an importable module that publishes the classes it provides
in a module-level ``CAPABILITIES`` mapping, for example::

    CAPABILITIES = {"FitAddon": FitAddon}

Each bundle is imported once per loader; loading an already-loaded
bundle is a no-op. A bundle that cannot be imported leaves its
capabilities unavailable, which defers session initialization instead
of failing it.
"""

from __future__ import annotations

import asyncio
import importlib
import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Named capabilities (widget and addon classes) published by bundles."""

    def __init__(self) -> None:
        self._capabilities: dict[str, type] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._capabilities

    @property
    def names(self) -> list[str]:
        return sorted(self._capabilities)

    def register(self, name: str, capability: type) -> None:
        self._capabilities[name] = capability

    def get(self, name: str) -> type | None:
        return self._capabilities.get(name)


class AddonLoader:
    """Loads capability bundles into a shared registry."""

    def __init__(self, registry: CapabilityRegistry | None = None) -> None:
        self._registry = registry or CapabilityRegistry()
        self._loaded: set[str] = set()
        self._lock = asyncio.Lock()

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    def is_loaded(self, bundle: str) -> bool:
        return bundle in self._loaded

    async def load(self, bundles: Iterable[str]) -> CapabilityRegistry:
        """Import every bundle not loaded yet and register its capabilities."""
        async with self._lock:
            for bundle in bundles:
                if bundle in self._loaded:
                    continue
                try:
                    module = await asyncio.to_thread(importlib.import_module, bundle)
                except ImportError as e:
                    logger.warning("Capability bundle %s is unavailable: %s", bundle, e)
                    continue

                capabilities = getattr(module, "CAPABILITIES", {})
                for name, capability in capabilities.items():
                    self._registry.register(name, capability)
                self._loaded.add(bundle)
                logger.info(
                    "Loaded bundle %s (%s)", bundle, ", ".join(sorted(capabilities)) or "no capabilities"
                )
        return self._registry
