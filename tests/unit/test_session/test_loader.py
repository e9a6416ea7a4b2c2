"""Tests for the addon loader and capability registry."""

from __future__ import annotations

import importlib
from unittest.mock import patch

import pytest

from termhost.config.settings import DEFAULT_LIBRARIES
from termhost.display.buffer import BufferDisplay
from termhost.display.fit import FitAddon
from termhost.editor.line_editor import LineEditor
from termhost.session.loader import AddonLoader, CapabilityRegistry


class TestCapabilityRegistry:
    def test_register_and_get(self) -> None:
        registry = CapabilityRegistry()
        registry.register("FitAddon", FitAddon)
        assert "FitAddon" in registry
        assert registry.get("FitAddon") is FitAddon
        assert registry.get("Terminal") is None
        assert registry.names == ["FitAddon"]


class TestAddonLoader:
    """Test bundle loading."""

    @pytest.mark.asyncio
    async def test_loads_default_bundles(self) -> None:
        loader = AddonLoader()
        registry = await loader.load(DEFAULT_LIBRARIES)
        assert registry.get("Terminal") is BufferDisplay
        assert registry.get("FitAddon") is FitAddon
        assert registry.get("LineEditor") is LineEditor
        assert all(loader.is_loaded(bundle) for bundle in DEFAULT_LIBRARIES)

    @pytest.mark.asyncio
    async def test_loading_is_idempotent(self) -> None:
        loader = AddonLoader()
        with patch("termhost.session.loader.importlib.import_module", wraps=importlib.import_module) as imported:
            await loader.load(["termhost.display.fit"])
            await loader.load(["termhost.display.fit", "termhost.display.fit"])
        assert imported.call_count == 1

    @pytest.mark.asyncio
    async def test_missing_bundle_is_skipped(self) -> None:
        loader = AddonLoader()
        registry = await loader.load(["termhost.no_such_bundle", "termhost.display.fit"])
        assert not loader.is_loaded("termhost.no_such_bundle")
        assert "FitAddon" in registry
        assert "Terminal" not in registry
