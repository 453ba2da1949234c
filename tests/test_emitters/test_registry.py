"""Tests for the emitter registry and entry-point discovery."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest

from curlgen.converter import build_request
from curlgen.emitters.base import Emitter
from curlgen.emitters.registry import (
    ENTRY_POINT_GROUP,
    EmitterRegistry,
    create_default_registry,
)
from curlgen.exceptions import PluginError, RequestValidationError
from curlgen.models import ConvertOptions, PluginsConfig, RequestModel


class EchoEmitter(Emitter):
    """Minimal third-party style emitter reusing a built-in template."""

    target = "echo"
    aliases = ("say",)
    label = "Echo"
    language = "text"
    template_name = "shell.sh.j2"

    def build_context(self, request: RequestModel, options: ConvertOptions) -> dict[str, Any]:
        return {"words": ["echo", request.method.value, request.url], "separator": " "}


class ClashingEmitter(EchoEmitter):
    target = "other"
    aliases = ("python",)


class NotAnEmitter:
    pass


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class TestLookup:
    def test_builtin_targets_in_order(self, registry: EmitterRegistry) -> None:
        assert registry.list_targets() == [
            "python-requests",
            "python-httpx",
            "javascript-fetch",
            "go",
            "httpie",
            "curl",
        ]

    @pytest.mark.parametrize(
        ("name", "target"),
        [
            ("python", "python-requests"),
            ("Requests", "python-requests"),
            ("httpx", "python-httpx"),
            ("js", "javascript-fetch"),
            ("node", "javascript-fetch"),
            ("golang", "go"),
            (" GO ", "go"),
            ("http", "httpie"),
            ("curl", "curl"),
        ],
    )
    def test_aliases_resolve(self, registry: EmitterRegistry, name: str, target: str) -> None:
        assert registry.get(name).target == target
        assert name in registry

    def test_unknown_target(self, registry: EmitterRegistry) -> None:
        with pytest.raises(RequestValidationError) as exc_info:
            registry.get("cobol")
        assert exc_info.value.message == "unknown target"
        assert exc_info.value.token == "cobol"
        assert exc_info.value.stage == "emit"
        assert "cobol" not in registry

    def test_describe(self, registry: EmitterRegistry) -> None:
        rows = {row["target"]: row for row in registry.describe()}
        assert rows["go"] == {
            "target": "go",
            "aliases": "golang, go-net-http",
            "label": "Go (net/http)",
            "language": "go",
        }
        assert rows["curl"]["aliases"] == ""


class TestRegister:
    def test_register_custom_emitter(self) -> None:
        registry = EmitterRegistry()
        registry.register(EchoEmitter())
        code = registry.get("say").emit(build_request("curl -X PUT https://x.com"))
        assert code == "echo PUT https://x.com\n"

    def test_same_target_replaces(self) -> None:
        registry = EmitterRegistry()
        registry.register(EchoEmitter())
        replacement = EchoEmitter()
        registry.register(replacement)
        assert registry.get("echo") is replacement
        assert registry.list_targets() == ["echo"]

    def test_alias_conflict(self, registry: EmitterRegistry) -> None:
        with pytest.raises(PluginError, match="already used by 'python-requests'"):
            registry.register(ClashingEmitter())
        assert "other" not in registry


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestDiscover:
    """Test entry-point-based emitter discovery."""

    def _make_entry_point(self, name: str, emitter_cls: type) -> Any:
        class MockEP:
            def __init__(self, n: str, cls: type) -> None:
                self.name = n
                self._cls = cls

            def load(self) -> type:
                return self._cls

        return MockEP(name, emitter_cls)

    def _make_entry_points_result(self, eps: list[Any]) -> Any:
        class MockEPs:
            def __init__(self, items: list[Any]) -> None:
                self._items = items

            def select(self, group: str) -> list[Any]:
                if group == ENTRY_POINT_GROUP:
                    return self._items
                return []

        return MockEPs(eps)

    def _discover(self, eps: list[Any], config: PluginsConfig | None = None) -> tuple[EmitterRegistry, list[str]]:
        registry = create_default_registry()
        with patch(
            "curlgen.emitters.registry.importlib.metadata.entry_points",
            return_value=self._make_entry_points_result(eps),
        ):
            loaded = registry.discover(config)
        return registry, loaded

    def test_discover_loads_emitters(self) -> None:
        registry, loaded = self._discover([self._make_entry_point("echo", EchoEmitter)])
        assert loaded == ["echo"]
        assert registry.list_targets()[-1] == "echo"

    def test_discover_respects_disabled(self) -> None:
        registry, loaded = self._discover(
            [self._make_entry_point("echo", EchoEmitter)],
            PluginsConfig(disabled=["echo"]),
        )
        assert loaded == []
        assert "echo" not in registry

    def test_discover_respects_enabled_allowlist(self) -> None:
        registry, loaded = self._discover(
            [
                self._make_entry_point("echo", EchoEmitter),
                self._make_entry_point("other", ClashingEmitter),
            ],
            PluginsConfig(enabled=["echo"]),
        )
        assert loaded == ["echo"]

    def test_discover_skips_broken_entry_point(self) -> None:
        class BrokenEP:
            name = "broken"

            def load(self) -> type:
                raise ImportError("missing dependency")

        registry, loaded = self._discover([BrokenEP(), self._make_entry_point("echo", EchoEmitter)])
        assert loaded == ["echo"]
        assert "go" in registry

    def test_discover_skips_non_emitter(self) -> None:
        _, loaded = self._discover([self._make_entry_point("bogus", NotAnEmitter)])
        assert loaded == []

    def test_discover_skips_alias_conflict(self) -> None:
        registry, loaded = self._discover([self._make_entry_point("other", ClashingEmitter)])
        assert loaded == []
        assert registry.get("python").target == "python-requests"

    def test_default_registry_does_not_discover(self) -> None:
        with patch("curlgen.emitters.registry.importlib.metadata.entry_points") as mock_eps:
            create_default_registry()
        mock_eps.assert_not_called()
