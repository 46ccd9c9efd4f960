"""Shared test fixtures for the mdbridge test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from mdbridge.config import MdBridgeConfig
from mdbridge.converter.doc_to_md import MarkdownSerializer
from mdbridge.converter.md_to_doc import BlockParser
from mdbridge.converter.registry import TokenRegistry
from mdbridge.engine import InMemoryDocumentEngine
from mdbridge.extensions import default_registry

# ---------------------------------------------------------------------------
# Deterministic scheduler
# ---------------------------------------------------------------------------


class ManualTimer:
    """Handle returned by :class:`ManualScheduler`."""

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """A scheduler whose clock only moves when the test calls :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + delay_s, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted((t for t in self.active if t.due <= self.now), key=lambda t: t.due)
        for timer in due:
            self.timers.remove(timer)
            if not timer.cancelled:
                timer.callback()


# ---------------------------------------------------------------------------
# Recording metrics backend
# ---------------------------------------------------------------------------


class RecordingMetricsHook:
    """A metrics backend that records all calls for assertion."""

    def __init__(self) -> None:
        self.increments: list[dict[str, Any]] = []
        self.timings: list[dict[str, Any]] = []
        self.gauges: list[dict[str, Any]] = []

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.increments.append({"name": name, "value": value, "tags": tags})

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.timings.append({"name": name, "ms": ms, "tags": tags})

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.gauges.append({"name": name, "value": value, "tags": tags})

    def count(self, name: str) -> int:
        return sum(i["value"] for i in self.increments if i["name"] == name)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> MdBridgeConfig:
    """Default configuration."""
    return MdBridgeConfig()


@pytest.fixture
def registry() -> TokenRegistry:
    """Registry with every built-in extension."""
    return default_registry()


@pytest.fixture
def parser(registry: TokenRegistry, config: MdBridgeConfig) -> BlockParser:
    """Block parser over the default registry."""
    return BlockParser(registry, config)


@pytest.fixture
def serializer(registry: TokenRegistry, config: MdBridgeConfig) -> MarkdownSerializer:
    """gfm serializer over the default registry."""
    return MarkdownSerializer(registry, config)


@pytest.fixture
def make_serializer(registry: TokenRegistry) -> Callable[[str], MarkdownSerializer]:
    """Factory for a serializer of a given flavor."""
    def _make(flavor: str) -> MarkdownSerializer:
        return MarkdownSerializer(registry, flavor=flavor)
    return _make


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def metrics() -> RecordingMetricsHook:
    return RecordingMetricsHook()


@pytest.fixture
def engine() -> InMemoryDocumentEngine:
    """Engine holding a single paragraph."""
    return InMemoryDocumentEngine({
        "type": "doc",
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": "Start"}]}],
    })
