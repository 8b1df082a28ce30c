"""Shared fixtures: an in-memory registry and payload builders."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest
from loguru import logger

from crate_pkgbuild.config import get_settings
from crate_pkgbuild.schemas import RegistryPayload


def make_payload(
    max_stable_version: Optional[str],
    versions: Optional[List[Dict[str, Any]]] = None,
    **crate: Any,
) -> RegistryPayload:
    if versions is None:
        versions = [{"num": max_stable_version, "license": "MIT"}]
    return RegistryPayload.model_validate(
        {"crate": {"max_stable_version": max_stable_version, **crate}, "versions": versions}
    )


class FakeSource:
    """Registry double that records calls and can delay or fail per crate."""

    def __init__(
        self,
        payloads: Dict[str, RegistryPayload],
        delays: Optional[Dict[str, float]] = None,
        failures: Optional[Dict[str, Exception]] = None,
    ):
        self.payloads = payloads
        self.delays = delays or {}
        self.failures = failures or {}
        self.calls: List[str] = []
        self.completed: List[str] = []

    async def fetch_metadata(self, name: str) -> RegistryPayload:
        self.calls.append(name)
        await asyncio.sleep(self.delays.get(name, 0))
        if name in self.failures:
            raise self.failures[name]
        self.completed.append(name)
        return self.payloads[name]

    async def __aenter__(self) -> "FakeSource":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None


@pytest.fixture
def foo_bar_payloads() -> Dict[str, RegistryPayload]:
    return {
        "foo": make_payload("1.2.0", [{"num": "1.2.0", "license": "MIT"}]),
        "bar": make_payload("0.9.0", [{"num": "0.9.0", "license": "MIT/Apache-2.0"}]),
    }


@pytest.fixture(autouse=True)
def reset_settings_and_logging():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    logger.remove()
