"""Shared test fixtures for specsync.

Provides document fixtures (raw text and parsed/classified forms), a
deterministic randomness provider, isolated config environments, output
state management and a CLI runner. These fixtures are discovered by pytest
automatically.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
import yaml
from rich.logging import RichHandler

from specsync.mock.randomness import FakerRandomness, PatternSynthesisError
from specsync.output import reset_output
from specsync.parser.classifier import ClassifiedDocument, classify_document
from specsync.parser.resolver import dereference_document

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the ``specsync`` logger after every test.

    The OutputManager and its RichHandler cache sys.stdout/sys.stderr at
    creation time, which go stale once Typer's CliRunner restores the real
    streams.
    """
    yield
    reset_output()
    logger = logging.getLogger("specsync")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Randomness
# ---------------------------------------------------------------------------


class FixedRandomness:
    """Deterministic provider: always the lowest bound / first option."""

    def word(self) -> str:
        return "word"

    def alphanumeric(self, min_length: int, max_length: int) -> str:
        return "a" * max(min_length, min(1, max_length))

    def from_pattern(self, pattern: str) -> str:
        if pattern == "(":
            raise PatternSynthesisError("bad pattern")
        return f"match:{pattern}"

    def integer(self, low: int, high: int) -> int:
        return low

    def decimal(self, low: float, high: float, digits: int = 2) -> float:
        return round(low, digits)

    def boolean(self) -> bool:
        return True

    def choice(self, options: Sequence[Any]) -> Any:
        return options[0]

    def email(self) -> str:
        return "user@example.com"

    def uuid(self) -> str:
        return "00000000-0000-4000-8000-000000000000"

    def date(self) -> str:
        return "2024-01-02"

    def date_time(self) -> str:
        return "2024-01-02T03:04:05.000Z"

    def uri(self) -> str:
        return "https://example.com/"


@pytest.fixture
def fixed_randomness() -> FixedRandomness:
    """Deterministic randomness for assertions on exact values."""
    return FixedRandomness()


@pytest.fixture
def seeded_randomness() -> FakerRandomness:
    """A seeded Faker-backed provider."""
    return FakerRandomness(seed=1234)


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


def read_fixture(name: str) -> str:
    """Return the raw text of a fixture document."""
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def classified_fixture(name: str) -> ClassifiedDocument:
    """Parse and classify a fixture document (references left in place)."""
    text = read_fixture(name)
    value = json.loads(text) if name.endswith(".json") else yaml.safe_load(text)
    doc = classify_document(value)
    assert doc is not None
    return doc


@pytest.fixture
def classified() -> Callable[[str], ClassifiedDocument]:
    """Factory: fixture file name -> ClassifiedDocument (refs unresolved)."""
    return classified_fixture


@pytest.fixture
def resolved() -> Callable[[str], ClassifiedDocument]:
    """Factory: fixture file name -> ClassifiedDocument with refs resolved."""

    def _resolve(name: str) -> ClassifiedDocument:
        doc = classified_fixture(name)
        return doc.with_document(dereference_document(doc.document))

    return _resolve


@pytest.fixture
def petstore_text() -> str:
    return read_fixture("petstore_2.0.json")


@pytest.fixture
def users_text() -> str:
    return read_fixture("users_3.0.yaml")


@pytest.fixture
def cyclic_text() -> str:
    return read_fixture("cyclic_3.0.json")


@pytest.fixture
def external_ref_text() -> str:
    return read_fixture("external_ref_3.0.json")


@pytest.fixture
def inventory_text() -> str:
    return read_fixture("inventory_3.1.json")


@pytest.fixture
def minimal_doc() -> dict[str, Any]:
    """The smallest OpenAPI 3.0 document with one operation."""
    return {
        "openapi": "3.0.0",
        "info": {"title": "T"},
        "paths": {
            "/x": {
                "get": {
                    "operationId": "Op",
                    "responses": {"200": {"description": "OK"}},
                }
            }
        },
    }


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories into tmp_path, clears all SPECSYNC_*
    environment variables and changes the working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("specsync.config._is_xdg_platform", lambda: True)

    for var in [
        "SPECSYNC_BACKEND",
        "SPECSYNC_WORKER_TIMEOUT",
        "SPECSYNC_PATTERN_TIMEOUT",
        "SPECSYNC_SEED",
        "SPECSYNC_BASE_URL",
        "SPECSYNC_OUTPUT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
