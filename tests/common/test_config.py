from __future__ import annotations

from pathlib import Path

import pytest

from shelfwise.config import (
    ConfigurationError,
    env_float,
    env_int,
    get_database_config,
    get_lookup_config,
    optional_env,
)
from shelfwise.config.lookup import MAX_LOOKUP_WORKERS, has_content


def test_optional_env_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")
    assert optional_env("EXAMPLE_VAR") is None

    monkeypatch.setenv("EXAMPLE_VAR", " value ")
    assert optional_env("EXAMPLE_VAR") == "value"


def test_numeric_env_helpers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_INT", raising=False)
    assert env_int("EXAMPLE_INT", 3) == 3

    monkeypatch.setenv("EXAMPLE_INT", "7")
    monkeypatch.setenv("EXAMPLE_FLOAT", "2.5")
    assert env_int("EXAMPLE_INT", 3) == 7
    assert env_float("EXAMPLE_FLOAT", 1.0) == 2.5


def test_numeric_env_helpers_reject_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "seven")

    with pytest.raises(ConfigurationError) as exc:
        env_int("EXAMPLE_INT", 3)

    assert "EXAMPLE_INT" in str(exc.value)


def test_lookup_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SHELFWISE_LOOKUP_WORKERS", "SHELFWISE_LOOKUP_TIMEOUT", "GOOGLE_BOOKS_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SHELFWISE_CONTACT", "me@example.com")

    config = get_lookup_config()

    assert config.max_workers == MAX_LOOKUP_WORKERS
    assert config.timeout_seconds == 30.0
    assert config.google_api_key is None
    assert config.openlibrary.base_url == "https://openlibrary.org"
    assert config.openlibrary.default_headers is not None
    assert config.openlibrary.default_headers["User-Agent"].endswith("(me@example.com)")


@pytest.mark.parametrize(("raw", "expected"), [("0", 1), ("2", 2), ("64", MAX_LOOKUP_WORKERS)])
def test_lookup_workers_are_clamped(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: int
) -> None:
    monkeypatch.setenv("SHELFWISE_LOOKUP_WORKERS", raw)

    assert get_lookup_config().max_workers == expected


def test_has_content() -> None:
    assert has_content({"ISBN:1": {"title": "Dune"}}) is True
    assert has_content({}) is False
    assert has_content({"totalItems": 0}) is False
    assert has_content({"totalItems": 3, "items": []}) is True
    assert has_content([]) is False


def test_database_config(monkeypatch: pytest.MonkeyPatch, isolated_data_dir: Path) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("SHELFWISE_SQL_ECHO", "true")
    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"
    assert get_database_config().echo is True

    monkeypatch.delenv("DATABASE_URI")
    monkeypatch.delenv("SHELFWISE_SQL_ECHO")
    config = get_database_config()
    assert config.echo is False
    assert config.uri.endswith("shelfwise.db")
    assert str(isolated_data_dir.resolve()) in config.uri
