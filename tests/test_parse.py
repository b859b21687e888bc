"""
Tests for populating dataclasses from environment variables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, List, Optional

import pytest

if TYPE_CHECKING:
    from decimal import Decimal

from envbind import (
    InvalidPrefixError,
    InvalidTargetError,
    ParseErrors,
    env_field,
    parse,
    parse_with_prefix,
)


@dataclass
class Plain:
    name: str = "unchanged"
    count: int = 0


@dataclass
class Config:
    home: str = env_field("HOME")
    port: int = env_field("PORT", default="3000")
    debug: bool = env_field("DEBUG")
    ratio: float = env_field("RATIO")
    timeout: timedelta = env_field("TIMEOUT")
    hosts: List[str] = env_field("HOSTS", factory=list)
    sep_hosts: List[str] = env_field("SEP_HOSTS", separator=":", factory=list)


@dataclass
class PrefixedConfig:
    port: int = env_field("PORT")


@dataclass
class WithPrivate:
    _secret: str = env_field("SECRET", value="keep")
    public: str = env_field("PUBLIC")


@dataclass(frozen=True)
class Frozen:
    value: str = env_field("VALUE")


def test_parse_populates_scalar_and_list_fields() -> None:
    environ = {
        "HOME": "/tmp/fakehome",
        "DEBUG": "true",
        "RATIO": "0.75",
        "TIMEOUT": "1m30s",
        "HOSTS": "a,b,c",
        "SEP_HOSTS": "x:y",
    }
    cfg = parse(Config(), environ=environ)

    assert cfg.home == "/tmp/fakehome"
    assert cfg.port == 3000
    assert cfg.debug is True
    assert cfg.ratio == 0.75
    assert cfg.timeout == timedelta(seconds=90)
    assert cfg.hosts == ["a", "b", "c"]
    assert cfg.sep_hosts == ["x", "y"]


def test_parse_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ["DEBUG", "RATIO", "TIMEOUT", "HOSTS", "SEP_HOSTS"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", "/home/user")
    monkeypatch.setenv("PORT", "8080")

    cfg = parse(Config())

    assert cfg.home == "/home/user"
    assert cfg.port == 8080


def test_parse_without_metadata_leaves_fields_untouched() -> None:
    cfg = Plain()
    parse(cfg, environ={"NAME": "other", "COUNT": "3"})

    assert cfg.name == "unchanged"
    assert cfg.count == 0


def test_parse_applies_default_converted_to_declared_type() -> None:
    cfg = parse(Config(), environ={})

    assert cfg.port == 3000
    assert cfg.home is None
    assert cfg.hosts == []


def test_empty_value_leaves_field_untouched() -> None:
    cfg = Config()
    cfg.home = "preset"
    parse(cfg, environ={"HOME": ""})

    assert cfg.home == "preset"


def test_explicit_value_overrides_default() -> None:
    cfg = parse(Config(), environ={"PORT": "9000"})

    assert cfg.port == 9000


def test_parse_with_prefix_reads_prefixed_keys() -> None:
    cfg = parse_with_prefix(PrefixedConfig(), "APP_", environ={"APP_PORT": "8080", "PORT": "1"})

    assert cfg.port == 8080


def test_parse_with_empty_prefix_is_valid() -> None:
    cfg = parse_with_prefix(PrefixedConfig(), "", environ={"PORT": "1"})

    assert cfg.port == 1


def test_parse_with_prefix_without_underscore_fails_before_lookup() -> None:
    class ExplodingEnviron(dict):
        def __contains__(self, key: object) -> bool:
            raise AssertionError("environment must not be read")

    with pytest.raises(InvalidPrefixError, match="prefix must end with underscore"):
        parse_with_prefix(PrefixedConfig(), "APP", environ=ExplodingEnviron())


@pytest.mark.parametrize("target", [None, "text", 42, Config, object()])
def test_parse_rejects_non_dataclass_instances(target: object) -> None:
    with pytest.raises(InvalidTargetError):
        parse(target)


def test_parse_rejects_frozen_dataclass() -> None:
    with pytest.raises(InvalidTargetError, match="frozen"):
        parse(Frozen(), environ={"VALUE": "x"})


def test_private_fields_are_skipped() -> None:
    cfg = parse(WithPrivate(), environ={"SECRET": "leaked", "PUBLIC": "ok"})

    assert cfg._secret == "keep"
    assert cfg.public == "ok"


def test_parse_returns_destination_instance() -> None:
    cfg = Config()

    assert parse(cfg, environ={}) is cfg


@dataclass
class OptionalFields:
    port: Optional[int] = env_field("PORT")
    names: Optional[List[str]] = env_field("NAMES")
    extra: dict = field(default_factory=dict)


def test_optional_hints_convert_to_inner_type() -> None:
    cfg = parse(OptionalFields(), environ={"PORT": "80", "NAMES": "a,b"})

    assert cfg.port == 80
    assert cfg.names == ["a", "b"]
    assert cfg.extra == {}


@dataclass
class WithTypeCheckingImport:
    port: int = env_field("PORT")
    amount: Optional[Decimal] = None


@dataclass
class BoundToTypeCheckingImport:
    port: int = env_field("PORT")
    amount: Decimal = env_field("AMOUNT")


def test_unresolvable_annotation_does_not_affect_other_fields() -> None:
    cfg = parse(WithTypeCheckingImport(), environ={"PORT": "8080"})

    assert cfg.port == 8080
    assert cfg.amount is None


def test_locally_defined_nested_dataclasses_are_parsed() -> None:
    @dataclass
    class Inner:
        bar: str = env_field("BAR")

    @dataclass
    class Outer:
        port: int = env_field("PORT")
        inner: Inner = field(default_factory=Inner)

    cfg = parse(Outer(), environ={"PORT": "8080", "BAR": "bar"})

    assert cfg.port == 8080
    assert cfg.inner.bar == "bar"


def test_bound_field_with_unresolvable_annotation_is_collected() -> None:
    cfg = BoundToTypeCheckingImport()

    with pytest.raises(ParseErrors) as excinfo:
        parse(cfg, environ={"PORT": "8080", "AMOUNT": "1.5"})

    assert excinfo.value.paths == ["amount"]
    assert "cannot resolve type annotation 'Decimal'" in str(excinfo.value)
    assert cfg.port == 8080
