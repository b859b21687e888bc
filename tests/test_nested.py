"""
Tests for nested dataclass traversal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import pytest

from envbind import InvalidTargetError, ParseErrors, env_field, parse, parse_with_prefix


@dataclass
class Inner:
    bar: str = env_field("BAR")
    count: int = env_field("COUNT")


@dataclass
class Outer:
    foo: str = env_field("FOO")
    inner: Inner = field(default_factory=Inner)
    maybe: Optional[Inner] = None


@dataclass
class Tagged:
    inner: Inner = env_field("INNER_OVERRIDE", factory=Inner)


@dataclass(frozen=True)
class FrozenInner:
    bar: str = env_field("BAR")


@dataclass
class HoldsFrozen:
    inner: FrozenInner = field(default_factory=FrozenInner)


def test_nested_dataclass_is_parsed() -> None:
    cfg = parse(Outer(), environ={"FOO": "foo", "BAR": "bar", "COUNT": "2"})

    assert cfg.foo == "foo"
    assert cfg.inner.bar == "bar"
    assert cfg.inner.count == 2
    assert cfg.maybe is None


def test_nested_dataclass_uses_prefix() -> None:
    cfg = parse_with_prefix(Outer(), "APP_", environ={"APP_BAR": "bar", "BAR": "wrong"})

    assert cfg.inner.bar == "bar"


def test_optional_nested_instance_is_followed_when_set() -> None:
    cfg = Outer(maybe=Inner())
    parse(cfg, environ={"BAR": "bar"})

    assert cfg.maybe is not None
    assert cfg.maybe.bar == "bar"


def test_nested_errors_carry_dotted_path_and_owner() -> None:
    with pytest.raises(ParseErrors) as excinfo:
        parse(Outer(maybe=Inner()), environ={"COUNT": "many"})

    assert excinfo.value.paths == ["inner.count", "maybe.count"]
    first = excinfo.value.errors[0]
    assert first.owner == "Inner"
    assert "field 'inner.count' in Inner" in str(excinfo.value)


def test_tagged_nested_field_without_value_is_recursed() -> None:
    cfg = parse(Tagged(), environ={"BAR": "bar"})

    assert cfg.inner.bar == "bar"


@dataclass(frozen=True)
class FrozenConsts:
    retries: int = 3


@dataclass
class HoldsConsts:
    port: int = env_field("PORT")
    bad: int = env_field("BAD")
    consts: FrozenConsts = field(default_factory=FrozenConsts)


def test_frozen_nested_dataclass_without_bindings_is_skipped() -> None:
    cfg = HoldsConsts()

    with pytest.raises(ParseErrors) as excinfo:
        parse(cfg, environ={"PORT": "1", "BAD": "x"})

    assert excinfo.value.paths == ["bad"]
    assert cfg.port == 1
    assert cfg.consts == FrozenConsts()


def test_frozen_nested_dataclass_with_bindings_is_collected() -> None:
    cfg = HoldsFrozen()

    with pytest.raises(ParseErrors) as excinfo:
        parse(cfg, environ={"BAR": "bar"})

    assert excinfo.value.paths == ["inner"]
    assert isinstance(excinfo.value.errors[0].cause, InvalidTargetError)
    assert "cannot populate frozen dataclass FrozenInner" in str(excinfo.value)
    assert cfg.inner.bar is None
