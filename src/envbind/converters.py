"""Conversion of resolved strings into declared field types.

"""

from __future__ import annotations

import math
import re
import struct
import typing
from datetime import timedelta
from functools import partial
from typing import Any, Callable, Dict, List, Mapping
from urllib.parse import ParseResult, SplitResult, urlparse, urlsplit

from envbind.errors import ConversionError, UnsupportedSliceTypeError, UnsupportedTypeError
from envbind.fields import DEFAULT_SEPARATOR, unwrap_optional
from envbind.types import Float32, Int64, UInt, UInt64, is_text_deserializable
from envbind.utils.env import parse_bool

ParserFunc = Callable[[str], Any]
CustomParsers = Mapping[Any, ParserFunc]

DECIMAL_BASE = 10
INT32_BITS = 32
INT64_BITS = 64

_SIGNED_PATTERN = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_PATTERN = re.compile(r"[0-9]+")
_HEX_FLOAT_PATTERN = re.compile(r"[+-]?0[xX].*")
_BAD_ESCAPE_PATTERN = re.compile(r"%(?![0-9A-Fa-f]{2})")
_DURATION_PART = re.compile(r"([0-9]+\.?[0-9]*|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS_US: Dict[str, float] = {
    "ns": 1e-3,
    "us": 1.0,
    "µs": 1.0,
    "μs": 1.0,
    "ms": 1e3,
    "s": 1e6,
    "m": 60e6,
    "h": 3600e6,
}


def parse_signed(raw: str, bits: int = INT32_BITS) -> int:
    if not _SIGNED_PATTERN.fullmatch(raw):
        raise ConversionError(f"invalid syntax for integer: {raw!r}")
    value = int(raw, DECIMAL_BASE)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ConversionError(f"value out of range for {bits}-bit integer: {raw!r}")
    return value


def parse_unsigned(raw: str, bits: int = INT32_BITS) -> int:
    if not _UNSIGNED_PATTERN.fullmatch(raw):
        raise ConversionError(f"invalid syntax for unsigned integer: {raw!r}")
    value = int(raw, DECIMAL_BASE)
    if value >= 1 << bits:
        raise ConversionError(f"value out of range for {bits}-bit unsigned integer: {raw!r}")
    return value


def parse_float64(raw: str) -> float:
    if not raw or raw != raw.strip() or "_" in raw:
        raise ConversionError(f"invalid syntax for float: {raw!r}")
    try:
        if _HEX_FLOAT_PATTERN.fullmatch(raw):
            value = float.fromhex(raw)
        else:
            value = float(raw)
    except (ValueError, OverflowError):
        raise ConversionError(f"invalid syntax for float: {raw!r}") from None
    if math.isinf(value) and "inf" not in raw.lower():
        raise ConversionError(f"value out of range for float64: {raw!r}")
    return value


def parse_float32(raw: str) -> float:
    value = parse_float64(raw)
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        raise ConversionError(f"value out of range for float32: {raw!r}") from None


def parse_boolean(raw: str) -> bool:
    try:
        return parse_bool(raw)
    except ValueError as err:
        raise ConversionError(str(err)) from None


def parse_duration(raw: str) -> timedelta:
    """Parse a duration such as ``300ms``, ``-1.5h`` or ``2h45m30s``.

    A bare ``0`` is accepted; any other number needs a unit. Sub-microsecond
    precision is truncated by :class:`datetime.timedelta`.

    Raises:
        ConversionError: If ``raw`` does not follow the duration syntax.
    """
    text = raw
    negative = False
    if text[:1] in ("+", "-"):
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ConversionError(f"invalid duration {raw!r}")

    total_us = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ConversionError(f"invalid duration {raw!r}")
        total_us += float(match.group(1)) * _DURATION_UNITS_US[match.group(2)]
        pos = match.end()
    try:
        return timedelta(microseconds=-total_us if negative else total_us)
    except OverflowError:
        raise ConversionError(f"duration out of range {raw!r}") from None


def _checked_url(raw: str, splitter: Callable[[str], Any]) -> Any:
    try:
        parsed = splitter(raw)
        _ = parsed.port
    except ValueError as err:
        raise ConversionError(f"unable to complete URL parse: {err}") from None
    # The query is kept raw; only the path, userinfo and fragment must be escaped correctly.
    userinfo = parsed.netloc.rpartition("@")[0]
    for part in (userinfo, parsed.path, getattr(parsed, "params", ""), parsed.fragment):
        if _BAD_ESCAPE_PATTERN.search(part):
            raise ConversionError(f"unable to complete URL parse: invalid URL escape in {raw!r}")
    return parsed


_URL_ADAPTERS: Dict[Any, ParserFunc] = {
    ParseResult: partial(_checked_url, splitter=urlparse),
    SplitResult: partial(_checked_url, splitter=urlsplit),
}

_SCALARS: Dict[Any, ParserFunc] = {
    str: str,
    bool: parse_boolean,
    int: partial(parse_signed, bits=INT32_BITS),
    Int64: partial(parse_signed, bits=INT64_BITS),
    UInt: partial(parse_unsigned, bits=INT32_BITS),
    UInt64: partial(parse_unsigned, bits=INT64_BITS),
    Float32: parse_float32,
    float: parse_float64,
    timedelta: parse_duration,
}


def _builtin_parser(tp: Any) -> ParserFunc | None:
    try:
        return _URL_ADAPTERS.get(tp) or _SCALARS.get(tp)
    except TypeError:
        # unhashable hint
        return None


def _custom_parser(funcs: CustomParsers, hint: Any) -> ParserFunc | None:
    for candidate in (hint, unwrap_optional(hint)):
        try:
            if candidate in funcs:
                return funcs[candidate]
        except TypeError:
            continue
    return None


def _from_text(tp: type, raw: str) -> Any:
    try:
        return tp.from_text(raw)  # type: ignore[attr-defined]
    except (ValueError, TypeError) as err:
        raise ConversionError(str(err)) from err


def _is_list(tp: Any) -> bool:
    return tp is list or typing.get_origin(tp) is list


def convert_list(raw: str, tp: Any, separator: str | None = None) -> List[Any]:
    """Split ``raw`` and convert every element to the list's element type.

    Raises:
        ConversionError: If any element fails to convert.
        UnsupportedSliceTypeError: If the element type has no conversion.
    """
    parts = raw.split(separator or DEFAULT_SEPARATOR)
    args = typing.get_args(tp)
    elem = unwrap_optional(args[0]) if args else str

    parser = _builtin_parser(elem)
    if parser is not None:
        return [parser(part) for part in parts]
    if not is_text_deserializable(elem):
        raise UnsupportedSliceTypeError()
    return [_from_text(elem, part) for part in parts]


def convert(
    raw: str,
    hint: Any,
    *,
    separator: str | None = None,
    funcs: CustomParsers | None = None,
) -> Any:
    """Convert a resolved string to the declared type ``hint``.

    Dispatch order: custom parsers, URL types, built-in scalars, lists, then
    the ``from_text`` capability.

    Args:
        raw (str): Resolved, non-empty value.
        hint (Any): Declared type of the field.
        separator (str | None): Element separator for list types.
        funcs (CustomParsers | None): Custom parsers keyed by type hint.

    Returns:
        Any: The converted value.

    Raises:
        ConversionError: If the value is malformed for the type.
        UnsupportedTypeError: If no conversion exists for the type.
    """
    custom = _custom_parser(funcs or {}, hint)
    if custom is not None:
        try:
            return custom(raw)
        except Exception as err:
            raise ConversionError(f"custom parser error: {err}") from err

    tp = unwrap_optional(hint)
    parser = _builtin_parser(tp)
    if parser is not None:
        return parser(raw)
    if _is_list(tp):
        return convert_list(raw, tp, separator)
    if is_text_deserializable(tp):
        return _from_text(tp, raw)
    raise UnsupportedTypeError()
