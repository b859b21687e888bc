"""Populate dataclass instances from environment variables.

"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, List, Mapping

from envbind.converters import CustomParsers, convert
from envbind.errors import EnvError, FieldError, InvalidTargetError, ParseErrors, UnsupportedTypeError
from envbind.fields import FieldSpec, UnresolvedAnnotation, describe_fields
from envbind.introspect import get_all_vars
from envbind.resolver import resolve, validate_prefix
from envbind.utils.env import resolve_environ

OnVarSet = Callable[[FieldSpec, str], None]
DebugSink = Callable[..., None]

LOGGER = logging.getLogger("envbind.parser")

_on_var_set: OnVarSet | None = None
_debug_sink: DebugSink | None = None


def set_on_var_set(callback: OnVarSet | None) -> None:
    """Install the callback run after each field is assigned; ``None`` clears it."""
    global _on_var_set
    _on_var_set = callback


def enable_debug_logging(sink: DebugSink | None) -> None:
    """Route per-field debug messages to ``sink``; ``None`` disables it.

    The sink is called printf-style, ``sink(fmt, key, value, owner, path)``,
    so ``logging.Logger.debug`` or ``logging.Logger.info`` can be passed as-is.

    Examples:
        >>> enable_debug_logging(logging.getLogger("app").info)
    """
    global _debug_sink
    _debug_sink = sink


def parse(dst: Any, *, environ: Mapping[str, str] | None = None) -> Any:
    """Populate ``dst`` from the environment without a key prefix.

    See :func:`parse_with_prefix_funcs`.
    """
    return parse_with_prefix_funcs(dst, "", None, environ=environ)


def parse_with_prefix(dst: Any, prefix: str, *, environ: Mapping[str, str] | None = None) -> Any:
    """Populate ``dst`` reading ``prefix + key`` for every bound field.

    With prefix ``CLIENT2_`` a field declared with key ``ENDPOINT`` reads
    ``CLIENT2_ENDPOINT``. See :func:`parse_with_prefix_funcs`.
    """
    return parse_with_prefix_funcs(dst, prefix, None, environ=environ)


def parse_with_funcs(dst: Any, funcs: CustomParsers | None, *, environ: Mapping[str, str] | None = None) -> Any:
    """Populate ``dst`` using custom parsers for the types in ``funcs``.

    See :func:`parse_with_prefix_funcs`.
    """
    return parse_with_prefix_funcs(dst, "", funcs, environ=environ)


def parse_with_prefix_funcs(
    dst: Any,
    prefix: str,
    funcs: CustomParsers | None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Any:
    """Populate a dataclass instance from environment variables.

    Every field declared with :func:`envbind.env_field` (or carrying ``env``
    metadata) is resolved and converted to its annotated type. Fields without
    metadata that hold a dataclass instance are parsed recursively.

    Args:
        dst (Any): Mutable dataclass instance, updated in place.
        prefix (str): Prepended to every key; must end with ``_`` when set.
        funcs (CustomParsers | None): Parsers keyed by type, tried first.
        environ (Mapping[str, str] | None): Variables to read, defaults to
            ``os.environ``.

    Returns:
        Any: ``dst``, for chaining.

    Raises:
        InvalidPrefixError: If ``prefix`` is set and lacks the trailing ``_``.
        InvalidTargetError: If ``dst`` is not a mutable dataclass instance.
        ParseErrors: If any field failed; the remaining fields are still set.
    """
    validate_prefix(prefix)
    _check_target(dst)
    errors = _walk(dst, "", prefix, funcs or {}, resolve_environ(environ))
    if errors:
        LOGGER.debug("Parsing %s failed for %d field(s)", type(dst).__name__, len(errors))
        raise ParseErrors(errors)
    return dst


def must_parse(
    dst: Any,
    prefix: str = "",
    funcs: CustomParsers | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Any:
    """Like :func:`parse_with_prefix_funcs` but halts the process on failure.

    Raises:
        SystemExit: With the rendered error message.
    """
    try:
        return parse_with_prefix_funcs(dst, prefix, funcs, environ=environ)
    except EnvError as err:
        raise SystemExit(f"envbind: configuration of {type(dst).__name__} failed: {err}") from None


def _check_target(dst: Any) -> None:
    if isinstance(dst, type) or not dataclasses.is_dataclass(dst):
        raise InvalidTargetError(f"expected a dataclass instance, got {type(dst).__name__}")
    if _is_frozen(dst):
        raise InvalidTargetError(f"cannot populate frozen dataclass {type(dst).__name__}")


def _walk(
    ref: Any,
    path: str,
    prefix: str,
    funcs: CustomParsers,
    environ: Mapping[str, str],
) -> List[EnvError]:
    errors: List[EnvError] = []
    for f, spec in describe_fields(type(ref), prefix, path):
        current = getattr(ref, f.name, None)

        if spec.key is None:
            if _is_nested(current):
                errors.extend(_walk_nested(current, spec, prefix, funcs, environ))
            continue

        if isinstance(spec.hint, UnresolvedAnnotation):
            cause = UnsupportedTypeError(f"cannot resolve type annotation {spec.hint.text!r}")
            errors.append(FieldError(spec.path, spec.owner, cause, key=spec.key))
            continue

        try:
            value = resolve(spec, environ)
        except EnvError as err:
            errors.append(FieldError(spec.path, spec.owner, err, key=spec.key))
            continue

        if value == "":
            if _is_nested(current):
                errors.extend(_walk_nested(current, spec, prefix, funcs, environ))
            continue

        try:
            converted = convert(value, spec.hint, separator=spec.separator, funcs=funcs)
        except EnvError as err:
            errors.append(FieldError(spec.path, spec.owner, err, key=spec.key))
            continue

        setattr(ref, f.name, converted)
        _notify(spec, value)
    return errors


def _walk_nested(
    current: Any,
    spec: FieldSpec,
    prefix: str,
    funcs: CustomParsers,
    environ: Mapping[str, str],
) -> List[EnvError]:
    if not _is_frozen(current):
        return _walk(current, spec.path, prefix, funcs, environ)
    # Frozen constants with nothing to bind are left alone.
    if not get_all_vars(type(current)):
        return []
    cause = InvalidTargetError(f"cannot populate frozen dataclass {type(current).__name__}")
    return [FieldError(spec.path, spec.owner, cause, key=spec.key)]


def _is_frozen(value: Any) -> bool:
    return bool(type(value).__dataclass_params__.frozen)  # type: ignore[attr-defined]


def _is_nested(value: Any) -> bool:
    return value is not None and not isinstance(value, type) and dataclasses.is_dataclass(value)


def _notify(spec: FieldSpec, value: str) -> None:
    LOGGER.debug("env: %s = %s (field: %s.%s)", spec.key, value, spec.owner, spec.path)
    if _debug_sink is not None:
        _debug_sink("env: %s = %s (field: %s.%s)", spec.key, value, spec.owner, spec.path)
    if _on_var_set is not None:
        _on_var_set(spec, value)
