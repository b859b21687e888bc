"""Key resolution: lookup, default substitution, required check and expansion.

"""

from __future__ import annotations

from typing import Any, Mapping

from envbind.errors import InvalidMetadataError, InvalidPrefixError, MissingRequiredError
from envbind.fields import KEY_SEPARATOR, REQUIRED_KEY, FieldSpec
from envbind.utils.env import parse_bool
from envbind.utils.text import expand_vars


def validate_prefix(prefix: str) -> None:
    if prefix and not prefix.endswith(KEY_SEPARATOR):
        raise InvalidPrefixError(prefix)


def is_required(raw: Any) -> bool:
    """Interpret ``required`` metadata.

    Raises:
        InvalidMetadataError: If ``raw`` is neither a bool nor a boolean string.
    """
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return False
    try:
        return parse_bool(str(raw))
    except ValueError:
        raise InvalidMetadataError(REQUIRED_KEY, raw) from None


def is_expanded(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw or "").lower() == "true"


def resolve(spec: FieldSpec, environ: Mapping[str, str]) -> str:
    """Resolve the string value of a field bound to ``spec.key``.

    Args:
        spec (FieldSpec): Descriptor with a non-empty ``key``.
        environ (Mapping[str, str]): Lookup collaborator.

    Returns:
        str: The variable's value, the default, or ``""`` when neither exists.

    Raises:
        InvalidMetadataError: If the ``required`` metadata is not a boolean.
        MissingRequiredError: If the variable is absent and required.
    """
    key = spec.key or ""
    required = is_required(spec.required)

    if key in environ:
        value = environ[key]
    elif required:
        raise MissingRequiredError(key)
    else:
        value = spec.default or ""

    if is_expanded(spec.expand):
        value = expand_vars(value, environ)
    return value
