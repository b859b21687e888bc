"""Read-only introspection of the variables a dataclass binds.

Useful for generating documentation, example environment files, or for
checking at startup that every required variable is present before parsing.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, List, Mapping, Tuple

from envbind.errors import InvalidMetadataError, InvalidTargetError, MissingVariablesError
from envbind.fields import dataclass_type, describe_fields, type_name
from envbind.resolver import is_required
from envbind.utils.env import resolve_environ


@dataclass(frozen=True)
class VarInfo:
    """Description of one environment variable read by a dataclass field.

    Args:
        name (str): Full variable name, prefix included.
        field_name (str): Attribute name of the field.
        field_path (str): Dotted path of the field from the root dataclass.
        required (bool): Whether parsing fails when the variable is absent.
        default (str): Default text, empty when none is declared.
        type (str): Readable name of the declared type.
        has_default (bool): Whether a non-empty default is declared.
    """

    name: str
    field_name: str
    field_path: str
    required: bool
    default: str
    type: str
    has_default: bool


def get_all_vars(dst: Any, prefix: str = "") -> List[VarInfo]:
    """List every variable ``dst`` would read, nested dataclasses included.

    The environment is never consulted and ``dst`` is not modified.

    Args:
        dst (Any): Dataclass instance or dataclass type.
        prefix (str): Prepended to every variable name.

    Returns:
        List[VarInfo]: One entry per bound field, in declaration order.

    Raises:
        InvalidTargetError: If ``dst`` is not a dataclass or dataclass instance.
    """
    if not dataclasses.is_dataclass(dst):
        raise InvalidTargetError(f"expected a dataclass, got {type(dst).__name__}")
    cls = dst if isinstance(dst, type) else type(dst)
    found: List[VarInfo] = []
    _collect(cls, "", prefix, found)
    return found


def get_required_vars(dst: Any, prefix: str = "") -> List[str]:
    """Names of the required variables of ``dst``, in declaration order."""
    return [info.name for info in get_all_vars(dst, prefix) if info.required]


def validate_required(dst: Any, prefix: str = "", *, environ: Mapping[str, str] | None = None) -> None:
    """Check that every required variable of ``dst`` is present.

    Only presence is checked, values are not converted.

    Raises:
        MissingVariablesError: Listing every absent variable.
    """
    env = resolve_environ(environ)
    missing = [name for name in get_required_vars(dst, prefix) if name not in env]
    if missing:
        raise MissingVariablesError(missing)


def _collect(cls: type, path: str, prefix: str, found: List[VarInfo], ancestors: Tuple[type, ...] = ()) -> None:
    for _, spec in describe_fields(cls, prefix, path):
        nested = dataclass_type(spec.hint)
        if spec.key is not None:
            try:
                required = is_required(spec.required)
            except InvalidMetadataError:
                required = False
            found.append(
                VarInfo(
                    name=spec.key,
                    field_name=spec.name,
                    field_path=spec.path,
                    required=required,
                    default=spec.default or "",
                    type=type_name(spec.hint),
                    has_default=spec.has_default,
                )
            )
        if nested is not None and nested not in ancestors and nested is not cls:
            _collect(nested, spec.path, prefix, found, ancestors + (cls,))
