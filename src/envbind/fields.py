"""Field metadata keys, the ``env_field`` helper and field descriptors.

A dataclass field is bound to an environment variable through its
``metadata`` mapping. The keys mirror the struct tags users of other
environment binders already know: ``env``, ``envDefault``, ``required``,
``envSeparator`` and ``envExpand``.
"""

from __future__ import annotations

import dataclasses
import inspect
import sys
import types
import typing
from dataclasses import MISSING, dataclass
from typing import Any, Callable, Dict, List, Tuple, Union

ENV_KEY = "env"
DEFAULT_KEY = "envDefault"
REQUIRED_KEY = "required"
SEPARATOR_KEY = "envSeparator"
EXPAND_KEY = "envExpand"

DEFAULT_SEPARATOR = ","
KEY_SEPARATOR = "_"


def env_field(
    key: str,
    *,
    default: str | None = None,
    required: bool | str = False,
    separator: str | None = None,
    expand: bool | str = False,
    value: Any = None,
    factory: Callable[[], Any] | Any = MISSING,
    **field_kwargs: Any,
) -> Any:
    """Declare a dataclass field bound to an environment variable.

    Args:
        key (str): Variable name, without any prefix.
        default (str | None): Text used when the variable is absent. It goes
            through the same conversion as a real value.
        required (bool | str): Fail the parse when the variable is absent.
            Strings are parsed with the strict boolean syntax at parse time.
        separator (str | None): Separator for list fields (default ``,``).
        expand (bool | str): Substitute ``${NAME}`` references in the value.
        value (Any): Initial attribute value before parsing.
        factory (Callable[[], Any]): Initial value factory, for mutable values.
        **field_kwargs: Forwarded to :func:`dataclasses.field`.

    Returns:
        Any: A :class:`dataclasses.Field` to assign in a dataclass body.

    Examples:
        >>> @dataclass
        ... class Config:
        ...     port: int = env_field("PORT", default="8080")
    """
    metadata: Dict[str, Any] = dict(field_kwargs.pop("metadata", None) or {})
    metadata[ENV_KEY] = key
    if default is not None:
        metadata[DEFAULT_KEY] = default
    if required is not False:
        metadata[REQUIRED_KEY] = required
    if separator is not None:
        metadata[SEPARATOR_KEY] = separator
    if expand is not False:
        metadata[EXPAND_KEY] = expand
    if factory is not MISSING:
        return dataclasses.field(default_factory=factory, metadata=metadata, **field_kwargs)
    return dataclasses.field(default=value, metadata=metadata, **field_kwargs)


@dataclass(frozen=True)
class FieldSpec:
    """Descriptor of one dataclass field as seen by the parser.

    ``key`` is the full variable name including the prefix, or ``None`` when
    the field carries no ``env`` metadata.
    """

    name: str
    path: str
    owner: str
    hint: Any
    key: str | None = None
    default: str | None = None
    required: Any = False
    separator: str | None = None
    expand: Any = False

    @property
    def has_default(self) -> bool:
        return self.default is not None and self.default != ""


def describe_fields(cls: type, prefix: str = "", parent_path: str = "") -> List[Tuple[dataclasses.Field, FieldSpec]]:
    """Describe the public fields of a dataclass in declaration order."""
    hints = _type_hints(cls)
    described: List[Tuple[dataclasses.Field, FieldSpec]] = []
    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue
        metadata = f.metadata or {}
        tag = metadata.get(ENV_KEY) or None
        default = metadata.get(DEFAULT_KEY)
        spec = FieldSpec(
            name=f.name,
            path=f"{parent_path}.{f.name}" if parent_path else f.name,
            owner=cls.__name__,
            hint=hints.get(f.name, f.type),
            key=prefix + tag if tag else None,
            default=None if default is None else str(default),
            required=metadata.get(REQUIRED_KEY, False),
            separator=metadata.get(SEPARATOR_KEY) or None,
            expand=metadata.get(EXPAND_KEY, False),
        )
        described.append((f, spec))
    return described


@dataclass(frozen=True)
class UnresolvedAnnotation:
    """String annotation that could not be evaluated, such as a name only
    imported under ``TYPE_CHECKING`` or a class local to a function."""

    text: str

    def __str__(self) -> str:
        return self.text


def _type_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, AttributeError, SyntaxError, TypeError):
        pass
    # One bad annotation must not hide the others: evaluate them one by one.
    hints: Dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        annotations = inspect.get_annotations(klass)
        if not annotations:
            continue
        module = sys.modules.get(klass.__module__)
        globalns = dict(vars(module)) if module is not None else {}
        localns = dict(vars(klass))
        localns.setdefault(klass.__name__, klass)
        for name, annotation in annotations.items():
            hints[name] = _eval_annotation(annotation, globalns, localns)
    return hints


def _eval_annotation(annotation: Any, globalns: Dict[str, Any], localns: Dict[str, Any]) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, globalns, localns)  # noqa: S307
    except (NameError, AttributeError, SyntaxError, TypeError):
        return UnresolvedAnnotation(annotation)


def unwrap_optional(hint: Any) -> Any:
    """Return ``T`` for ``Optional[T]`` and ``T | None``; other hints unchanged."""
    origin = typing.get_origin(hint)
    if origin is Union or origin is getattr(types, "UnionType", None):
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def dataclass_type(hint: Any) -> type | None:
    inner = unwrap_optional(hint)
    if isinstance(inner, type) and dataclasses.is_dataclass(inner):
        return inner
    return None


def type_name(hint: Any) -> str:
    if isinstance(hint, type):
        return hint.__name__
    supertype = getattr(hint, "__supertype__", None)
    if supertype is not None:
        return getattr(hint, "__name__", str(hint))
    return str(hint).replace("typing.", "").replace("datetime.", "")
