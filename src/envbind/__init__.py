"""Public package entrypoints for envbind.

Bind environment variables to dataclass fields declared with ``env_field``.
"""

from __future__ import annotations

from envbind.converters import CustomParsers, ParserFunc
from envbind.errors import (
    ConversionError,
    EnvError,
    FieldError,
    InvalidMetadataError,
    InvalidPrefixError,
    InvalidTargetError,
    MissingRequiredError,
    MissingVariablesError,
    ParseErrors,
    UnsupportedSliceTypeError,
    UnsupportedTypeError,
)
from envbind.fields import FieldSpec, env_field
from envbind.introspect import VarInfo, get_all_vars, get_required_vars, validate_required
from envbind.parser import (
    enable_debug_logging,
    must_parse,
    parse,
    parse_with_funcs,
    parse_with_prefix,
    parse_with_prefix_funcs,
    set_on_var_set,
)
from envbind.types import Float32, Int64, TextDeserializable, UInt, UInt64

__all__ = [
    "parse",
    "parse_with_prefix",
    "parse_with_funcs",
    "parse_with_prefix_funcs",
    "must_parse",
    "get_all_vars",
    "get_required_vars",
    "validate_required",
    "set_on_var_set",
    "enable_debug_logging",
    "env_field",
    "FieldSpec",
    "VarInfo",
    "CustomParsers",
    "ParserFunc",
    "Int64",
    "UInt",
    "UInt64",
    "Float32",
    "TextDeserializable",
    "EnvError",
    "InvalidTargetError",
    "InvalidPrefixError",
    "MissingRequiredError",
    "InvalidMetadataError",
    "ConversionError",
    "UnsupportedTypeError",
    "UnsupportedSliceTypeError",
    "FieldError",
    "ParseErrors",
    "MissingVariablesError",
]
__version__ = "0.1.0"
