"""Environment lookup helpers.

"""

from __future__ import annotations

import os
from typing import Mapping

TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def resolve_environ(environ: Mapping[str, str] | None = None) -> Mapping[str, str]:
    """Return the mapping variables are looked up in.

    Args:
        environ (Mapping[str, str] | None): Explicit mapping, mostly for tests.

    Returns:
        Mapping[str, str]: ``environ`` when given, otherwise ``os.environ``.
    """
    return os.environ if environ is None else environ


def parse_bool(raw: str) -> bool:
    """Parse the strict boolean syntax shared by values and metadata.

    Raises:
        ValueError: If ``raw`` is not one of the accepted spellings.
    """
    if raw in TRUE_STRINGS:
        return True
    if raw in FALSE_STRINGS:
        return False
    raise ValueError(f"invalid syntax for bool: {raw!r}")


def env_flag(name: str, default: bool = False, environ: Mapping[str, str] | None = None) -> bool:
    raw = resolve_environ(environ).get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"", "0", "false", "no", "off"}
