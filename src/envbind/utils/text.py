from __future__ import annotations

from typing import Mapping, Tuple

_SPECIAL_NAMES = frozenset("*#$@!?-0123456789")


def expand_vars(template: str, environ: Mapping[str, str]) -> str:
    """Replace ``${NAME}`` and ``$NAME`` with values from ``environ``.

    Follows shell-style rules: unknown names expand to the empty string, a
    single special character (``$``, ``*``, ``#``, ``@``, ``!``, ``?``, ``-``
    or a digit) after ``$`` is a name on its own, so ``pa$$word`` looks up
    ``$`` and becomes ``paword``. Malformed ``${`` and ``${}`` are dropped,
    and a ``$`` not followed by a name is kept.

    Examples:
        >>> expand_vars("${HOST}:$PORT", {"HOST": "db", "PORT": "5432"})
        'db:5432'
    """
    out = []
    start = 0
    pos = 0
    while pos < len(template):
        if template[pos] == "$" and pos + 1 < len(template):
            out.append(template[start:pos])
            name, width = _shell_name(template[pos + 1 :])
            if name:
                value = environ.get(name, "")
                out.append("" if value is None else str(value))
            elif width == 0:
                out.append("$")
            pos += width
            start = pos + 1
        pos += 1
    out.append(template[start:])
    return "".join(out)


def _shell_name(text: str) -> Tuple[str, int]:
    """Return the variable name at the start of ``text`` and how many characters it spans.

    An empty name with a non-zero width marks bad syntax to be dropped.
    """
    if text[0] == "{":
        if len(text) > 2 and text[1] in _SPECIAL_NAMES and text[2] == "}":
            return text[1], 3
        closing = text.find("}", 1)
        if closing == -1:
            return "", 1
        if closing == 1:
            return "", 2
        return text[1:closing], closing + 1
    if text[0] in _SPECIAL_NAMES:
        return text[0], 1
    width = 0
    while width < len(text) and (text[width] == "_" or (text[width].isascii() and text[width].isalnum())):
        width += 1
    return text[:width], width
