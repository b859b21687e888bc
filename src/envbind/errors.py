"""Error types raised while binding environment variables to dataclasses.

"""

from __future__ import annotations

from typing import Iterable, List, Sequence


class EnvError(Exception):
    """Base class for every error raised by envbind."""


class InvalidTargetError(EnvError, TypeError):
    """Raised when the destination is not a mutable dataclass instance."""

    def __init__(self, message: str = "expected a dataclass instance") -> None:
        super().__init__(message)


class InvalidPrefixError(EnvError, ValueError):
    """Raised when a non-empty key prefix does not end with an underscore."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        super().__init__(f"prefix must end with underscore, got: {prefix!r}")


class MissingRequiredError(EnvError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"env var {key} was missing and is required")


class InvalidMetadataError(EnvError, ValueError):
    def __init__(self, tag: str, raw: object) -> None:
        self.tag = tag
        self.raw = raw
        super().__init__(f"invalid {tag} tag {str(raw)!r}: not a valid boolean")


class ConversionError(EnvError, ValueError):
    """The value is present but cannot be converted to the declared type."""


class UnsupportedTypeError(EnvError, TypeError):
    def __init__(self, message: str = "type is not supported") -> None:
        super().__init__(message)


class UnsupportedSliceTypeError(UnsupportedTypeError):
    def __init__(self, message: str = "unsupported slice type") -> None:
        super().__init__(message)


class FieldError(EnvError):
    """A failure bound to one dataclass field.

    Args:
        path (str): Dotted path of the field from the parsed root.
        owner (str): Name of the dataclass declaring the field.
        cause (Exception): Underlying resolution or conversion error.
        key (str | None): Environment variable the field resolves to, when known.
    """

    def __init__(self, path: str, owner: str, cause: Exception, key: str | None = None) -> None:
        self.path = path
        self.owner = owner
        self.cause = cause
        self.key = key
        super().__init__(f"field '{path}' in {owner}: {cause}")
        self.__cause__ = cause


class ParseErrors(EnvError):
    """Aggregate of every field failure collected during one parse call."""

    def __init__(self, errors: Iterable[Exception]) -> None:
        self.errors: List[Exception] = list(errors)
        super().__init__(self._render(self.errors))

    @staticmethod
    def _render(errors: Sequence[Exception]) -> str:
        if not errors:
            return ""
        if len(errors) == 1:
            return str(errors[0])
        lines = [f"multiple parsing errors ({len(errors)}):"]
        for index, err in enumerate(errors, start=1):
            lines.append(f"  {index}. {err}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)

    @property
    def paths(self) -> List[str]:
        return [err.path for err in self.errors if isinstance(err, FieldError)]


class MissingVariablesError(EnvError):
    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        super().__init__(f"missing required environment variables: {', '.join(self.names)}")
