"""Structured validation failures raised by the normalizer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Final

ROOT_PATH: Final[str] = "<root>"


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Serializable description of a single validation failure."""

    path: str
    rule: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "rule": self.rule, "message": self.message}


class ConfigValidationError(ValueError):
    """Raised when a configuration document violates the schema."""

    rule: ClassVar[str] = "invalid"

    def __init__(self, path: str, message: str) -> None:
        self.path = path or ROOT_PATH
        self.message = message
        super().__init__(f"invalid config at {self.path}: {message}")

    @property
    def issue(self) -> ConfigValidationIssue:
        return ConfigValidationIssue(path=self.path, rule=self.rule, message=self.message)


class SchemaViolation(ConfigValidationError):
    """Unrecognized key at a closed level, or a duplicate keyed entry."""

    rule = "schema_violation"


class MissingRequiredField(ConfigValidationError):
    """Required field absent, null or empty."""

    rule = "missing_required_field"


class EmptyCollection(ConfigValidationError):
    """Collection holds fewer entries than the schema requires."""

    rule = "empty_collection"


class TypeMismatch(ConfigValidationError):
    """Runtime kind of a value disagrees with its declared kind."""

    rule = "type_mismatch"


__all__ = [
    "ROOT_PATH",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "EmptyCollection",
    "MissingRequiredField",
    "SchemaViolation",
    "TypeMismatch",
]
