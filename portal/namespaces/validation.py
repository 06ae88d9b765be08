"""Input validation helpers applied before any catalog call."""

from __future__ import annotations

import re
from typing import Final

from portal.domain import NamespaceValidationError

NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"[0-9a-zA-Z_.-]+")
FORMAT_SUFFIX_PATTERN: Final[re.Pattern[str]] = re.compile(r"\.(json|yml|yaml|xml|properties)$", re.IGNORECASE)
INVALID_NAME_MESSAGE: Final[str] = "only letters, digits, '_', '-' and '.' are allowed"


def validation_require_text(value: str | None, field_name: str) -> str:
    """Return a stripped non-blank value.

    Args:
        value: Raw input value.
        field_name: Field name used in the error message.

    Returns:
        str: Stripped value.

    Raises:
        NamespaceValidationError: Raised when the value is missing or blank.
    """

    normalized_value = (value or "").strip()
    if not normalized_value:
        raise NamespaceValidationError(f"{field_name} must not be blank")
    return normalized_value


def validation_require_name(value: str | None, field_name: str) -> str:
    """Return a stripped cluster or namespace name after format checks.

    Args:
        value: Raw name.
        field_name: Field name used in the error message.

    Returns:
        str: Stripped name.

    Raises:
        NamespaceValidationError: Raised when the name is blank or malformed.
    """

    normalized_value = validation_require_text(value, field_name)
    if NAME_PATTERN.fullmatch(normalized_value) is None:
        raise NamespaceValidationError(
            f"invalid {field_name}={normalized_value}: {INVALID_NAME_MESSAGE}",
            error_code="INVALID_NAME_FORMAT",
        )
    return normalized_value


def validation_require_app_namespace_name(value: str | None) -> str:
    """Validate the base name of a new declaration.

    The format suffix is derived from the declared format, so a base name
    must not already carry one.

    Args:
        value: Raw declaration name.

    Returns:
        str: Stripped name.

    Raises:
        NamespaceValidationError: Raised when the name is blank, malformed or suffixed.
    """

    normalized_value = validation_require_text(value, "name")
    if NAME_PATTERN.fullmatch(normalized_value) is None or FORMAT_SUFFIX_PATTERN.search(normalized_value):
        raise NamespaceValidationError(
            f"invalid name={normalized_value}: {INVALID_NAME_MESSAGE} and a format suffix is not allowed",
            error_code="INVALID_NAME_FORMAT",
        )
    return normalized_value
