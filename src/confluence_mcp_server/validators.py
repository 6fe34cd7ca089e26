"""
Input validation for tool arguments.

The MCP server validates arguments against each tool's JSON schema before a
handler runs. These helpers repeat the checks that matter inside the
handlers so a direct ``ToolRegistry.call_tool`` is rejected before any
network call as well.
"""

from typing import Any


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Argument name as it appears in the tool schema
        reason: Description of validation failure (e.g., "is required")
    """
    return f"{field_name} {reason}"


def require_string(
    args: dict, field_name: str, allow_empty: bool = False
) -> str:
    """Return a required string argument, non-blank unless ``allow_empty``.

    Raises:
        ValueError: If the argument is missing, not a string, or blank
    """
    value = args.get(field_name)
    if value is None:
        raise ValueError(format_validation_error(field_name, "is required"))
    if not isinstance(value, str):
        raise ValueError(
            format_validation_error(
                field_name, f"must be a string, got {type(value).__name__}"
            )
        )
    if not allow_empty and not value.strip():
        raise ValueError(format_validation_error(field_name, "cannot be empty"))
    return value


def optional_string(args: dict, field_name: str) -> str | None:
    """Return an optional string argument; blank strings count as omitted."""
    value = args.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(
            format_validation_error(
                field_name, f"must be a string, got {type(value).__name__}"
            )
        )
    return value or None


def bounded_int(
    args: dict,
    field_name: str,
    default: int | None,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int | None:
    """Return an integer argument, applying its default and range.

    Raises:
        ValueError: If the value is not an integer or falls outside the range
    """
    value: Any = args.get(field_name)
    if value is None:
        return default
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(format_validation_error(field_name, "must be an integer"))
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(
                format_validation_error(field_name, "must be an integer")
            )
        value = int(value)
    if minimum is not None and value < minimum:
        raise ValueError(
            format_validation_error(field_name, f"must be at least {minimum}")
        )
    if maximum is not None and value > maximum:
        raise ValueError(
            format_validation_error(field_name, f"must be at most {maximum}")
        )
    return value


def one_of(args: dict, field_name: str, choices: tuple[str, ...]) -> str | None:
    """Return an optional enumerated argument.

    Raises:
        ValueError: If the value is not one of ``choices``
    """
    value = args.get(field_name)
    if value is None:
        return None
    if value not in choices:
        raise ValueError(
            format_validation_error(
                field_name, f"must be one of: {', '.join(choices)}"
            )
        )
    return value


def string_list(
    args: dict, field_name: str, default: list[str]
) -> list[str]:
    """Return an optional list-of-strings argument, or ``default``."""
    value = args.get(field_name)
    if value is None:
        return list(default)
    if not isinstance(value, list) or not all(
        isinstance(item, str) for item in value
    ):
        raise ValueError(
            format_validation_error(field_name, "must be a list of strings")
        )
    return value
