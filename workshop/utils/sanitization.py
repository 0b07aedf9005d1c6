import html
from typing import Any, Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Escape HTML special characters so user text can be placed in an email body.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(value, quote=True)


def sanitize_dict(data: dict[str, Any], fields: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Escape string values of a template context.

    Args:
        data: Template context
        fields: Keys to escape. If None, every string value is escaped.

    Returns:
        New dictionary with escaped values
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if (fields is None or key in fields) and isinstance(value, str):
            sanitized[key] = sanitize_string(value)
        else:
            sanitized[key] = value
    return sanitized
