"""
Request helpers - shared parsing for action-dispatch route handlers.
"""


class BadRequest(Exception):
    """The request body is missing fields or carries unusable values."""


def require_fields(data, *names):
    """Return the named values, raising BadRequest listing any that are missing or empty."""
    missing = [name for name in names if data.get(name) in (None, "")]
    if missing:
        raise BadRequest(f"Missing required fields: {', '.join(missing)}")
    return [data[name] for name in names]


def parse_page(value, default=1):
    """Parse a 1-based page number from a JSON body value."""
    if value in (None, ""):
        return default
    if isinstance(value, bool):
        raise BadRequest("page must be a positive integer")
    try:
        page = int(value)
    except (TypeError, ValueError):
        raise BadRequest("page must be a positive integer")
    if page < 1:
        raise BadRequest("page must be a positive integer")
    return page


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)
