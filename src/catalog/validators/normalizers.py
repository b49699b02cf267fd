def to_uppercase(value: str | None) -> str | None:
    """
    Upper-case a string value, passing None and non-strings through untouched.
    """
    if not isinstance(value, str):
        return value
    return value.upper()


def to_lowercase(value: str | None) -> str | None:
    """
    Lower-case a string value, passing None and non-strings through untouched.
    """
    if not isinstance(value, str):
        return value
    return value.lower()


def blank_to_none(value):
    """
    Treat empty or whitespace-only strings as "not provided".

    Query strings like ``?category=`` arrive as empty strings; filters should
    behave as if the key was absent.
    """
    if isinstance(value, str) and not value.strip():
        return None
    return value


def split_csv(value):
    """Split a comma separated env value into a list of trimmed items."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value
