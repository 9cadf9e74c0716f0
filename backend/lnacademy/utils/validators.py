def sanitize_input(value: str) -> str:
    """
    Escape angle brackets in user-supplied credentials.

    A minimal mitigation only; output encoding is still the caller's job.
    """
    if not value or not value.strip():
        return value
    return value.replace("<", "&lt;").replace(">", "&gt;")
