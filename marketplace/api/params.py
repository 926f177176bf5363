from marketplace.domain.exceptions import ValidationFailed


def query_int(request, name: str, default=None):
    """Read an integer query parameter, raising ValidationFailed for garbage."""
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationFailed(f"Query parameter '{name}' must be an integer", details={name: raw})
