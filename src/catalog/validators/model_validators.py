from sqlalchemy import inspect as sa_inspect


def find_unknown_model_kwargs(model, kwargs: dict) -> list[str]:
    """
    Keys in `kwargs` that are not mapped attributes of `model` (a model class).
    """
    allowed = {attr.key for attr in sa_inspect(model).attrs}
    return [k for k in kwargs.keys() if k not in allowed]


def get_required_columns(model) -> list[str]:
    """
    Columns that are NOT NULL and have neither a client nor a server default.
    """
    cols = []
    for col in model.__table__.columns:
        has_default = col.default is not None or col.server_default is not None
        if not col.nullable and not has_default:
            cols.append(col.name)
    return cols


def find_missing_required(model, kwargs: dict) -> list[str]:
    """Required columns that are absent from `kwargs` or explicitly None."""
    return [c for c in get_required_columns(model) if kwargs.get(c) is None]
