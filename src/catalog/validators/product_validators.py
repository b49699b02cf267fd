"""
Validation entry points for product input.

`validate(schema, data)` runs a pydantic schema over raw input (a JSON body or
a query-string mapping) and returns a discriminated result: `Valid` holding the
coerced, defaulted DTO, or `Invalid` holding every violated rule as a
`FieldError`. `validate_or_raise` is the same call for code paths that prefer
an exception (`ValidationError`, rendered as HTTP 422).

Pydantic's default messages are replaced with client-facing wording per field
and error type; anything without a dedicated message keeps pydantic's text.
"""
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Generic, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from catalog.constants import SearchSortField, SortField, field_label
from catalog.exceptions.base import ValidationError
from catalog.schemas.product import ProductId

SchemaT = TypeVar("SchemaT", bound=BaseModel)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Valid(Generic[SchemaT]):
    value: SchemaT
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Invalid:
    errors: list[FieldError]
    ok: bool = field(default=False, init=False)


ValidationResult = Valid[SchemaT] | Invalid


# (field, pydantic error type) -> message; "*" matches any field
_MESSAGES: dict[tuple[str, str], str] = {
    ("*", "missing"): "{label} is required",
    ("*", "string_type"): "{label} must be a string",
    ("*", "string_too_short"): "{label} must be at least {min_length} character(s) long",
    ("*", "string_too_long"): "{label} cannot exceed {max_length} characters",
    ("*", "string_pattern_mismatch"): "{label} contains invalid characters",
    ("*", "int_parsing"): "{label} must be a valid number",
    ("*", "int_type"): "{label} must be a valid number",
    ("*", "int_from_float"): "{label} must be a whole number",
    ("*", "decimal_parsing"): "{label} must be a valid number",
    ("*", "decimal_type"): "{label} must be a valid number",
    ("*", "decimal_max_places"): "{label} can have at most 2 decimal places",
    ("*", "greater_than_equal"): "{label} cannot be less than {ge}",
    ("*", "less_than_equal"): "{label} cannot exceed {le}",
    ("*", "bool_parsing"): "{label} must be true or false",
    ("*", "bool_type"): "{label} must be true or false",
    ("*", "extra_forbidden"): "Unknown field: {field} is not allowed",
    ("price", "greater_than"): "Price must be greater than 0",
    ("price", "less_than_equal"): "Price cannot exceed $999,999.99",
    ("min_price", "greater_than_equal"): "Minimum price cannot be negative",
    ("max_price", "greater_than_equal"): "Maximum price cannot be negative",
    ("stock_quantity", "greater_than_equal"): "Stock quantity cannot be negative",
    ("review_count", "greater_than_equal"): "Review count cannot be negative",
    ("page", "greater_than_equal"): "Page must be at least 1",
    ("limit", "greater_than_equal"): "Limit must be at least 1",
    ("count", "greater_than_equal"): "Count must be at least 1",
    ("sku", "string_pattern_mismatch"): "SKU must contain only uppercase letters, numbers, hyphens, and underscores",
    ("sort_by", "enum"): "Sort field must be one of: {choices}",
    ("sort_order", "enum"): "Sort order must be either ASC or DESC",
    ("id", "uuid_parsing"): "Product ID must be a valid UUID",
    ("id", "uuid_type"): "Product ID must be a valid UUID",
}


def _field_name(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) if loc else "body"


def _message_for(error: dict[str, Any], schema: type[BaseModel]) -> str:
    loc = error.get("loc") or ()
    name = str(loc[-1]) if loc else "body"
    err_type = error["type"]
    ctx = error.get("ctx") or {}

    if err_type == "value_error" and "error" in ctx:
        return str(ctx["error"])

    template = _MESSAGES.get((name, err_type)) or _MESSAGES.get(("*", err_type))
    if template is None:
        return error["msg"]

    choices = SearchSortField if "q" in schema.model_fields else SortField
    values = {
        "label": field_label(name),
        "field": name,
        "choices": ", ".join(c.value for c in choices),
        **{k: str(v) if isinstance(v, Decimal) else v for k, v in ctx.items() if isinstance(v, (int, float, str, Decimal))},
    }
    try:
        return template.format(**values)
    except (KeyError, IndexError):
        return error["msg"]


def to_field_errors(exc: PydanticValidationError, schema: type[BaseModel]) -> list[FieldError]:
    return [
        FieldError(
            field=_field_name(err.get("loc") or ()),
            message=_message_for(err, schema),
            value=err.get("input") if err["type"] != "missing" else None,
        )
        for err in exc.errors(include_url=False)
    ]


def validate(
    schema: type[SchemaT],
    data: Mapping[str, Any] | None,
    *,
    context: Mapping[str, Any] | None = None,
) -> ValidationResult:
    """
    Validate `data` against `schema`; never raises for invalid input.

    Usage:
        result = validate(ProductCreate, payload)
        if not result.ok:
            return result.errors
        product = result.value
    """
    try:
        return Valid(schema.model_validate(dict(data or {}), context=dict(context or {})))
    except PydanticValidationError as exc:
        return Invalid(to_field_errors(exc, schema))


def validate_or_raise(
    schema: type[SchemaT],
    data: Mapping[str, Any] | None,
    *,
    context: Mapping[str, Any] | None = None,
) -> SchemaT:
    result = validate(schema, data, context=context)
    if isinstance(result, Invalid):
        raise ValidationError(
            "Validation failed",
            errors=[_json_safe(e.to_dict()) for e in result.errors],
            metadata={"schema": schema.__name__, "fields": [e.field for e in result.errors]},
        )
    return result.value


def validate_product_id(value: Any):
    """Parse a path identifier into a UUID or raise ValidationError."""
    return validate_or_raise(ProductId, {"id": value}).id


def _json_safe(error: dict[str, Any]) -> dict[str, Any]:
    value = error.get("value")
    if value is not None and not isinstance(value, (str, int, float, bool, list, dict)):
        error["value"] = str(value)
    return error
