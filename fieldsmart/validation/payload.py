"""Payload validation: required fields, coercion and optional-reference normalization.

Operation schemas are pydantic models derived from ``Payload``. Validation is a
pure function from (raw body, schema) to a normalized patch: a dict holding only
the fields the caller actually supplied, keyed by model field name. Omitted fields
are absent from the patch; explicit ``null`` is present with ``None`` and is only
accepted for fields the schema declares clearable.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, ClassVar, TypeVar

import pydantic
from pydantic import AfterValidator, AliasChoices, BaseModel, BeforeValidator, ConfigDict, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

from fieldsmart.errors import MissingFieldError, ValidationError
from fieldsmart.models.mixins import as_utc

P = TypeVar("P", bound="Payload")

# Required strings: present and non-blank after trimming
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalStr = Annotated[str, StringConstraints(strip_whitespace=True)]


def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


# Enum values are matched case-insensitively
Upper = BeforeValidator(_upper)

# Timestamps are stored as UTC
Timestamp = Annotated[datetime, AfterValidator(as_utc)]
Money = Annotated[Decimal, pydantic.Field(ge=0, max_digits=12, decimal_places=2)]
Quantity = Annotated[Decimal, pydantic.Field(gt=0, max_digits=10, decimal_places=2)]
Percentage = Annotated[Decimal, pydantic.Field(ge=0, le=100, max_digits=5, decimal_places=2)]

WINDOW_MESSAGE = "scheduledEnd must not be before scheduledStart"


def check_window(start: datetime | None, end: datetime | None) -> None:
    """Raise ValueError when both ends are known and the end precedes the start."""
    if start is not None and end is not None and as_utc(end) < as_utc(start):
        raise ValueError(WINDOW_MESSAGE)


def ensure_window(start: datetime | None, end: datetime | None) -> None:
    """check_window for values merged with stored ones, raised as a ValidationError."""
    try:
        check_window(start, end)
    except ValueError as exc:
        raise ValidationError(str(exc)) from None


class Payload(BaseModel):
    """Base schema for request bodies.

    ``omit_blank`` names optional foreign keys (and similar optional fields such as
    email) whose blank strings are dropped before validation, so they never
    overwrite an existing relation.
    ``clearable`` names fields that may be explicitly set to null.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
        use_enum_values=True,
        validate_default=True,
    )

    omit_blank: ClassVar[frozenset[str]] = frozenset()
    clearable: ClassVar[frozenset[str]] = frozenset()

    def to_patch(self) -> dict[str, Any]:
        """Fields explicitly supplied, plus required fields and declared defaults."""
        fields = type(self).model_fields
        return {
            name: value
            for name, value in self.model_dump().items()
            if name in self.model_fields_set or fields[name].is_required() or fields[name].default is not None
        }


class PatchPayload(Payload):
    """Schema for partial updates: nothing is filled in from defaults."""

    @model_validator(mode="after")
    def _reject_null_on_uncleared(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.clearable:
                field = type(self).model_fields[name]
                raise ValueError(f"{field.alias or name} cannot be null")
        return self

    def to_patch(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def _omit_blank_keys(schema: type[Payload]) -> set[str]:
    keys = set()
    for name in schema.omit_blank:
        field = schema.model_fields[name]
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
        if isinstance(field.validation_alias, str):
            keys.add(field.validation_alias)
        elif isinstance(field.validation_alias, AliasChoices):
            keys.update(choice for choice in field.validation_alias.choices if isinstance(choice, str))
    return keys


def normalize_blank_references(raw: dict[str, Any], schema: type[Payload]) -> dict[str, Any]:
    """Trim optional reference ids and drop the blank ones."""
    data = dict(raw)
    for key in _omit_blank_keys(schema):
        if key not in data:
            continue
        value = data[key]
        if isinstance(value, str):
            value = value.strip()
            if not value:
                del data[key]
                continue
            data[key] = value
    return data


def _field_label(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "body"


def _is_missing(error: dict[str, Any]) -> bool:
    if not error["loc"]:
        return False
    if error["type"] == "missing" or error.get("input", "") is None:
        return True
    # Blank required strings count as missing; short non-blank ones do not
    value = error.get("input")
    return error["type"] == "string_too_short" and isinstance(value, str) and not value.strip()


def _translate(exc: pydantic.ValidationError) -> ValidationError:
    missing: list[str] = []
    invalid: list[str] = []
    for error in exc.errors():
        label = _field_label(error["loc"])
        if _is_missing(error):
            if label not in missing:
                missing.append(label)
        else:
            message = error["msg"]
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            invalid.append(f"{label}: {message}" if error["loc"] else message)
    if missing:
        return MissingFieldError(missing)
    return ValidationError("Invalid fields: " + "; ".join(invalid))


def validate_payload(raw: Any, schema: type[P]) -> P:
    """Validate a raw JSON body against an operation schema."""
    if not isinstance(raw, dict):
        raise ValidationError("Request body must be a JSON object")
    data = normalize_blank_references(raw, schema)
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as exc:
        raise _translate(exc) from None


def validate_patch(raw: Any, schema: type[Payload]) -> dict[str, Any]:
    """Validate and return the normalized patch dict."""
    return validate_payload(raw, schema).to_patch()
