"""Request body schemas (pydantic) and the helper that turns them into API errors."""

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from outleads.utils.error_handling import ValidationError


class RequestSchema(BaseModel):
    """Base for request bodies: camelCase aliases, snake_case attributes."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra='ignore')


def first_error_message(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    location = '.'.join(str(part) for part in error.get('loc', ()))
    message = error.get('msg', 'Invalid value')
    return f"{location}: {message}" if location else message


def validate_payload(schema_cls, payload, partial=False) -> dict:
    """Validate a JSON body and return the accepted fields keyed by attribute name.

    With partial=True only the fields present in the payload are returned,
    which is what update endpoints apply.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        parsed = schema_cls.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(first_error_message(exc)) from exc
    return parsed.model_dump(exclude_unset=partial)
