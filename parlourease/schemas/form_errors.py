"""Flatten pydantic validation errors into per-field form messages."""

from pydantic import ValidationError

_VALUE_ERROR_PREFIX = "Value error, "


def field_errors(exc: ValidationError) -> dict[str, str]:
    """Map each invalid field to its first error message.

    Examples:
        >>> from parlourease.schemas.booking_schema import PaymentRequest
        >>> try:
        ...     PaymentRequest(amount=0, method="Cash")
        ... except ValidationError as exc:
        ...     sorted(field_errors(exc))
        ['amount']
    """
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("__root__",)
        field_name = str(loc[0])
        message = error.get("msg", "Invalid value")
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        errors.setdefault(field_name, message)
    return errors
