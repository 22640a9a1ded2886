"""
Friendly validation messages.

The designer shows a short reason plus a hint on how to fix it.
"""

from label_designer.models.fields import BaseField


class FriendlyError:
    """Human-readable error with a hint."""

    def __init__(self, message: str, hint: str | None = None, field_id: str | None = None):
        self.message = message
        self.hint = hint
        self.field_id = field_id  # Field the user should look at

    def to_dict(self) -> dict:
        result = {"message": self.message}
        if self.hint:
            result["hint"] = self.hint
        if self.field_id:
            result["field_id"] = self.field_id
        return result

    def __repr__(self) -> str:
        return f"FriendlyError({self.message!r})"


# === Template-level errors ===

NO_ENABLED_FIELDS = FriendlyError(
    message="template must contain at least one enabled field",
    hint="Add a field from the library or enable one of the hidden fields",
)


# === Field-level errors ===


def required_field_unresolved(field: BaseField) -> FriendlyError:
    """Required field without a sample/default value."""
    return FriendlyError(
        message=f"required field '{field.label}' ({field.id}) has no default or sample value",
        hint="Bind the field to a shipment attribute or make it optional",
        field_id=field.id,
    )


def missing_code_payload(field: BaseField) -> FriendlyError:
    """Barcode/QR field without its format settings."""
    kind = "barcode" if field.type == "barcode" else "QR code"  # type: ignore[attr-defined]
    return FriendlyError(
        message=f"{kind} field '{field.label}' ({field.id}) is missing its {kind} settings",
        hint="Open the field properties and choose the format",
        field_id=field.id,
    )
