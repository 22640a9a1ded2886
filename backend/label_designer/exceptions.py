"""
Exceptions raised by the label designer.
"""


class LabelDesignerError(Exception):
    """Base error of the label designer."""


class EncodingError(LabelDesignerError):
    """A barcode/QR symbology rejected its input."""

    def __init__(self, symbology: str, data: str, reason: str):
        self.symbology = symbology
        self.data = data
        self.reason = reason
        super().__init__(f"Cannot encode {data!r} as {symbology}: {reason}")


class ValidationError(LabelDesignerError):
    """The template is not fit to be saved."""

    def __init__(self, reasons: list[str]):
        if not reasons:
            raise ValueError("ValidationError requires at least one reason")
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons))


class FieldUpdateError(LabelDesignerError, ValueError):
    """A field construction or update was rejected at the model boundary."""


class FieldNotFoundError(LabelDesignerError, KeyError):
    """No field with the given id exists in the template."""

    def __init__(self, field_id: str):
        self.field_id = field_id
        super().__init__(field_id)

    def __str__(self) -> str:
        return f"Field {self.field_id!r} not found"


class PersistenceError(LabelDesignerError):
    """Raised by template repositories; passed through to the caller unchanged."""
