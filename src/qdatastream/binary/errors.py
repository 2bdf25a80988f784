from __future__ import annotations


class DecodeError(ValueError):
    """Base decode failure; carries the dotted field path and byte offset."""

    def __init__(self, message: str, *, field_path: str | None = None, offset: int | None = None):
        self.message = message
        self.field_path = field_path
        self.offset = offset
        super().__init__(message)

    def annotate(self, field_path: str, offset: int | None = None) -> "DecodeError":
        # innermost path wins
        if self.field_path is None:
            self.field_path = field_path
        if self.offset is None:
            self.offset = offset
        return self

    def __str__(self) -> str:
        where = []
        if self.field_path:
            where.append(f"field {self.field_path!r}")
        if self.offset is not None:
            where.append(f"offset {self.offset}")
        return f"{self.message} ({', '.join(where)})" if where else self.message


class OutOfBounds(DecodeError):
    pass


class MissingSizeSource(DecodeError):
    pass


class InvalidSizeReference(DecodeError):
    pass


class UnsupportedType(DecodeError):
    pass


class SchemaError(DecodeError):
    pass


class BspFormatError(DecodeError):
    pass


class EncodeError(ValueError):
    pass
