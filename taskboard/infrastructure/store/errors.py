"""Errors raised by document store backends."""


class DuplicateKeyError(Exception):
    """Raised when a write would duplicate a value of a unique field."""

    def __init__(self, collection: str, field: str, value: object) -> None:
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for unique field {collection}.{field}: {value!r}")
