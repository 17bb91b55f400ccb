"""Domain enumerations for the taskboard application."""

from enum import Enum


class FieldType(str, Enum):
    """Stored value type of an entity field.

    Used to validate and coerce values coming from where filters.
    """

    ID = "id"
    STRING = "string"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    ID_LIST = "id_list"
