"""Schema format constants for the value bridge.

These constants prevent stringly-typed format checks when deciding how a
JSON string at a schema node is converted into a CEL value.
"""

from enum import Enum


class SchemaFormat(str, Enum):
    """Schema ``format`` values that change value conversion."""

    DATE_TIME = "date-time"
    DURATION = "duration"
