"""Common type aliases for the codebase."""

from __future__ import annotations

from pydantic import JsonValue

type JSONValue = JsonValue
"""Type alias for JSON values."""

type JSONArray = list[JSONValue]
"""Type alias for JSON arrays."""

type SQLScalar = str | int
"""Values that may be bound to a query parameter."""
