"""Custom exceptions for content-tree."""


class ContentTreeError(Exception):
    """Base exception for content tree operations."""


class SchemaResolutionError(ContentTreeError):
    """Data structure identifier is unknown or the data structure is malformed."""


class MappingConfigurationError(ContentTreeError):
    """Layout mapping configuration is malformed or cannot be resolved."""


class StoredDataParseError(ContentTreeError):
    """Stored flexform payload cannot be parsed."""


class MissingRecordError(ContentTreeError):
    """Referenced record is deleted or otherwise unavailable."""


class InvalidPointerError(ContentTreeError, ValueError):
    """Pointer string is not in canonical form."""


class RecursionLimitExceeded(ContentTreeError):
    """Tree build went deeper or visited more records than allowed."""
