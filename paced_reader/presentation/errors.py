from __future__ import annotations


class PacedReaderError(Exception):
    """Base class for recoverable reader failures."""


class DocumentLoadError(PacedReaderError):
    """Source text could not be read. Not retried."""


class DefinitionLookupError(PacedReaderError):
    """The definition provider failed or returned nothing usable."""
