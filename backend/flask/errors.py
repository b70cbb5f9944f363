"""Error kinds surfaced by the catalog core."""


class CatalogError(Exception):
    """Base class for every error the catalog core raises."""


class InvalidInput(CatalogError):
    """A required query parameter was blank, missing or out of range."""


class NotFound(CatalogError):
    """An identifier did not resolve in the store."""


class StoreUnavailable(CatalogError):
    """The storage or subscription collaborator failed or timed out."""
