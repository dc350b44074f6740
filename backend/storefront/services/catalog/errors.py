class CatalogStoreError(Exception):
    """Base class for product store failures surfaced to request handlers."""

    kind = "store_unavailable"


class StoreUnavailableError(CatalogStoreError):
    kind = "store_unavailable"


class StoreTimeoutError(CatalogStoreError):
    kind = "store_timeout"
