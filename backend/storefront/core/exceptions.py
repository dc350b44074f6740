from fastapi import HTTPException, status

class CatalogQueryException(HTTPException):
    """Product store failed or timed out; distinct from an empty result."""

    def __init__(self, kind: str = "store_unavailable", message: str = "Catalog query failed"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"kind": kind, "message": message},
        )
