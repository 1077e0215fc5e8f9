class CatalogQueryError(Exception):
    """A store query failed while serving a request.

    ``expose_details`` decides whether the underlying message is sent back
    to the client in the 500 body.
    """
    expose_details = False

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause

    @property
    def details(self) -> str:
        return str(self.cause) if self.cause is not None else str(self)


class ProductQueryError(CatalogQueryError):
    """Listing products failed. The cause is reported to the caller."""
    expose_details = True


class FacetQueryError(CatalogQueryError):
    """Listing distinct brands or categories failed."""
