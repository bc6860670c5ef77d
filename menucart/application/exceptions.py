class StorageError(RuntimeError):
    """Raised by key-value adapters when the underlying medium fails (I/O, database errors)."""
    pass


class CartPersistenceCorrupt(ValueError):
    """Raised when a persisted cart value is not a mapping of id to positive quantity."""
    pass


class CartPersistenceError(RuntimeError):
    """Raised when a cart mutation could not be written to storage."""
    pass


class CatalogFetchError(RuntimeError):
    """Raised when a catalog load did not complete (timeouts, network errors, HTTP errors)."""
    pass


class CatalogContractError(CatalogFetchError):
    """Raised when the catalog backend answers with data of the wrong shape."""
    pass
