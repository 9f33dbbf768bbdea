"""
Domain exceptions raised by the storefront services.

The tracking path never lets these escape; the catalog and bundle paths raise
them to the caller, and the API layer maps them to HTTP status codes.
"""


class StorefrontError(Exception):
    """Base class for storefront domain errors."""


class DocumentNotFoundError(StorefrontError):
    """Raised when a partial update targets a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document {collection}/{doc_id} not found")


class SalesDataUnavailableError(StorefrontError):
    """Raised when the sales log cannot be fetched for bundle analysis."""


class ProductNotFoundError(StorefrontError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class ProductAlreadyExistsError(StorefrontError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} already exists")
