# Utilities package
from .dates import as_utc

__all__ = [
    "as_utc",
]
