"""Folio Library — composition root, catalog and checkout layer."""

from folio.library.catalog import Catalog
from folio.library.checkout import CheckoutManager, Lease
from folio.library.library import Library

__all__ = [
    "Catalog",
    "CheckoutManager",
    "Lease",
    "Library",
]
