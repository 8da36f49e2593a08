"""Async storefront: catalog, cart, campaigns, checkout and reporting"""

__version__ = "0.1.0"
