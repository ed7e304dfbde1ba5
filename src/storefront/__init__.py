"""Storefront accounts backend.

Customer and seller accounts for the storefront: registration, login,
profile management, and the request guards that authenticate principals
and gate admin routes by role.
"""

__version__ = "0.1.0"
