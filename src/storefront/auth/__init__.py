"""Authentication and authorization.

Two principal types authenticate independently:
1. Customers → `token` cookie or Bearer header → User
2. Sellers → `seller_token` cookie or Bearer header → Shop

Both resolve to a Principal; role gates run on top of the customer guard.
"""
