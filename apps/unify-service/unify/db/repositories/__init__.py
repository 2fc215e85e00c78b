"""
Per-domain repository modules for database access.

Each module exposes plain functions taking a ``Session`` first; services
compose them and own the transaction boundaries where several writes must
land together.
"""
