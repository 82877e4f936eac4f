"""
Data access layer for the book catalog.

Maps Book entities to MongoDB documents and exposes the CRUD operations
used by the HTTP handlers.
"""
