"""
FastAPI application for the book catalog.

Thin HTTP handlers over the book store:
- Create, read, update and delete books
- Translation of store outcomes to HTTP status codes
- Health reporting for the database connection
"""
