"""
FastAPI main application for the Book Catalog API.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Awaitable, List, Optional, TypeVar

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import config as api_config
from api.models import ErrorResponse, HealthResponse
from bookstore.database import BookStore
from bookstore.errors import BookNotFoundError, BookStoreError, ErrorKind, StoreUnavailableError
from bookstore.models import Book, BookDraft, BookPatch
from utilities.config import config
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the book store for the lifetime of the application."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Book Catalog API")

    book_store = BookStore.from_config(config)
    try:
        await book_store.connect()
    except StoreUnavailableError:
        await book_store.disconnect()
        raise
    app.state.book_store = book_store

    yield

    logger.info("Shutting down Book Catalog API")
    await book_store.disconnect()


app = FastAPI(
    title=api_config.api_title,
    description=api_config.api_description,
    version=api_config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=api_config.cors_allow_credentials,
    allow_methods=api_config.cors_allow_methods,
    allow_headers=api_config.cors_allow_headers,
)


def get_book_store(request: Request) -> BookStore:
    """Dependency returning the store opened by the lifespan handler."""
    book_store = getattr(request.app.state, "book_store", None)
    if book_store is None:
        raise StoreUnavailableError("Book store is not initialized")
    return book_store


async def call_store(operation: str, awaitable: Awaitable[T]) -> T:
    """Await a store call, mapping a timeout to StoreUnavailableError."""
    try:
        return await asyncio.wait_for(awaitable, timeout=api_config.store_timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.error("Store call timed out",
                     operation=operation,
                     timeout_seconds=api_config.store_timeout_seconds)
        raise StoreUnavailableError(f"Store call '{operation}' timed out") from e


def _error_response(
    status_code: int,
    error: str,
    kind: Optional[ErrorKind] = None,
    detail: Optional[str] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            kind=kind,
            detail=detail,
            status_code=status_code
        ).model_dump(mode="json")
    )


# Exception handlers
@app.exception_handler(BookNotFoundError)
async def book_not_found_handler(request: Request, exc: BookNotFoundError):
    """Absent book ids become 404."""
    logger.warning("Book not found", book_id=exc.book_id, path=request.url.path)
    return _error_response(status.HTTP_404_NOT_FOUND, exc.message, kind=exc.kind)


@app.exception_handler(BookStoreError)
async def book_store_error_handler(request: Request, exc: BookStoreError):
    """Store failures become 500."""
    logger.error("Book store failure",
                 kind=exc.kind.value if exc.kind else None,
                 book_id=exc.book_id,
                 error=exc.message,
                 path=request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        kind=exc.kind,
        detail=exc.message if api_config.debug else None
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies."""
    logger.warning("Invalid request", path=request.url.path, errors=len(exc.errors()))
    return _error_response(
        422,
        "Invalid request body",
        kind=ErrorKind.VALIDATION,
        detail=str(exc.errors())
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        detail=str(exc) if api_config.debug else None
    )


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Report whether the database answers a ping."""
    db_status = "unavailable"
    book_store = getattr(request.app.state, "book_store", None)
    if book_store is not None:
        try:
            await call_store("ping", book_store.ping())
            db_status = "healthy"
        except BookStoreError as e:
            logger.error("Health check failed", error=str(e))
            db_status = "unhealthy"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=api_config.api_version,
        database_status=db_status
    )


# Books endpoints
@app.post("/api/books", response_model=Book, status_code=status.HTTP_201_CREATED, tags=["Books"])
async def create_book(draft: BookDraft, book_store: BookStore = Depends(get_book_store)):
    """
    Create a book. The id is assigned by the store.

    - **name**: Book title
    - **price**: Non-negative price
    - **category**: Book category
    - **author**: Book author
    """
    return await call_store("create_book", book_store.create_book(draft))


@app.get("/api/books", response_model=List[Book], tags=["Books"])
async def get_books(book_store: BookStore = Depends(get_book_store)):
    """List every book. An empty catalog returns an empty list."""
    return await call_store("get_books", book_store.get_books())


@app.get("/api/books/{book_id}", response_model=Book, tags=["Books"])
async def get_book(book_id: str, book_store: BookStore = Depends(get_book_store)):
    """Get a single book by id."""
    return await call_store("get_book", book_store.get_book(book_id))


@app.put("/api/books/{book_id}", response_model=Book, status_code=status.HTTP_202_ACCEPTED, tags=["Books"])
async def update_book(book_id: str, patch: BookPatch, book_store: BookStore = Depends(get_book_store)):
    """
    Update a book. Fields left out of the body keep their stored value.

    Returns 404 without writing anything when the book does not exist.
    """
    return await call_store("update_book", book_store.update_book(book_id, patch))


@app.delete("/api/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Books"])
async def delete_book(book_id: str, book_store: BookStore = Depends(get_book_store)):
    """Delete a book. Returns 404 without deleting anything when it does not exist."""
    await call_store("remove_book", book_store.remove_book(book_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        reload=api_config.debug,
        log_level="info"
    )
