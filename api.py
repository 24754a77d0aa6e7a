import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from config import Settings, settings
from library import BookError, ErrorKind, Library

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# --- Models ---
class BookModel(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={"example": {"id": "5d_12s", "title": "Make it happen", "author": "John Doe"}},
    )

    id: str = Field(description="The auto-generated id.")
    title: str | None = Field(default=None, description="Title of the book")
    author: str | None = Field(default=None, description="The author of the book")


class BookCreateModel(BaseModel):
    title: str | None = Field(default=None, description="Title of the book")
    author: str | None = Field(default=None, description="The author of the book")


class BookEnvelope(BaseModel):
    book: BookModel


class MessageModel(BaseModel):
    message: str


class ErrorDetail(BaseModel):
    kind: ErrorKind
    message: str


class ErrorModel(BaseModel):
    error: ErrorDetail


ERROR_RESPONSES = {406: {"model": ErrorModel, "description": "The received data is unacceptable"}}


# --- Dependencies ---
def get_library(request: Request) -> Library:
    """The Library owned by the running app."""
    return request.app.state.library


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# --- Error helpers ---
def _error_response(error: BookError) -> JSONResponse:
    status_code = 404 if error.kind is ErrorKind.NOT_FOUND else 406
    return JSONResponse(status_code=status_code, content={"error": error.to_dict()})


def _fault_response(exc: Exception) -> JSONResponse:
    """Map any fault raised inside a handler to a typed 406 response."""
    if isinstance(exc, BookError):
        return _error_response(exc)
    logger.exception("Unexpected error while handling book request")
    return _error_response(BookError(ErrorKind.INTERNAL, str(exc) or exc.__class__.__name__))


def _not_found(book_id: str) -> JSONResponse:
    return _error_response(BookError(ErrorKind.NOT_FOUND, f"Book {book_id} not found."))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    logger.info(f"Rejected {request.method} {request.url.path}: {details}")
    return _error_response(BookError(ErrorKind.VALIDATION, details or "Invalid request."))


# --- Book routes ---
router = APIRouter(prefix="/books", tags=["Books"])


@router.get("", response_model=List[BookModel], summary="Returns all registered books")
def list_books(library: Library = Depends(get_library)):
    return [b.to_dict() for b in library.list_books()]


@router.get(
    "/{book_id}",
    response_model=BookModel,
    summary="Returns the book by id",
    responses={200: {"description": "The book, or an empty body when the id is unknown"}, **ERROR_RESPONSES},
)
def get_book(
    book_id: str,
    library: Library = Depends(get_library),
    config: Settings = Depends(get_settings),
):
    try:
        book = library.find_book(book_id)
    except Exception as exc:
        return _fault_response(exc)
    if book is None:
        if config.strict_not_found:
            return _not_found(book_id)
        return Response(status_code=200)
    return book.to_dict()


@router.post("", response_model=BookEnvelope, summary="Create a new book", responses=ERROR_RESPONSES)
def create_book(payload: Optional[BookCreateModel] = None, library: Library = Depends(get_library)):
    """No required-field check: a missing title or author is stored as null."""
    try:
        payload = payload or BookCreateModel()
        book = library.add_book(title=payload.title, author=payload.author)
        return {"book": book.to_dict()}
    except Exception as exc:
        return _fault_response(exc)


@router.put(
    "/{book_id}",
    response_model=Dict[str, BookModel],
    summary="Update the book by id",
    responses=ERROR_RESPONSES,
)
def update_book(
    book_id: str,
    fields: Optional[Dict[str, Any]] = Body(default=None),
    library: Library = Depends(get_library),
    config: Settings = Depends(get_settings),
):
    """Shallow-merge the body into the book. An unknown id answers `{}`."""
    try:
        book = library.update_book(book_id, fields or {})
    except Exception as exc:
        return _fault_response(exc)
    if book is None:
        if config.strict_not_found:
            return _not_found(book_id)
        return {}
    return {book_id: book.to_dict()}


@router.delete(
    "/{book_id}",
    status_code=203,
    response_model=MessageModel,
    summary="Delete a book",
    responses=ERROR_RESPONSES,
)
def delete_book(
    book_id: str,
    library: Library = Depends(get_library),
    config: Settings = Depends(get_settings),
):
    try:
        removed = library.remove_book(book_id)
    except Exception as exc:
        return _fault_response(exc)
    if not removed and config.strict_not_found:
        return _not_found(book_id)
    return {"message": "Successful"}


# --- Application factory ---
def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or settings
    configure_logging(config.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A malformed data file aborts startup.
        app.state.library = Library(config.data_file, id_length=config.book_id_length)
        logger.info(f"App is running on {config.api_port}.")
        yield

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        debug=config.debug,
        docs_url=config.docs_url,
        openapi_url=f"{config.docs_url}/openapi.json",
        servers=[{"url": f"http://localhost:{config.api_port}"}],
        openapi_tags=[{"name": "Books", "description": "Manages all APIs that are related to books"}],
        lifespan=lifespan,
    )
    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.3f} ms")
        return response

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        return response

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/health")
    def health(library: Library = Depends(get_library)):
        """Lightweight health endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "total_books": library.count(),
        }

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
