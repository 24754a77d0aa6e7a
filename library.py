import logging
import secrets
import string
from enum import Enum
from typing import Any, Dict, List, Optional

from book import Book
from database import JsonStore

logger = logging.getLogger(__name__)

# URL-safe alphabet for generated ids
ID_ALPHABET = string.ascii_letters + string.digits + "_-"
DEFAULT_ID_LENGTH = 8


def generate_book_id(length: int = DEFAULT_ID_LENGTH) -> str:
    """Random fixed-length token. Collisions are not checked."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class BookError(Exception):
    """Typed failure surfaced to API clients."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class Library:
    """Manages the book collection on top of the JSON store."""

    def __init__(self, data_file: str, id_length: int = DEFAULT_ID_LENGTH) -> None:
        self.id_length = id_length
        self.store = JsonStore(data_file).load()

    # ------------------------- Core operations ------------------------- #
    def list_books(self) -> List[Book]:
        return [Book.from_dict(record) for record in self.store.books()]

    def find_book(self, book_id: str) -> Optional[Book]:
        record = self.store.find(book_id)
        return Book.from_dict(record) if record is not None else None

    def add_book(self, title: Optional[str] = None, author: Optional[str] = None) -> Book:
        """Create a book with a fresh id. Missing title/author are stored as null."""
        book = Book(id=generate_book_id(self.id_length), title=title, author=author)
        self.store.append(book.to_dict())
        logger.info(f"Book created: id={book.id}")
        return book

    def update_book(self, book_id: str, fields: Dict[str, Any]) -> Optional[Book]:
        """Shallow-merge fields into the book. Returns None if the id is unknown."""
        if not isinstance(fields, dict):
            raise BookError(ErrorKind.VALIDATION, "Update body must be a JSON object.")
        for name in ("title", "author"):
            value = fields.get(name)
            if value is not None and not isinstance(value, str):
                raise BookError(ErrorKind.VALIDATION, f"{name} must be a string or null.")
        # ids are immutable
        changes = {k: v for k, v in fields.items() if k != "id"}
        record = self.store.merge(book_id, changes)
        if record is None:
            logger.info(f"Update skipped, no book with id={book_id}")
            return None
        return Book.from_dict(record)

    def remove_book(self, book_id: str) -> bool:
        removed = self.store.remove(book_id)
        if not removed:
            logger.info(f"Delete skipped, no book with id={book_id}")
        return removed

    def count(self) -> int:
        return len(self.store.books())
