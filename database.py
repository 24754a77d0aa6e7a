import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

BOOKS_KEY = "books"


class JsonStore:
    """File-backed JSON document holding the book collection.

    The whole document lives in memory; every mutation rewrites the file
    before returning. There is no locking: concurrent writers race and the
    last flush wins.
    """

    def __init__(self, path: str) -> None:
        self.path = Path(path)
        self.document: Dict[str, Any] = {}

    # ------------------------- Lifecycle ------------------------- #
    def load(self) -> "JsonStore":
        """Read the backing document, creating the books collection if absent.

        Malformed or unreadable files raise; the caller is expected to abort.
        """
        if self.path.exists():
            with self.path.open("r", encoding="utf-8") as f:
                self.document = json.load(f)
            logger.info(f"Loaded store document from {self.path}")
        else:
            self.document = {}
            logger.info(f"Creating store document at {self.path}")

        if not isinstance(self.document, dict):
            raise ValueError(f"Store document in {self.path} is not a JSON object")

        if BOOKS_KEY not in self.document:
            self.document[BOOKS_KEY] = []
            self.flush()
        return self

    def flush(self) -> None:
        """Write the full in-memory document back to the backing file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.document, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.debug(f"Flushed {len(self.books())} books to {self.path}")

    # ------------------------- Queries ------------------------- #
    def books(self) -> List[Dict[str, Any]]:
        return self.document[BOOKS_KEY]

    def find(self, book_id: str) -> Optional[Dict[str, Any]]:
        for record in self.books():
            if record.get("id") == book_id:
                return record
        return None

    # ------------------------- Mutations ------------------------- #
    def append(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.books().append(record)
        self.flush()
        return record

    def merge(self, book_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Shallow-merge fields into the first record with this id.

        Returns the updated record, or None if nothing matched (no flush then).
        """
        record = self.find(book_id)
        if record is None:
            return None
        record.update(fields)
        self.flush()
        return record

    def remove(self, book_id: str) -> bool:
        """Remove the first record with this id. A miss is a no-op."""
        books = self.books()
        for index, record in enumerate(books):
            if record.get("id") == book_id:
                del books[index]
                self.flush()
                return True
        return False
