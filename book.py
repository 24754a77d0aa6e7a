from __future__ import annotations

from typing import Any


class Book:
    """A single book record held in the store document."""

    def __init__(self, id: str, title: str | None = None, author: str | None = None,
                 extra: dict[str, Any] | None = None) -> None:
        self.id = id
        self.title = title
        self.author = author
        # Fields merged in through updates beyond the core three
        self.extra = dict(extra or {})

    def __str__(self) -> str:
        return f"{self.title} by {self.author} (ID: {self.id})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        data = {"id": self.id, "title": self.title, "author": self.author}
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @staticmethod
    def from_dict(data: dict) -> "Book":
        extra = {k: v for k, v in data.items() if k not in ("id", "title", "author")}
        return Book(
            id=data["id"],
            title=data.get("title"),
            author=data.get("author"),
            extra=extra,
        )
