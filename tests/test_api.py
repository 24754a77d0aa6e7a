import json

from fastapi.testclient import TestClient

from api import create_app
from config import Settings
from library import Library


def create(client, **payload):
    response = client.post("/books", json=payload)
    assert response.status_code == 200
    return response.json()["book"]


def test_get_books_empty(client):
    response = client.get("/books")
    assert response.status_code == 200
    assert response.json() == []


def test_create_book(client):
    response = client.post("/books", json={"title": "Make it happen", "author": "John Doe"})
    assert response.status_code == 200
    book = response.json()["book"]
    assert len(book["id"]) == 8
    assert book["title"] == "Make it happen"
    assert book["author"] == "John Doe"

    assert client.get("/books").json() == [book]


def test_create_book_without_author_is_accepted(client):
    book = create(client, title="Untitled draft")

    assert book["author"] is None
    assert client.get(f"/books/{book['id']}").json()["author"] is None


def test_create_book_without_body(client):
    response = client.post("/books")
    assert response.status_code == 200
    book = response.json()["book"]
    assert book["title"] is None and book["author"] is None


def test_create_book_malformed_json_is_406(client):
    response = client.post(
        "/books", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 406
    assert response.json()["error"]["kind"] == "validation"
    assert client.get("/books").json() == []


def test_list_returns_books_in_creation_order_minus_deleted(client):
    books = [create(client, title=f"Book {i}", author="Author") for i in range(3)]
    client.delete(f"/books/{books[1]['id']}")

    assert client.get("/books").json() == [books[0], books[2]]


def test_get_book_by_id(client):
    book = create(client, title="Sapiens", author="Yuval Noah Harari")

    response = client.get(f"/books/{book['id']}")
    assert response.status_code == 200
    assert response.json() == book


def test_get_unknown_book_returns_empty_200(client):
    response = client.get("/books/doesnotexist")
    assert response.status_code == 200
    assert response.content == b""


def test_update_book_merges_fields(client):
    book = create(client, title="Make it happen", author="John Doe")

    response = client.put(f"/books/{book['id']}", json={"author": "Jane Doe"})
    assert response.status_code == 200
    assert response.json() == {
        book["id"]: {"id": book["id"], "title": "Make it happen", "author": "Jane Doe"}
    }
    assert client.get(f"/books/{book['id']}").json()["author"] == "Jane Doe"


def test_update_book_keeps_id(client):
    book = create(client, title="T", author="A")

    response = client.put(f"/books/{book['id']}", json={"id": "other123"})
    assert response.json()[book["id"]]["id"] == book["id"]


def test_update_unknown_book_is_empty_200(client):
    response = client.put("/books/doesnotexist", json={"title": "X"})
    assert response.status_code == 200
    assert response.json() == {}
    assert client.get("/books").json() == []


def test_update_non_object_body_is_406(client):
    book = create(client, title="T", author="A")

    response = client.put(f"/books/{book['id']}", json=["title"])
    assert response.status_code == 406
    assert response.json()["error"]["kind"] == "validation"


def test_delete_book(client):
    book = create(client, title="T", author="A")

    response = client.delete(f"/books/{book['id']}")
    assert response.status_code == 203
    assert response.json() == {"message": "Successful"}

    after = client.get(f"/books/{book['id']}")
    assert after.status_code == 200
    assert after.content == b""


def test_delete_unknown_book_still_successful(client):
    book = create(client, title="T", author="A")

    response = client.delete("/books/doesnotexist")
    assert response.status_code == 203
    assert response.json() == {"message": "Successful"}
    assert client.get("/books").json() == [book]


def test_handler_fault_is_406(client, monkeypatch):
    def boom(self, book_id):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(Library, "find_book", boom)

    response = client.get("/books/anything")
    assert response.status_code == 406
    assert response.json() == {"error": {"kind": "internal", "message": "store unavailable"}}


def test_mutations_are_flushed_to_disk(client, data_file):
    kept = create(client, title="Kept", author="A")
    gone = create(client, title="Gone", author="B")
    client.put(f"/books/{kept['id']}", json={"title": "Kept v2"})
    client.delete(f"/books/{gone['id']}")

    with open(data_file, encoding="utf-8") as f:
        on_disk = json.load(f)
    assert on_disk == {"books": client.get("/books").json()}


def test_state_survives_restart(app_settings):
    with TestClient(create_app(app_settings)) as first:
        book = first.post("/books", json={"title": "T", "author": "A"}).json()["book"]

    with TestClient(create_app(app_settings)) as second:
        assert second.get(f"/books/{book['id']}").json() == book


def test_strict_not_found_mode(data_file):
    settings = Settings(data_file=data_file, strict_not_found=True)
    with TestClient(create_app(settings)) as client:
        for response in (
            client.get("/books/missing"),
            client.put("/books/missing", json={"title": "X"}),
            client.delete("/books/missing"),
        ):
            assert response.status_code == 404
            assert response.json()["error"]["kind"] == "not_found"


def test_health(client):
    create(client, title="T", author="A")

    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["total_books"] == 1


def test_security_headers(client):
    response = client.get("/books")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_api_docs_are_served(client):
    assert client.get("/api-docs").status_code == 200
    schema = client.get("/api-docs/openapi.json").json()
    assert "/books" in schema["paths"]
    assert "/books/{book_id}" in schema["paths"]


def test_update_non_string_title_is_406_and_not_stored(client, data_file):
    book = create(client, title="T", author="A")

    response = client.put(f"/books/{book['id']}", json={"title": 123})
    assert response.status_code == 406
    assert response.json()["error"]["kind"] == "validation"

    assert client.get("/books").status_code == 200
    after = client.get(f"/books/{book['id']}")
    assert after.status_code == 200
    assert after.json() == book
    with open(data_file, encoding="utf-8") as f:
        assert json.load(f)["books"] == [book]
