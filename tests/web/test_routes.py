"""Tests for the JSON API and the web page, using Flask's test client."""

import io

import pytest

from conftest import FakeOpenLibrary, load_book, record
from smartbooks.catalog.importer import BookImporter
from smartbooks.catalog.reconciler import BookReconciler
from smartbooks.catalog.service import BookService
from smartbooks.config import AppConfig
from smartbooks.db.models import DataSource
from smartbooks.main import Services, create_app


@pytest.fixture
def openlibrary():
    return FakeOpenLibrary()


@pytest.fixture
def client(db, openlibrary):
    services = Services(
        books=BookService(),
        importer=BookImporter(),
        reconciler=BookReconciler(openlibrary),
        openlibrary=openlibrary,
    )
    app = create_app(AppConfig(secret_key="test"), services=services)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


class TestBooksApi:

    def test_create_and_get(self, client):
        response = client.post("/api/books", json={"isbn": "1111", "titel": "Erstes", "autor": "A"})

        assert response.status_code == 201
        assert response.get_json()["source"] == "API"
        assert response.get_json()["status"] == "UNKNOWN"

        response = client.get("/api/books/1111")
        assert response.status_code == 200
        assert response.get_json()["title"] == "Erstes"

    def test_create_duplicate(self, client, stored_book):
        stored_book(isbn="1111")
        response = client.post("/api/books", json={"isbn": "1111", "title": "Again"})
        assert response.status_code == 409

    def test_create_without_isbn(self, client):
        response = client.post("/api/books", json={"title": "Nameless"})
        assert response.status_code == 409

    def test_create_invalid_body(self, client):
        response = client.post("/api/books", json={"isbn": "1", "title": "x", "pageCount": "many"})
        assert response.status_code == 400

    def test_get_unknown(self, client):
        assert client.get("/api/books/9999").status_code == 404

    def test_list_and_filter(self, client, stored_book):
        stored_book(isbn="1", genre="Roman")
        stored_book(isbn="2", genre="Lyrik")

        assert [b["isbn"] for b in client.get("/api/books").get_json()] == ["1", "2"]
        assert [b["isbn"] for b in client.get("/api/books?genre=Lyrik").get_json()] == ["2"]
        assert [b["isbn"] for b in client.get("/api/books?status=read").get_json()] == ["1", "2"]
        assert client.get("/api/books?status=lost").status_code == 400

    def test_update(self, client, stored_book):
        stored_book(isbn="1111")

        response = client.put("/api/books/1111", json={"isbn": "1111", "title": "Das Schloss"})

        assert response.status_code == 200
        assert load_book("1111").title == "Das Schloss"

    def test_update_isbn_mismatch(self, client, stored_book):
        stored_book(isbn="1111")
        response = client.put("/api/books/1111", json={"isbn": "2222", "title": "Other"})
        assert response.status_code == 400
        assert load_book("1111").title == "Der Prozess"

    def test_update_unknown(self, client):
        response = client.put("/api/books/1111", json={"title": "Nothing"})
        assert response.status_code == 404

    def test_delete(self, client, stored_book):
        stored_book(isbn="1111")
        assert client.delete("/api/books/1111").status_code == 204
        assert client.delete("/api/books/1111").status_code == 404

    def test_fetch_api_data(self, client, stored_book, openlibrary):
        stored_book(isbn="1111", page_count=150)
        openlibrary.records["1111"] = record(isbn="1111", title="Der Proceß", page_count=0)

        response = client.post("/api/books/1111/fetch-api-data")

        body = response.get_json()
        assert response.status_code == 200
        assert body["title"] == "Der Proceß"
        assert body["page_count"] == 150
        assert body["api_check_timestamp"] is not None

    def test_fetch_api_data_unknown(self, client):
        assert client.post("/api/books/1111/fetch-api-data").status_code == 404

    def test_import(self, client):
        data = {"file": (io.BytesIO(b"isbn,titel\n1111,Erstes\n"), "books.csv")}

        response = client.post("/api/books/import?fileType=csv", data=data,
                               content_type="multipart/form-data")

        assert response.status_code == 200
        assert response.get_json()["imported"] == 1
        assert load_book("1111").source is DataSource.CSV

    def test_import_malformed(self, client):
        data = {"file": (io.BytesIO(b"<buecher><buch>"), "books.xml")}

        response = client.post("/api/books/import?fileType=xml", data=data,
                               content_type="multipart/form-data")

        assert response.status_code == 400


class TestWebPage:

    def test_root_redirects_to_list(self, client):
        response = client.get("/")
        assert response.status_code == 302
        assert response.headers["Location"].endswith("/web/books/list")

    def test_list_renders_books(self, client, stored_book):
        stored_book(isbn="1111")

        response = client.get("/web/books/list")

        assert response.status_code == 200
        page = response.get_data(as_text=True)
        assert "Der Prozess" in page
        assert "CSV import" in page

    def test_upload(self, client):
        data = {
            "file": (io.BytesIO(b'{"buecher": [{"isbn": "1111", "titel": "Erstes"}]}'), "books.json"),
            "fileType": "json",
        }

        response = client.post("/web/books/upload", data=data,
                               content_type="multipart/form-data", follow_redirects=True)

        assert response.status_code == 200
        assert "books.json successfully uploaded!" in response.get_data(as_text=True)
        assert load_book("1111").source is DataSource.JSON

    def test_upload_without_file(self, client):
        response = client.post("/web/books/upload", data={"fileType": "csv"},
                               content_type="multipart/form-data", follow_redirects=True)
        assert "Please select a file to upload" in response.get_data(as_text=True)

    def test_upload_invalid_type(self, client):
        data = {"file": (io.BytesIO(b"x"), "books.txt"), "fileType": "txt"}
        response = client.post("/web/books/upload", data=data,
                               content_type="multipart/form-data", follow_redirects=True)
        assert "Invalid file type" in response.get_data(as_text=True)

    def test_upload_malformed(self, client):
        data = {"file": (io.BytesIO(b"{"), "books.json"), "fileType": "json"}
        response = client.post("/web/books/upload", data=data,
                               content_type="multipart/form-data", follow_redirects=True)
        assert "Error while reading uploaded file" in response.get_data(as_text=True)

    def test_health(self, client):
        assert client.get("/health").get_json()["status"] == "ok"
