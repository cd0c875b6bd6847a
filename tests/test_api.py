"""Integration tests for the auth, books and health endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy import delete

from bookrecommender.database import async_session_factory
from bookrecommender.domain.models import User
from bookrecommender.services.auth import AuthService

PASSWORD = "securepass123"

# ── Auth Tests ─────────────────────────────────────


@pytest.mark.asyncio
async def test_register(client: AsyncClient):
    resp = await client.post(
        "/api/auth/register",
        json={
            "email": "New.Reader@Example.com",
            "password": "strongpass123",
            "confirm_password": "strongpass123",
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == "new.reader@example.com"
    assert data["token"]
    assert "expires" in data
    assert isinstance(data["id"], int)


@pytest.mark.asyncio
async def test_register_password_mismatch(client: AsyncClient):
    resp = await client.post(
        "/api/auth/register",
        json={
            "email": "mismatch@example.com",
            "password": "strongpass123",
            "confirm_password": "different123",
        },
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Passwords do not match"


@pytest.mark.asyncio
async def test_register_duplicate_email_is_case_insensitive(client: AsyncClient, register_user):
    await register_user("Dup@Example.com")
    resp = await client.post(
        "/api/auth/register",
        json={"email": "dup@example.com", "password": PASSWORD, "confirm_password": PASSWORD},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
async def test_concurrent_register_hits_unique_email(
    client: AsyncClient, register_user, monkeypatch: pytest.MonkeyPatch
):
    await register_user("race@example.com")

    # the lookup misses the first row, so the insert trips the unique index
    monkeypatch.setattr(AuthService, "_find_by_email", AsyncMock(return_value=None))
    resp = await client.post(
        "/api/auth/register",
        json={"email": "race@example.com", "password": PASSWORD, "confirm_password": PASSWORD},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Email already registered"


@pytest.mark.asyncio
async def test_register_rejects_short_password_and_bad_email(client: AsyncClient):
    resp = await client.post(
        "/api/auth/register",
        json={"email": "short@example.com", "password": "abc", "confirm_password": "abc"},
    )
    assert resp.status_code == 422

    resp = await client.post(
        "/api/auth/register",
        json={"email": "not-an-email", "password": PASSWORD, "confirm_password": PASSWORD},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, register_user):
    await register_user("login@example.com")
    resp = await client.post(
        "/api/auth/login",
        json={"email": "LOGIN@example.com", "password": PASSWORD},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == "login@example.com"
    assert data["token"]


@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient, register_user):
    await register_user("known@example.com")

    wrong_password = await client.post(
        "/api/auth/login",
        json={"email": "known@example.com", "password": "wrongpass"},
    )
    unknown_email = await client.post(
        "/api/auth/login",
        json={"email": "nonexistent@example.com", "password": "wrongpass"},
    )
    assert wrong_password.status_code == 400
    assert unknown_email.status_code == 400
    assert wrong_password.json()["detail"] == "Invalid email or password"
    assert unknown_email.json()["detail"] == wrong_password.json()["detail"]


@pytest.mark.asyncio
async def test_me(client: AsyncClient, register_user):
    user = await register_user("me@example.com")
    resp = await client.get("/api/auth/me", headers=user["headers"])
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == user["id"]
    assert data["email"] == "me@example.com"
    assert "created_at" in data


@pytest.mark.asyncio
async def test_me_requires_valid_token(client: AsyncClient):
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"

    resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_of_deleted_user_is_rejected(client: AsyncClient, register_user):
    user = await register_user()
    async with async_session_factory() as session:
        await session.execute(delete(User).where(User.id == user["id"]))
        await session.commit()

    resp = await client.get("/api/auth/me", headers=user["headers"])
    assert resp.status_code == 401
    assert resp.json()["detail"] == "User no longer exists"
    assert resp.headers["www-authenticate"] == "Bearer"


# ── Books Tests ────────────────────────────────────


@pytest.mark.asyncio
async def test_books_are_public_but_creation_requires_auth(client: AsyncClient):
    resp = await client.get("/api/books")
    assert resp.status_code == 200
    assert resp.json() == []

    resp = await client.post("/api/books", json={"title": "Dune", "author": "Frank Herbert"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_and_get_book(client: AsyncClient, register_user, create_book):
    user = await register_user("creator@example.com")
    book = await create_book(
        user["headers"],
        title="  Dune  ",
        isbn="9780441013593",
        genre="Science Fiction",
        page_count=412,
        publication_date="1965-08-01",
    )
    assert book["title"] == "Dune"
    assert book["created_by_user_id"] == user["id"]
    assert book["created_by_user_email"] == "creator@example.com"
    assert book["publication_date"] == "1965-08-01"

    resp = await client.get(f"/api/books/{book['id']}")
    assert resp.status_code == 200
    assert resp.json()["isbn"] == "9780441013593"


@pytest.mark.asyncio
async def test_get_missing_book(client: AsyncClient):
    resp = await client.get("/api/books/9999")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Book not found"


@pytest.mark.asyncio
async def test_create_book_validation(auth_client: AsyncClient):
    resp = await auth_client.post("/api/books", json={"title": "   ", "author": "Someone"})
    assert resp.status_code == 422

    resp = await auth_client.post("/api/books", json={"title": "No Author"})
    assert resp.status_code == 422

    resp = await auth_client.post(
        "/api/books", json={"title": "Zero", "author": "Pages", "page_count": 0}
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_books_sorted_and_searchable(client: AsyncClient, register_user, create_book):
    user = await register_user()
    await create_book(user["headers"], title="Neuromancer", author="William Gibson")
    await create_book(user["headers"], title="Emma", author="Jane Austen")
    await create_book(user["headers"], title="Persuasion", author="Jane Austen")

    resp = await client.get("/api/books")
    assert [b["title"] for b in resp.json()] == ["Emma", "Neuromancer", "Persuasion"]

    resp = await client.get("/api/books", params={"search": "austen"})
    assert [b["title"] for b in resp.json()] == ["Emma", "Persuasion"]

    resp = await client.get("/api/books", params={"search": "NEURO"})
    assert [b["title"] for b in resp.json()] == ["Neuromancer"]


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(client: AsyncClient, register_user, create_book):
    user = await register_user()
    await create_book(user["headers"], title="Emma", author="Jane Austen")
    await create_book(user["headers"], title="100% Pure", author="Some_One")

    resp = await client.get("/api/books", params={"search": "%"})
    assert [b["title"] for b in resp.json()] == ["100% Pure"]

    resp = await client.get("/api/books", params={"search": "_"})
    assert [b["title"] for b in resp.json()] == ["100% Pure"]

    resp = await client.get("/api/books", params={"search": "e_m"})
    assert resp.json() == []


@pytest.mark.asyncio
async def test_update_book_partial(client: AsyncClient, register_user, create_book):
    user = await register_user()
    book = await create_book(user["headers"], title="Old Title", author="Author", genre="Drama")

    resp = await client.put(
        f"/api/books/{book['id']}",
        json={"title": "New Title", "genre": None},
        headers=user["headers"],
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "New Title"
    assert data["author"] == "Author"
    assert data["genre"] is None

    resp = await client.put(
        f"/api/books/{book['id']}", json={"author": None}, headers=user["headers"]
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_only_creator_can_modify_book(client: AsyncClient, register_user, create_book):
    owner = await register_user()
    other = await register_user()
    book = await create_book(owner["headers"])

    resp = await client.put(
        f"/api/books/{book['id']}", json={"title": "Hijacked"}, headers=other["headers"]
    )
    assert resp.status_code == 403

    resp = await client.delete(f"/api/books/{book['id']}", headers=other["headers"])
    assert resp.status_code == 403

    resp = await client.put(
        "/api/books/9999", json={"title": "Nope"}, headers=owner["headers"]
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_book_removes_library_entries(client: AsyncClient, register_user, create_book):
    owner = await register_user()
    reader = await register_user()
    book = await create_book(owner["headers"], title="To Delete")
    resp = await client.post(
        "/api/my-books", json={"book_id": book["id"]}, headers=reader["headers"]
    )
    assert resp.status_code == 201

    resp = await client.delete(f"/api/books/{book['id']}", headers=owner["headers"])
    assert resp.status_code == 204

    resp = await client.get(f"/api/books/{book['id']}")
    assert resp.status_code == 404

    resp = await client.get("/api/my-books", headers=reader["headers"])
    assert resp.json() == []


# ── Health Check ───────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["environment"] == "test"
    assert data["version"]
