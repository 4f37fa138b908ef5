# tests/test_movies/test_movies_crud.py

from datetime import datetime

import pytest

from tests.fixtures.images import png_bytes

API = "/api/movies"


async def _create(client, **body):
    payload = {"title": "Dune", "genre": "Sci-Fi", "rating": 5, "description": "Spice."}
    payload.update(body)
    r = await client.post(API, json=payload)
    assert r.status_code == 201, r.text
    return r.json()


# ─────────────────────────────────────────────────────────────────────────────
# Create (JSON)
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_create_returns_201_location_and_camel_case(async_client):
    r = await async_client.post(API, json={"title": "  Dune  ", "genre": "Sci-Fi", "rating": 5})

    assert r.status_code == 201
    body = r.json()
    assert body["title"] == "Dune"
    assert body["posterImageUrl"] is None
    assert body["createdAt"] == body["updatedAt"]
    assert r.headers["location"] == f"{API}/{body['id']}"


@pytest.mark.anyio
async def test_create_accepts_snake_case_and_external_poster(async_client):
    r = await async_client.post(API, json={"title": "Heat", "poster_image_url": "https://img.example.com/heat.jpg"})

    assert r.status_code == 201
    assert r.json()["posterImageUrl"] == "https://img.example.com/heat.jpg"


@pytest.mark.anyio
@pytest.mark.parametrize("title", [None, "", "   "])
async def test_title_is_required(async_client, title):
    r = await async_client.post(API, json={"title": title, "rating": 3})

    assert r.status_code == 400
    body = r.json()
    assert body["detail"] == "Title is required."
    assert body["details"] == {"field": "title"}


@pytest.mark.anyio
@pytest.mark.parametrize("rating, status", [(0, 400), (6, 400), (1, 201), (5, 201), (None, 201)])
async def test_rating_bounds(async_client, rating, status):
    r = await async_client.post(API, json={"title": "T", "rating": rating})
    assert r.status_code == status
    if status == 400:
        assert r.json()["detail"] == "Rating must be between 1 and 5."


@pytest.mark.anyio
async def test_non_numeric_rating_is_a_schema_error(async_client):
    r = await async_client.post(API, json={"title": "T", "rating": "five"})
    assert r.status_code == 422
    assert r.headers["content-type"].startswith("application/problem+json")


@pytest.mark.anyio
async def test_validation_failure_writes_nothing(async_client):
    await async_client.post(API, json={"title": "", "rating": 9})

    r = await async_client.get(API)
    assert r.json() == []
    assert r.headers["x-total-count"] == "0"


# ─────────────────────────────────────────────────────────────────────────────
# Create (multipart)
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_upload_with_poster_is_served(async_client, images_dir):
    r = await async_client.post(
        f"{API}/upload",
        data={"title": "Arrival", "genre": "Sci-Fi", "rating": "4"},
        files={"image": ("poster.PNG", png_bytes(), "image/png")},
    )

    assert r.status_code == 201, r.text
    url = r.json()["posterImageUrl"]
    assert url.startswith("/images/") and url.endswith(".png")
    assert "poster" not in url
    assert len(list(images_dir.iterdir())) == 1

    served = await async_client.get(url)
    assert served.status_code == 200
    assert served.content == png_bytes()


@pytest.mark.anyio
async def test_upload_without_image(async_client, images_dir):
    r = await async_client.post(f"{API}/upload", data={"title": "No Poster"})

    assert r.status_code == 201
    assert r.json()["posterImageUrl"] is None
    assert r.json()["rating"] is None


@pytest.mark.anyio
async def test_empty_upload_counts_as_absent(async_client):
    r = await async_client.post(
        f"{API}/upload",
        data={"title": "Blank"},
        files={"image": ("empty.png", b"", "image/png")},
    )
    assert r.status_code == 201
    assert r.json()["posterImageUrl"] is None


@pytest.mark.anyio
async def test_oversized_poster_rejected_before_any_write(async_client, images_dir):
    r = await async_client.post(
        f"{API}/upload",
        data={"title": "Huge"},
        files={"image": ("big.png", png_bytes(6 * 1024 * 1024), "image/png")},
    )

    assert r.status_code == 400
    assert "too large" in r.json()["detail"]
    assert not images_dir.exists() or list(images_dir.iterdir()) == []
    assert (await async_client.get(API)).json() == []


@pytest.mark.anyio
async def test_unsupported_poster_type_rejected(async_client):
    r = await async_client.post(
        f"{API}/upload",
        data={"title": "Bitmap"},
        files={"image": ("poster.bmp", b"BM" + b"\0" * 100, "image/bmp")},
    )
    assert r.status_code == 400
    assert r.json()["details"]["field"] == "image"


@pytest.mark.anyio
async def test_upload_validates_fields_before_storing(async_client, images_dir):
    r = await async_client.post(
        f"{API}/upload",
        data={"title": "  ", "rating": "3"},
        files={"image": ("p.png", png_bytes(), "image/png")},
    )
    assert r.status_code == 400
    assert not images_dir.exists() or list(images_dir.iterdir()) == []


# ─────────────────────────────────────────────────────────────────────────────
# Get / update
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_get_and_missing(async_client):
    movie = await _create(async_client)

    r = await async_client.get(f"{API}/{movie['id']}")
    assert r.status_code == 200
    assert r.json() == movie

    r = await async_client.get(f"{API}/999999")
    assert r.status_code == 404
    assert r.json()["detail"] == "Movie not found"


@pytest.mark.anyio
async def test_update_keeps_omitted_optionals(async_client):
    movie = await _create(async_client)

    r = await async_client.put(f"{API}/{movie['id']}", json={"title": "Dune: Part One", "genre": "  "})

    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Dune: Part One"
    assert body["genre"] == "Sci-Fi"
    assert body["rating"] == 5
    assert body["description"] == "Spice."
    assert body["createdAt"] == movie["createdAt"]


@pytest.mark.anyio
async def test_update_moves_updated_at_past_created_at(async_client):
    r = await async_client.post(API, json={"title": "Dune"})
    assert r.status_code == 201
    movie_id = r.json()["id"]

    fetched = (await async_client.get(f"{API}/{movie_id}")).json()
    assert fetched["genre"] is None
    assert fetched["rating"] is None
    assert fetched["posterImageUrl"] is None
    assert fetched["description"] is None
    assert fetched["createdAt"] == fetched["updatedAt"]

    r = await async_client.put(f"{API}/{movie_id}", json={"title": "Dune Part Two", "rating": 5})

    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Dune Part Two"
    assert body["rating"] == 5
    assert body["createdAt"] == fetched["createdAt"]
    assert datetime.fromisoformat(body["updatedAt"]) > datetime.fromisoformat(body["createdAt"])


@pytest.mark.anyio
async def test_update_replaces_supplied_values(async_client):
    movie = await _create(async_client)

    r = await async_client.put(
        f"{API}/{movie['id']}",
        json={"title": "Dune", "genre": "Epic", "rating": 4, "posterImageUrl": "https://img.example.com/d.jpg"},
    )

    body = r.json()
    assert (body["genre"], body["rating"], body["posterImageUrl"]) == ("Epic", 4, "https://img.example.com/d.jpg")


@pytest.mark.anyio
async def test_update_validation(async_client):
    movie = await _create(async_client)

    assert (await async_client.put(f"{API}/{movie['id']}", json={"genre": "x"})).status_code == 400
    assert (await async_client.put(f"{API}/{movie['id']}", json={"title": "x", "rating": 7})).status_code == 400
    assert (await async_client.put(f"{API}/424242", json={"title": "x"})).status_code == 404


# ─────────────────────────────────────────────────────────────────────────────
# Image replacement / delete
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_replace_image_removes_previous_file(async_client, images_dir):
    r = await async_client.post(
        f"{API}/upload",
        data={"title": "Alien"},
        files={"image": ("a.png", png_bytes(), "image/png")},
    )
    movie = r.json()
    old_name = movie["posterImageUrl"].rsplit("/", 1)[1]

    r = await async_client.put(
        f"{API}/{movie['id']}/image",
        files={"image": ("b.jpg", b"\xff\xd8\xff" + b"\0" * 64, "image/jpeg")},
    )

    assert r.status_code == 200
    new_url = r.json()["posterImageUrl"]
    assert new_url.endswith(".jpg") and new_url != movie["posterImageUrl"]
    names = [p.name for p in images_dir.iterdir()]
    assert names == [new_url.rsplit("/", 1)[1]]
    assert old_name not in names


@pytest.mark.anyio
async def test_replace_image_requires_a_file(async_client):
    movie = await _create(async_client)

    r = await async_client.put(f"{API}/{movie['id']}/image", files={"image": ("e.png", b"", "image/png")})
    assert r.status_code == 400
    assert r.json()["detail"] == "An image file is required."


@pytest.mark.anyio
async def test_replace_image_on_missing_movie(async_client):
    r = await async_client.put(f"{API}/31337/image", files={"image": ("a.png", png_bytes(), "image/png")})
    assert r.status_code == 404


@pytest.mark.anyio
async def test_replace_external_poster_leaves_it_alone(async_client, images_dir):
    movie = await _create(async_client, posterImageUrl="https://img.example.com/x.png")

    r = await async_client.put(f"{API}/{movie['id']}/image", files={"image": ("n.png", png_bytes(), "image/png")})

    assert r.status_code == 200
    assert len(list(images_dir.iterdir())) == 1


@pytest.mark.anyio
async def test_delete_removes_row_and_poster(async_client, images_dir):
    r = await async_client.post(
        f"{API}/upload",
        data={"title": "Gone"},
        files={"image": ("g.gif", b"GIF89a" + b"\0" * 32, "image/gif")},
    )
    movie_id = r.json()["id"]

    r = await async_client.delete(f"{API}/{movie_id}")
    assert r.status_code == 204
    assert r.content == b""

    assert (await async_client.get(f"{API}/{movie_id}")).status_code == 404
    assert list(images_dir.iterdir()) == []
    assert (await async_client.delete(f"{API}/{movie_id}")).status_code == 404


@pytest.mark.anyio
async def test_delete_survives_missing_poster_file(async_client, images_dir):
    r = await async_client.post(
        f"{API}/upload",
        data={"title": "Ghost"},
        files={"image": ("g.png", png_bytes(), "image/png")},
    )
    for p in images_dir.iterdir():
        p.unlink()

    assert (await async_client.delete(f"{API}/{r.json()['id']}")).status_code == 204
