# tests/test_storage/test_validate_image.py

import pytest

from mediaboard.core.exceptions import RequestValidationFailed
from mediaboard.core.storage import image_extension, new_filename, validate_image

ALLOWED = ["png", "jpg", "jpeg", "webp", "gif"]
LIMIT = 5 * 1024 * 1024


@pytest.mark.parametrize("name, ext", [("a.PNG", ".png"), ("x.tar.gz", ".gz"), ("noext", ""), (None, "")])
def test_image_extension(name, ext):
    assert image_extension(name) == ext


@pytest.mark.parametrize("name", ["poster.png", "POSTER.JPG", "p.jpeg", "p.webp", "p.gif"])
def test_allowed_extensions_pass(name):
    assert validate_image(name, 1024, max_bytes=LIMIT, allowed_extensions=ALLOWED) == image_extension(name)


@pytest.mark.parametrize("name", ["poster.bmp", "poster", "poster.png.exe", "poster.svg"])
def test_disallowed_extensions_fail(name):
    with pytest.raises(RequestValidationFailed) as ei:
        validate_image(name, 1024, max_bytes=LIMIT, allowed_extensions=ALLOWED)
    assert ei.value.status_code == 400
    assert ei.value.field == "image"
    assert "Unsupported image type" in ei.value.message


def test_size_limit_is_inclusive():
    assert validate_image("p.png", LIMIT, max_bytes=LIMIT, allowed_extensions=ALLOWED) == ".png"

    with pytest.raises(RequestValidationFailed) as ei:
        validate_image("p.png", LIMIT + 1, max_bytes=LIMIT, allowed_extensions=ALLOWED)
    assert ei.value.message == "Image is too large; the limit is 5 MB."
    assert ei.value.details["max_bytes"] == LIMIT


def test_size_is_checked_before_type():
    with pytest.raises(RequestValidationFailed) as ei:
        validate_image("p.bmp", LIMIT + 1, max_bytes=LIMIT, allowed_extensions=ALLOWED)
    assert "too large" in ei.value.message


def test_new_filename_is_opaque_and_unique():
    a, b = new_filename(".PNG"), new_filename(".png")
    assert a != b
    assert a.endswith(".png") and len(a) == 32 + 4
