"""Upload naming rules."""

from datetime import datetime

import pytest

from storage import image_key, is_allowed_image, safe_name


@pytest.mark.unit
@pytest.mark.parametrize("filename,expected", [
    ("my post (final).png", "my_post_final.png"),
    ("café poster.png", "cafe_poster.png"),
    ("../../etc.png", "etc.png"),
    ("..png", "png"),
    ("..", "image"),
])
def test_safe_name(filename, expected):
    assert safe_name(filename) == expected


@pytest.mark.unit
def test_image_key_is_namespaced_by_employee():
    now = datetime(2026, 10, 19, 9, 0)
    millis = int(now.timestamp() * 1000)
    assert image_key("2025-322", "poster.png", now) == f"social-media-posts/2025-322/{millis}-poster.png"


@pytest.mark.unit
def test_is_allowed_image():
    assert is_allowed_image("poster.JPG")
    assert not is_allowed_image("brief.pdf")
    assert not is_allowed_image("poster")
