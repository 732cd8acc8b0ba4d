import io
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from imgcache.cache.manager import ImageCache


@pytest.fixture
def sample_image():
    """10x10 solid red RGB image."""
    return Image.new("RGB", (10, 10), (255, 0, 0))


@pytest.fixture
def sample_image_bytes(sample_image):
    """PNG encoding of sample_image."""
    buf = io.BytesIO()
    sample_image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def fetcher(sample_image_bytes):
    """Fetcher stand-in that always succeeds with sample_image_bytes."""
    mock = AsyncMock()
    mock.fetch = AsyncMock(return_value=sample_image_bytes)
    return mock


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "images"


@pytest.fixture
def image_cache(cache_dir, fetcher):
    cache = ImageCache(cache_dir=cache_dir, fetcher=fetcher)
    yield cache
    cache.close()
