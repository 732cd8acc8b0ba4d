"""Tests for cache key generation."""

from imgcache.cache.keys import encode_key


def _is_hex_digest(key: str) -> bool:
    return len(key) == 64 and all(c in "0123456789abcdef" for c in key)


class TestEncodeKey:
    def test_deterministic(self):
        url = "https://img.example/photo.jpg"
        assert encode_key(url) == encode_key(url)

    def test_different_locators_differ(self):
        assert encode_key("https://img.example/a.jpg") != encode_key("https://img.example/b.jpg")

    def test_filesystem_safe(self):
        key = encode_key("https://img.example/photo.jpg?w=400&h=300#frag/../..")
        assert len(key) == 64
        assert all(c in "0123456789abcdef" for c in key)

    def test_empty_string(self):
        assert _is_hex_digest(encode_key(""))

    def test_unicode_locator(self):
        assert _is_hex_digest(encode_key("https://img.example/café/写真.jpg"))

    def test_lone_surrogate_does_not_raise(self):
        assert _is_hex_digest(encode_key("https://img.example/\ud800.jpg"))

    def test_query_order_matters(self):
        # Locators are hashed verbatim, not normalized
        assert encode_key("https://x/?a=1&b=2") != encode_key("https://x/?b=2&a=1")
