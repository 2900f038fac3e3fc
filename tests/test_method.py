"""Tests for HttpMethod conversion."""

import pytest

from httphook import HookError, HttpMethod, UnknownMethodError


class TestFromString:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("GET", HttpMethod.GET),
            ("post", HttpMethod.POST),
            ("Put", HttpMethod.PUT),
            ("delete", HttpMethod.DELETE),
            ("PATCH", HttpMethod.PATCH),
            ("head", HttpMethod.HEAD),
            ("OPTIONS", HttpMethod.OPTIONS),
        ],
    )
    def test_known_methods(self, raw: str, expected: HttpMethod) -> None:
        assert HttpMethod.from_string(raw) is expected

    def test_member_passes_through(self) -> None:
        assert HttpMethod.from_string(HttpMethod.GET) is HttpMethod.GET

    def test_unknown_raises_immediately(self) -> None:
        with pytest.raises(UnknownMethodError, match="TRACE") as exc_info:
            HttpMethod.from_string("TRACE")
        assert exc_info.value.method == "TRACE"

    def test_unknown_is_value_error_and_hook_error(self) -> None:
        with pytest.raises(ValueError):
            HttpMethod.from_string("")
        with pytest.raises(HookError):
            HttpMethod.from_string("CONNECT")

    def test_str_value(self) -> None:
        assert str(HttpMethod.PATCH) == "PATCH"
        assert HttpMethod.GET == "GET"
