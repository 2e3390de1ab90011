"""Unit tests for im_batch.utils.text module."""
import pytest
from im_batch.utils.text import sanitize_filename, split_tokens


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    def test_plain_name_unchanged(self):
        assert sanitize_filename("im-vintage3") == "im-vintage3"

    def test_separators_replaced(self):
        assert sanitize_filename("../evil/name") == ".._evil_name"

    @pytest.mark.parametrize("name", ["", ".", "..", "___"])
    def test_degenerate_names(self, name):
        assert sanitize_filename(name) == "out"

    def test_max_len(self):
        assert len(sanitize_filename("a" * 300, max_len=50)) == 50


class TestSplitTokens:
    """Tests for split_tokens."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("jpg,png", ["jpg", "png"]),
            (" jpg  png ", ["jpg", "png"]),
            ("jpg, png,,tif", ["jpg", "png", "tif"]),
            ("", []),
            (None, []),
        ],
    )
    def test_split(self, raw, expected):
        assert split_tokens(raw) == expected
