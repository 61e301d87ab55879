"""Unit tests for the private validation helpers in reviewhub.db.crud.

These are pure-Python tests; no database session needed.
"""

import pytest

from reviewhub.db.crud import _require_non_empty, _validate_email, _validate_rating
from reviewhub.errors import BadRequestError


class TestRequireNonEmpty:
    def test_strips_value(self):
        assert _require_non_empty("  hello ", "title") == "hello"

    def test_none_raises(self):
        with pytest.raises(BadRequestError, match="title is required"):
            _require_non_empty(None, "title")

    def test_whitespace_raises(self):
        with pytest.raises(BadRequestError, match="title must not be empty"):
            _require_non_empty("   ", "title")

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            _require_non_empty("", "content")


class TestValidateEmail:
    def test_lowercases(self):
        assert _validate_email(" Alice@Example.COM ") == "alice@example.com"

    def test_invalid_format_raises(self):
        with pytest.raises(BadRequestError, match="Invalid email"):
            _validate_email("not_an_email")


class TestValidateRating:
    @pytest.mark.parametrize("rating", [1, 3, 5])
    def test_in_range(self, rating):
        assert _validate_rating(rating) == rating

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_out_of_range_raises(self, rating):
        with pytest.raises(BadRequestError, match="between 1 and 5"):
            _validate_rating(rating)

    def test_bool_rejected(self):
        with pytest.raises(BadRequestError, match="integer"):
            _validate_rating(True)
