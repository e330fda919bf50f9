"""
Tests for upload validation and date parsing helpers.
"""

from datetime import date, datetime, timezone

import pytest

from core.utils.datetime import parse_date, to_iso
from core.utils.formatting import format_name, with_suffix
from core.utils.validators import sanitize_filename, unique_filename, validate_document


class TestDocumentValidation:
    """Test resume and letter upload checks."""

    def test_accepts_pdf(self):
        assert validate_document("application/pdf", 2048) == (True, None)

    def test_rejects_unsupported_type(self):
        is_valid, error = validate_document("image/png", 2048)

        assert is_valid is False
        assert "Invalid file type" in error

    def test_rejects_empty_file(self):
        assert validate_document("application/pdf", 0) == (False, "Uploaded file is empty")

    def test_rejects_oversized_file(self):
        is_valid, error = validate_document("application/pdf", 3 * 1024 * 1024, max_size=2 * 1024 * 1024)

        assert is_valid is False
        assert "2MB" in error


class TestFilenames:
    """Test stored filename generation."""

    def test_strips_path_characters(self):
        assert sanitize_filename("../../etc/passwd") == "....etcpasswd"
        assert sanitize_filename("Jane Doe CV.pdf") == "Jane_Doe_CV.pdf"

    def test_unique_prefix(self):
        first = unique_filename("cv.pdf")
        second = unique_filename("cv.pdf")

        assert first != second
        assert first.endswith("-cv.pdf")


class TestDates:
    """Test interview date parsing and ISO output."""

    @pytest.mark.parametrize("value", ["2024-01-10", "01/10/2024", "2024/01/10", "2024-01-10T09:30:00Z"])
    def test_accepted_formats(self, value):
        assert parse_date(value) == date(2024, 1, 10)

    def test_invalid_date(self):
        assert parse_date("next tuesday") is None

    def test_naive_datetime_treated_as_utc(self):
        assert to_iso(datetime(2024, 1, 10, 9, 30)) == "2024-01-10T09:30:00+00:00"
        assert to_iso(datetime(2024, 1, 10, 9, 30, tzinfo=timezone.utc)) == "2024-01-10T09:30:00+00:00"
        assert to_iso(None) is None


class TestFormatting:
    def test_format_name(self):
        assert format_name(" Maya ", "Manager") == "Maya Manager"
        assert format_name(None, "Manager") == "Manager"

    def test_with_suffix(self):
        assert with_suffix("Routed to CEO", "urgent") == "Routed to CEO: urgent"
        assert with_suffix("Routed to CEO", None) == "Routed to CEO"
