"""Unit tests for structured rejections."""

import pytest

from src.core.errors import ErrorCode, ErrorSeverity, Rejection, TaskRejectedError, http_status_for, reject


@pytest.mark.unit
class TestReject:
    """Tests for the reject helper."""

    def test_builds_rejection_with_details(self):
        """Test keyword arguments become rejection details."""
        error = reject(ErrorCode.INVALID_INPUT, "Day index out of range", day_index=12)

        assert isinstance(error, TaskRejectedError)
        assert error.code == ErrorCode.INVALID_INPUT
        assert error.rejection.details == {"day_index": 12}
        assert str(error) == "Day index out of range"

    def test_suggestion_is_kept_apart(self):
        """Test the suggestion is not mixed into the details."""
        error = reject(ErrorCode.TIME_VALIDATION_INVALID, "Reason required", suggestion="Explain", error_rate=30)

        assert error.rejection.suggestion == "Explain"
        assert "suggestion" not in error.rejection.details

    def test_rejection_serialises(self):
        """Test the rejection dumps to a plain JSON-ready dict."""
        rejection = Rejection(code=ErrorCode.WIP_LIMIT_EXCEEDED, message="full", details={"current": 2, "limit": 2})

        assert rejection.model_dump(mode="json") == {
            "code": "WIP_LIMIT_EXCEEDED",
            "message": "full",
            "details": {"current": 2, "limit": 2},
            "suggestion": None,
        }


@pytest.mark.unit
class TestHttpStatusFor:
    """Tests for http_status_for."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (ErrorCode.INVALID_INPUT, 422),
            (ErrorCode.TIME_VALIDATION_INVALID, 422),
            (ErrorCode.WIP_LIMIT_EXCEEDED, 409),
            (ErrorCode.TIME_VALIDATION_REQUIRED, 409),
            ("SOMETHING_ELSE", 400),
        ],
    )
    def test_mapping(self, code, expected):
        """Test each rejection code maps to its HTTP status."""
        assert http_status_for(code) == expected

    def test_wip_rejections_are_medium_severity(self):
        """Test WIP rejections rank above plain input errors."""
        wip = Rejection(code=ErrorCode.WIP_LIMIT_EXCEEDED, message="full")
        invalid = Rejection(code=ErrorCode.INVALID_INPUT, message="bad")

        assert wip.severity == ErrorSeverity.MEDIUM
        assert invalid.severity == ErrorSeverity.LOW
