"""Tests for error types and codes."""

import pytest

from kvindex.core.errors import (
    AssociationError,
    ConditionalCheckFailedError,
    ConfigError,
    ErrorCode,
    InternalError,
    InvalidFieldError,
    KvIndexError,
    RecordError,
    RetryExhaustedError,
    UniqueIndexError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.INDEX_INVALID_FIELD, 3000),
            (ErrorCode.INDEX_UNIQUE_VIOLATION, 3000),
            (ErrorCode.STORE_CONDITION_FAILED, 4000),
            (ErrorCode.ASSOCIATION_TARGET_WITHOUT_ID, 5000),
            (ErrorCode.RECORD_NOT_FOUND, 6000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestKvIndexError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = KvIndexError(
            code=ErrorCode.INDEX_UNIQUE_VIOLATION,
            message="Test message",
            retryable=False,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 3002,
            "error": "INDEX_UNIQUE_VIOLATION",
            "message": "Test message",
            "retryable": False,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        error = KvIndexError(code=ErrorCode.INTERNAL_ERROR, message="Something broke")

        assert str(error) == "[9001] INTERNAL_ERROR: Something broke"

    def test_given_error_when_raised_then_catchable_as_exception(self) -> None:
        with pytest.raises(KvIndexError):
            raise InternalError.unexpected("boom", where="test")


class TestFactories:
    """Factory method tests."""

    def test_config_errors(self) -> None:
        parse = ConfigError.parse_error("/x.yaml", "bad indent")
        invalid = ConfigError.invalid_value("retry.max_attempts", 0, "too small")

        assert parse.code == ErrorCode.CONFIG_PARSE_ERROR
        assert invalid.details == {"field": "retry.max_attempts", "value": "0", "reason": "too small"}

    def test_invalid_field(self) -> None:
        error = InvalidFieldError.not_a_field("User", ["nickname"])

        assert error.code == ErrorCode.INDEX_INVALID_FIELD
        assert "nickname" in error.message

    def test_no_index(self) -> None:
        error = InvalidFieldError.no_index("User", ["age"])

        assert error.code == ErrorCode.INDEX_NOT_FOUND

    def test_unique_violation_is_not_retryable(self) -> None:
        error = UniqueIndexError.violation("kv_index_user_emails", "a@x.com", None, ["u1", "u2"])

        assert not error.retryable
        assert error.message == "Uniqueness failure on index kv_index_user_emails."

    def test_condition_failure_is_retryable(self) -> None:
        error = ConditionalCheckFailedError.for_key("t", "k", 1.0)

        assert error.retryable
        assert error.details == {"table": "t", "hash_key": "k", "range_key": 1.0}

    def test_retry_exhausted(self) -> None:
        error = RetryExhaustedError.exhausted("t", "k", 5)

        assert error.details["attempts"] == 5

    def test_association_errors(self) -> None:
        assert AssociationError.target_without_id("x").code == ErrorCode.ASSOCIATION_TARGET_WITHOUT_ID
        assert AssociationError.source_without_id("User.team").code == ErrorCode.ASSOCIATION_SOURCE_WITHOUT_ID
        assert AssociationError.unknown("User", "pets").details == {"owner": "User", "name": "pets"}

    def test_record_errors(self) -> None:
        assert RecordError.not_found("User", "u1").message == "Couldn't find User with id=u1"
        assert RecordError.unbound("User").code == ErrorCode.RECORD_UNBOUND
        assert RecordError.unknown_type("Ghost").code == ErrorCode.RECORD_UNKNOWN_TYPE
