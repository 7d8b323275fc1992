import pytest

from professordex.models.failure import FailureKind
from professordex.services.name_validation import InvalidNameError, validate_name


class TestValidateName:
    def test_returns_trimmed_name(self) -> None:
        assert validate_name("  Binder One ") == "Binder One"

    def test_empty_rejected(self) -> None:
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("   ", kind="Collection")

        assert exc_info.value.message == "Collection name cannot be empty"
        assert exc_info.value.kind == FailureKind.INVALID_INPUT

    def test_thirty_characters_allowed(self) -> None:
        assert validate_name("x" * 30) == "x" * 30

    def test_too_long_rejected(self) -> None:
        with pytest.raises(InvalidNameError, match="at most 30 characters"):
            validate_name("x" * 31, kind="Deck")

    def test_profanity_rejected(self) -> None:
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("shit deck")

        assert exc_info.value.message == "Please avoid using inappropriate language."

    def test_rejections_are_bad_request(self) -> None:
        with pytest.raises(InvalidNameError) as exc_info:
            validate_name("")

        assert exc_info.value.status_code == 400
