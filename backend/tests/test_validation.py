"""Tests for the boundary validators."""

from bson import ObjectId

from wellness.validation import (
    SessionInput,
    clean_tags,
    is_valid_url,
    validate_login,
    validate_registration,
    validate_session_payload,
)


def _fields(result) -> set[str]:
    return {error.field for error in result.errors}


class TestRegistration:
    def test_valid_registration_normalizes_email(self) -> None:
        result = validate_registration("  A@X.com ", "secret1")
        assert result.ok
        assert result.value == "a@x.com"

    def test_malformed_email_and_short_password(self) -> None:
        result = validate_registration("not-an-email", "123")
        assert not result.ok
        assert _fields(result) == {"email", "password"}

    def test_password_of_exactly_six_chars_is_enough(self) -> None:
        assert validate_registration("a@x.com", "123456").ok


class TestLogin:
    def test_password_required(self) -> None:
        result = validate_login("a@x.com", "")
        assert _fields(result) == {"password"}

    def test_short_password_is_not_a_login_error(self) -> None:
        # Length rules only apply at registration
        assert validate_login("a@x.com", "x").ok


class TestSessionPayload:
    def test_cleans_fields(self) -> None:
        result = validate_session_payload(
            title="  Evening Wind-down ",
            json_file_url=" https://x.example/y.json ",
            tags=[" sleep ", "", "   ", "calm"],
        )
        assert result.ok
        assert result.value == SessionInput(
            title="Evening Wind-down",
            tags=["sleep", "calm"],
            json_file_url="https://x.example/y.json",
        )

    def test_title_required(self) -> None:
        result = validate_session_payload(title="   ", json_file_url="https://x/y.json")
        assert _fields(result) == {"title"}

    def test_title_length_limit(self) -> None:
        assert validate_session_payload(
            title="t" * 200, json_file_url="https://x/y.json"
        ).ok
        result = validate_session_payload(
            title="t" * 201, json_file_url="https://x/y.json"
        )
        assert _fields(result) == {"title"}

    def test_url_required_and_must_be_http(self) -> None:
        assert _fields(validate_session_payload(title="T", json_file_url=None)) == {
            "json_file_url"
        }
        result = validate_session_payload(title="T", json_file_url="ftp://x/y.json")
        assert result.errors[0].message == "Please enter a valid URL"

    def test_tag_length_limit(self) -> None:
        result = validate_session_payload(
            title="T", json_file_url="https://x/y.json", tags=["ok", "t" * 51]
        )
        assert _fields(result) == {"tags.1"}

    def test_tag_errors_point_at_submitted_position(self) -> None:
        result = validate_session_payload(
            title="T", json_file_url="https://x/y.json", tags=["  ", "t" * 51]
        )
        assert _fields(result) == {"tags.1"}

    def test_session_id_must_be_object_id(self) -> None:
        bad = validate_session_payload(
            title="T", json_file_url="https://x/y.json", session_id="123"
        )
        assert _fields(bad) == {"id"}

        good_id = str(ObjectId())
        good = validate_session_payload(
            title="T", json_file_url="https://x/y.json", session_id=good_id
        )
        assert good.value.id == good_id


def test_clean_tags_handles_none() -> None:
    assert clean_tags(None) == []


def test_is_valid_url() -> None:
    assert is_valid_url("http://example.com/a.json")
    assert is_valid_url("HTTPS://example.com")
    assert not is_valid_url("https://")
    assert not is_valid_url("example.com/a.json")
