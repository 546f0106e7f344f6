from __future__ import annotations

from user_management.security import TokenValidator, extract_token


def test_tokens_are_trimmed_deduplicated_and_combined() -> None:
    validator = TokenValidator.from_settings("  single  ", ["first", " first ", "", "   ", None, "second"])

    assert validator.has_configured_tokens
    assert validator.is_valid("single")
    assert validator.is_valid("first")
    assert validator.is_valid("  second ")
    assert not validator.is_valid("third")


def test_comparison_is_case_sensitive() -> None:
    validator = TokenValidator(["Secret-Token"])

    assert validator.is_valid("Secret-Token")
    assert not validator.is_valid("secret-token")
    assert not validator.is_valid("Secret-Token-extra")


def test_blank_tokens_are_never_valid() -> None:
    validator = TokenValidator(["token"])

    assert not validator.is_valid("")
    assert not validator.is_valid("   ")
    assert not validator.is_valid(None)


def test_empty_configuration_reports_no_tokens() -> None:
    validator = TokenValidator.from_settings(None, ["", "  "])

    assert not validator.has_configured_tokens
    assert not validator.is_valid("anything")


def test_extract_token_strips_only_the_bearer_scheme() -> None:
    assert extract_token("Bearer abc") == "abc"
    assert extract_token("bEaReR   abc  ") == "abc"
    assert extract_token("  abc ") == "abc"
    assert extract_token("bearertoken123") == "bearertoken123"
    assert extract_token(None) == ""
