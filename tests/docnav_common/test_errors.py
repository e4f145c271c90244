"""Tests for the docnav exception hierarchy."""

from __future__ import annotations

import logging

import pytest

from docnav_common.errors import (
    BlankLabelError,
    BrokenLinkError,
    ConfigurationError,
    CrossSidebarDuplicateError,
    DocnavError,
    DuplicateLeafError,
    EmptyCategoryError,
    ErrorCode,
    NavigationError,
    NavigationLoadError,
    SiteConfigError,
    UnknownSidebarError,
    UnlistedDocumentError,
    get_type_uri,
)


class TestDocnavError:
    """Tests for the base exception."""

    def test_defaults(self) -> None:
        """Verify the class defaults apply."""
        error = DocnavError("boom")
        assert error.code is ErrorCode.RUNTIME_ERROR
        assert error.http_status == 500
        assert error.log_level == logging.ERROR
        assert error.context == {}

    def test_str_includes_code_and_cause(self) -> None:
        """Verify the string form names the class, code and cause."""
        error = DocnavError("boom", cause=OSError("disk"))
        assert str(error) == "DocnavError[runtime-error]: boom (caused by: OSError)"
        assert isinstance(error.__cause__, OSError)

    def test_overrides(self) -> None:
        """Verify code and status can be overridden per instance."""
        error = DocnavError("boom", code=ErrorCode.BROKEN_LINK, http_status=404, context={"k": "v"})
        problem = error.to_problem_details(title="Broken")
        assert problem["type"] == "https://docnav.dev/problems/broken-link"
        assert problem["status"] == 404
        assert problem["title"] == "Broken"
        assert problem["instance"] == "urn:docnav:broken-link"
        assert problem["k"] == "v"


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (EmptyCategoryError("e", sidebar="main"), ErrorCode.EMPTY_CATEGORY),
        (BlankLabelError("e", sidebar="main"), ErrorCode.BLANK_LABEL),
        (DuplicateLeafError("e", sidebar="main", leaf="x"), ErrorCode.DUPLICATE_LEAF),
        (
            CrossSidebarDuplicateError("e", sidebar="b", leaf="x", first_sidebar="a"),
            ErrorCode.CROSS_SIDEBAR_DUPLICATE,
        ),
        (NavigationLoadError("e"), ErrorCode.NAVIGATION_LOAD_ERROR),
        (SiteConfigError("e"), ErrorCode.SITE_CONFIG_INVALID),
        (UnknownSidebarError("e", sidebar_id="s", location="navbar.items[0]"), ErrorCode.UNKNOWN_SIDEBAR),
        (BrokenLinkError("e", target="/docs/x", doc_id="x", location="footer"), ErrorCode.BROKEN_LINK),
        (
            UnlistedDocumentError("e", target="/docs/x", doc_id="x", location="footer"),
            ErrorCode.UNLISTED_DOCUMENT,
        ),
        (ConfigurationError("e"), ErrorCode.CONFIGURATION_ERROR),
    ],
)
def test_codes_and_type_uris(error: DocnavError, code: ErrorCode) -> None:
    assert error.code is code
    assert error.to_problem_details()["type"] == get_type_uri(code)
    assert error.to_problem_details()["code"] == code.value


def test_navigation_errors_share_a_base() -> None:
    for cls in (EmptyCategoryError, BlankLabelError, DuplicateLeafError, CrossSidebarDuplicateError):
        assert issubclass(cls, NavigationError)
    assert issubclass(CrossSidebarDuplicateError, DuplicateLeafError)


def test_duplicate_leaf_context() -> None:
    error = DuplicateLeafError(
        "dup", sidebar="main", leaf="x", path=("A", "B"), index=3, first_path=("A",)
    )
    problem = error.to_problem_details()
    assert problem["instance"] == "urn:docnav:sidebar:main"
    assert problem["status"] == 422
    assert problem["path"] == ["A", "B"]
    assert problem["first_path"] == ["A"]
    assert problem["index"] == 3
    assert problem["leaf"] == "x"


def test_load_error_prefers_attached_problem() -> None:
    attached = {"type": "https://docnav.dev/problems/navigation-load-error", "jsonPointer": "/main"}
    error = NavigationLoadError("bad", source="s.yaml", problem=attached)
    assert error.to_problem_details() == attached
    assert error.to_problem_details(title="Other")["source"] == "s.yaml"
    assert error.http_status == 400


def test_unlisted_document_is_a_warning_level_broken_link() -> None:
    error = UnlistedDocumentError("unlisted", target="/docs/sprints", doc_id="sprints", location="footer")
    assert isinstance(error, BrokenLinkError)
    assert error.log_level == logging.WARNING
    assert error.to_problem_details()["doc_id"] == "sprints"
