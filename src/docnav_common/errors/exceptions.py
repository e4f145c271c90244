"""Typed exception hierarchy with Problem Details support.

All docnav exceptions inherit from :class:`DocnavError`, which carries a
stable :class:`~docnav_common.errors.codes.ErrorCode`, an HTTP-style status,
a log level and structured context, and converts itself to an RFC 9457
Problem Details payload.

Examples
--------
>>> from docnav_common.errors import DuplicateLeafError, ErrorCode
>>> try:
...     raise DuplicateLeafError("duplicate leaf 'intro'", sidebar="main", leaf="intro")
... except DuplicateLeafError as e:
...     assert e.code == ErrorCode.DUPLICATE_LEAF
...     details = e.to_problem_details()
...     assert details["sidebar"] == "main"
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, ClassVar, cast

from docnav_common.errors.codes import ErrorCode, get_type_uri
from docnav_common.problem_details import ProblemDetailsParams, build_problem_details

if TYPE_CHECKING:
    from docnav_common.problem_details import JsonValue, ProblemDetailsDict

__all__ = [
    "BlankLabelError",
    "BrokenLinkError",
    "ConfigurationError",
    "CrossSidebarDuplicateError",
    "DocnavError",
    "DuplicateLeafError",
    "EmptyCategoryError",
    "NavigationError",
    "NavigationLoadError",
    "SiteConfigError",
    "UnknownSidebarError",
    "UnlistedDocumentError",
]


class DocnavError(Exception):
    """Base exception for all docnav errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode | None, optional
        Error code; defaults to the class-level ``default_code``.
    http_status : int | None, optional
        Status used in Problem Details; defaults to ``default_status``.
    log_level : int, optional
        Level at which callers should log the error. Defaults to ``logging.ERROR``.
    cause : Exception | None, optional
        Underlying exception, chained as ``__cause__``.
    context : Mapping[str, object] | None, optional
        Structured context exported as Problem Details extensions.

    Examples
    --------
    >>> error = DocnavError("Operation failed")
    >>> error.to_problem_details()["status"]
    500
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.RUNTIME_ERROR
    default_status: ClassVar[int] = 500

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        http_status: int | None = None,
        log_level: int = logging.ERROR,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else self.default_code
        self.http_status = http_status if http_status is not None else self.default_status
        self.log_level = log_level
        self.context: dict[str, object] = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetailsDict:
        """Convert to an RFC 9457 Problem Details payload.

        Parameters
        ----------
        instance : str | None, optional
            URI identifying the occurrence. Defaults to ``urn:docnav:<code>``.
        title : str | None, optional
            Short summary. Defaults to the exception class name.

        Returns
        -------
        ProblemDetailsDict
            Payload with ``type``, ``title``, ``status``, ``detail``,
            ``instance``, ``code`` and the error context as extensions.
        """
        extensions: dict[str, JsonValue] = {"code": self.code.value}
        extensions.update(cast("Mapping[str, JsonValue]", self.context))
        return build_problem_details(
            ProblemDetailsParams(
                type=get_type_uri(self.code),
                title=title or self.__class__.__name__,
                status=self.http_status,
                detail=self.message,
                instance=instance or f"urn:docnav:{self.code.value}",
                extensions=extensions,
            )
        )

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


class NavigationError(DocnavError):
    """Structural violation located inside one sidebar.

    Parameters
    ----------
    message : str
        Human-readable description including the location.
    sidebar : str
        Name of the sidebar holding the offending entry.
    path : Sequence[str], optional
        Labels of the enclosing categories, outermost first.
    index : int | None, optional
        Position of the offending entry within its parent.
    context : Mapping[str, object] | None, optional
        Additional structured context.
    """

    default_status: ClassVar[int] = 422

    def __init__(
        self,
        message: str,
        *,
        sidebar: str,
        path: Sequence[str] = (),
        index: int | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        self.sidebar = sidebar
        self.path: tuple[str, ...] = tuple(path)
        self.index = index
        merged: dict[str, object] = {"sidebar": sidebar, "path": list(self.path)}
        if index is not None:
            merged["index"] = index
        if context:
            merged.update(context)
        super().__init__(message, context=merged)

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetailsDict:
        """Return Problem Details whose instance names the sidebar."""
        return super().to_problem_details(
            instance=instance or f"urn:docnav:sidebar:{self.sidebar}",
            title=title,
        )


class EmptyCategoryError(NavigationError):
    """A category declares no items."""

    default_code: ClassVar[ErrorCode] = ErrorCode.EMPTY_CATEGORY


class BlankLabelError(NavigationError):
    """A category label is empty or whitespace-only."""

    default_code: ClassVar[ErrorCode] = ErrorCode.BLANK_LABEL


class DuplicateLeafError(NavigationError):
    """A document is referenced twice within one sidebar.

    Parameters
    ----------
    message : str
        Human-readable description including both locations.
    sidebar : str
        Sidebar holding the second reference.
    leaf : str
        Duplicated document id.
    path : Sequence[str], optional
        Labels enclosing the second reference.
    index : int | None, optional
        Position of the second reference within its parent.
    first_path : Sequence[str], optional
        Labels enclosing the first reference.
    context : Mapping[str, object] | None, optional
        Additional structured context.
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.DUPLICATE_LEAF

    def __init__(
        self,
        message: str,
        *,
        sidebar: str,
        leaf: str,
        path: Sequence[str] = (),
        index: int | None = None,
        first_path: Sequence[str] = (),
        context: Mapping[str, object] | None = None,
    ) -> None:
        self.leaf = leaf
        self.first_path: tuple[str, ...] = tuple(first_path)
        merged: dict[str, object] = {"leaf": leaf, "first_path": list(self.first_path)}
        if context:
            merged.update(context)
        super().__init__(message, sidebar=sidebar, path=path, index=index, context=merged)


class CrossSidebarDuplicateError(DuplicateLeafError):
    """A document is referenced by two sidebars while that is disallowed."""

    default_code: ClassVar[ErrorCode] = ErrorCode.CROSS_SIDEBAR_DUPLICATE

    def __init__(
        self,
        message: str,
        *,
        sidebar: str,
        leaf: str,
        first_sidebar: str,
        path: Sequence[str] = (),
        index: int | None = None,
        first_path: Sequence[str] = (),
    ) -> None:
        self.first_sidebar = first_sidebar
        super().__init__(
            message,
            sidebar=sidebar,
            leaf=leaf,
            path=path,
            index=index,
            first_path=first_path,
            context={"first_sidebar": first_sidebar},
        )


class NavigationLoadError(DocnavError):
    """A sidebars document could not be read or has the wrong shape.

    Parameters
    ----------
    message : str
        Human-readable error message.
    source : str | None, optional
        File the document came from, when known.
    problem : ProblemDetailsDict | None, optional
        Pre-built Problem Details (for instance from a schema failure).
    cause : Exception | None, optional
        Underlying exception.
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.NAVIGATION_LOAD_ERROR
    default_status: ClassVar[int] = 400

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        problem: ProblemDetailsDict | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.source = source
        self.problem = problem
        context: dict[str, object] = {}
        if source is not None:
            context["source"] = source
        super().__init__(message, cause=cause, context=context)

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetailsDict:
        """Return the attached schema problem when present, else the default payload."""
        if self.problem is not None and instance is None and title is None:
            return dict(self.problem)
        return super().to_problem_details(instance=instance, title=title)


class SiteConfigError(DocnavError):
    """A site configuration document failed validation.

    Parameters
    ----------
    message : str
        Human-readable error message.
    source : str | None, optional
        File the configuration came from, when known.
    errors : Sequence[Mapping[str, object]], optional
        Individual validation errors.
    cause : Exception | None, optional
        Underlying exception.
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.SITE_CONFIG_INVALID
    default_status: ClassVar[int] = 422

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        errors: Sequence[Mapping[str, object]] = (),
        cause: Exception | None = None,
    ) -> None:
        self.source = source
        self.errors: tuple[dict[str, object], ...] = tuple(dict(err) for err in errors)
        context: dict[str, object] = {"errors": list(self.errors)}
        if source is not None:
            context["source"] = source
        super().__init__(message, cause=cause, context=context)


class UnknownSidebarError(DocnavError):
    """The navbar references a sidebar that the tree does not define."""

    default_code: ClassVar[ErrorCode] = ErrorCode.UNKNOWN_SIDEBAR
    default_status: ClassVar[int] = 422

    def __init__(self, message: str, *, sidebar_id: str, location: str) -> None:
        self.sidebar_id = sidebar_id
        self.location = location
        super().__init__(message, context={"sidebar_id": sidebar_id, "location": location})


class BrokenLinkError(DocnavError):
    """A navbar or footer link targets a document that does not exist."""

    default_code: ClassVar[ErrorCode] = ErrorCode.BROKEN_LINK
    default_status: ClassVar[int] = 422

    def __init__(self, message: str, *, target: str, doc_id: str, location: str) -> None:
        self.target = target
        self.doc_id = doc_id
        self.location = location
        super().__init__(
            message,
            context={"target": target, "doc_id": doc_id, "location": location},
        )


class ConfigurationError(DocnavError):
    """Runtime configuration is invalid."""

    default_code: ClassVar[ErrorCode] = ErrorCode.CONFIGURATION_ERROR
    default_status: ClassVar[int] = 500


class UnlistedDocumentError(BrokenLinkError):
    """A navbar or footer link targets a document that no sidebar references.

    The site generator still builds a page for such a document, so this is
    reported at warning level and never fails a check.
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.UNLISTED_DOCUMENT

    def __init__(self, message: str, *, target: str, doc_id: str, location: str) -> None:
        super().__init__(message, target=target, doc_id=doc_id, location=location)
        self.log_level = logging.WARNING
