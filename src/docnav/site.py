"""Site configuration models and their cross-checks against a navigation tree.

The models mirror the parts of the site generator's configuration that refer
to navigation: site metadata, i18n, the navbar and the footer. Input keys may
use the generator's camelCase spelling (``baseUrl``, ``sidebarId``) or snake
case. ``navbar`` and ``footer`` are also picked up from a ``themeConfig``
block, which is where the generator keeps them.

:func:`check_site` lists the references that do not resolve against a tree;
:func:`enforce_site` applies the site's ``onBrokenLinks`` policy to them.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Self
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from docnav.loader import read_document
from docnav_common.errors import (
    BrokenLinkError,
    DocnavError,
    NavigationLoadError,
    SiteConfigError,
    UnknownSidebarError,
    UnlistedDocumentError,
)
from docnav_common.logging import get_logger
from docnav_common.problem_details import validation_error_dicts
from docnav_common.settings import get_settings

if TYPE_CHECKING:
    from docnav.models import NavigationTree

__all__ = [
    "BrokenLinkPolicy",
    "Footer",
    "FooterColumn",
    "FooterLink",
    "I18nConfig",
    "IssueSeverity",
    "Logo",
    "Navbar",
    "NavbarItem",
    "SiteConfig",
    "SiteIssue",
    "SiteIssueKind",
    "check_site",
    "discover_documents",
    "doc_routes",
    "enforce_site",
    "issue_severity",
    "load_site_config",
]

LOGGER = get_logger(__name__)

_DOCUMENT_SUFFIXES = frozenset({".md", ".mdx"})


class BrokenLinkPolicy(StrEnum):
    """Reaction to a link whose target does not exist."""

    THROW = "throw"
    WARN = "warn"
    IGNORE = "ignore"


class _SiteModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


def _exactly_one_target(to: str | None, href: str | None, label: str) -> None:
    if (to is None) == (href is None):
        message = f"link {label!r} needs exactly one of 'to' or 'href'"
        raise ValueError(message)


class Logo(_SiteModel):
    """Navbar logo."""

    alt: str
    src: str


class NavbarItem(_SiteModel):
    """One navbar entry: a sidebar tab, a single document, or a link."""

    type: Literal["docSidebar", "doc", "link"] = "link"
    label: str
    position: Literal["left", "right"] = "left"
    sidebar_id: str | None = Field(default=None, alias="sidebarId")
    doc_id: str | None = Field(default=None, alias="docId")
    to: str | None = None
    href: str | None = None

    @model_validator(mode="after")
    def _check_target(self) -> Self:
        if self.type == "docSidebar":
            if not self.sidebar_id:
                message = f"docSidebar item {self.label!r} needs a sidebarId"
                raise ValueError(message)
        elif self.type == "doc":
            if not self.doc_id:
                message = f"doc item {self.label!r} needs a docId"
                raise ValueError(message)
        else:
            _exactly_one_target(self.to, self.href, self.label)
        return self


class Navbar(_SiteModel):
    """Top navigation bar."""

    title: str
    logo: Logo | None = None
    items: tuple[NavbarItem, ...] = ()


class FooterLink(_SiteModel):
    """Footer link to a site route (``to``) or an external URL (``href``)."""

    label: str
    to: str | None = None
    href: str | None = None

    @model_validator(mode="after")
    def _check_target(self) -> Self:
        _exactly_one_target(self.to, self.href, self.label)
        return self


class FooterColumn(_SiteModel):
    """Titled column of footer links."""

    title: str
    items: tuple[FooterLink, ...] = ()


class Footer(_SiteModel):
    """Page footer."""

    style: Literal["dark", "light"] = "dark"
    links: tuple[FooterColumn, ...] = ()
    copyright: str | None = None

    def render_copyright(self, year: int | None = None) -> str | None:
        """Return the copyright line with ``{year}`` replaced.

        Parameters
        ----------
        year : int | None, optional
            Year to substitute. Defaults to the current UTC year.

        Returns
        -------
        str | None
            Rendered line, or ``None`` when the footer has no copyright.
        """
        if self.copyright is None:
            return None
        resolved = year if year is not None else dt.datetime.now(tz=dt.UTC).year
        return self.copyright.replace("{year}", str(resolved))


class I18nConfig(_SiteModel):
    """Locales the site is built for."""

    default_locale: str = Field(default="en", alias="defaultLocale")
    locales: tuple[str, ...] = ("en",)

    @model_validator(mode="after")
    def _default_is_listed(self) -> Self:
        if self.default_locale not in self.locales:
            message = f"default locale {self.default_locale!r} is not listed in locales"
            raise ValueError(message)
        return self


class SiteConfig(_SiteModel):
    """Navigation-relevant part of a site generator configuration.

    Examples
    --------
    >>> site = SiteConfig.model_validate(
    ...     {"title": "Docs", "url": "https://example.org", "baseUrl": "/docs-site/"}
    ... )
    >>> site.on_broken_links
    <BrokenLinkPolicy.THROW: 'throw'>
    """

    title: str
    tagline: str = ""
    favicon: str | None = None
    url: str
    base_url: str = Field(default="/", alias="baseUrl")
    organization_name: str | None = Field(default=None, alias="organizationName")
    project_name: str | None = Field(default=None, alias="projectName")
    on_broken_links: BrokenLinkPolicy = Field(default=BrokenLinkPolicy.THROW, alias="onBrokenLinks")
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    navbar: Navbar | None = None
    footer: Footer | None = None

    @model_validator(mode="before")
    @classmethod
    def _hoist_theme_config(cls, data: object) -> object:
        if not isinstance(data, Mapping):
            return data
        theme = data.get("themeConfig", data.get("theme_config"))
        if not isinstance(theme, Mapping):
            return data
        merged = dict(data)
        for key in ("navbar", "footer"):
            if key in theme and key not in merged:
                merged[key] = theme[key]
        return merged

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            message = f"url must be an http(s) origin, got {value!r}"
            raise ValueError(message)
        if parts.path not in {"", "/"}:
            message = f"url must not contain a path (put it in baseUrl), got {value!r}"
            raise ValueError(message)
        return value.rstrip("/")

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not (value.startswith("/") and value.endswith("/")):
            message = f"baseUrl must start and end with '/', got {value!r}"
            raise ValueError(message)
        return value


class SiteIssueKind(StrEnum):
    """Kinds of unresolved site reference."""

    UNKNOWN_SIDEBAR = "unknown-sidebar"
    BROKEN_LINK = "broken-link"
    UNLISTED_DOCUMENT = "unlisted-document"


class IssueSeverity(StrEnum):
    """How a site issue affects a check."""

    ERROR = "error"
    WARNING = "warning"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class SiteIssue:
    """A site reference that does not resolve against the tree.

    Attributes
    ----------
    kind : SiteIssueKind
        What kind of reference failed.
    location : str
        Dotted location inside the configuration, e.g. ``footer.links[0].items[1]``.
    target : str
        Sidebar id or link target as written.
    doc_id : str | None
        Document id derived from a link target.
    """

    kind: SiteIssueKind
    location: str
    target: str
    doc_id: str | None = None

    @property
    def message(self) -> str:
        """Human-readable description."""
        if self.kind is SiteIssueKind.UNKNOWN_SIDEBAR:
            return f"{self.location}: navbar references unknown sidebar {self.target!r}"
        if self.kind is SiteIssueKind.BROKEN_LINK:
            reason = "which does not exist"
        else:
            reason = "which no sidebar references"
        return f"{self.location}: link {self.target!r} points to document {self.doc_id!r}, {reason}"

    def to_error(self) -> DocnavError:
        """Return the exception matching this issue."""
        if self.kind is SiteIssueKind.UNKNOWN_SIDEBAR:
            return UnknownSidebarError(self.message, sidebar_id=self.target, location=self.location)
        error_type = (
            BrokenLinkError if self.kind is SiteIssueKind.BROKEN_LINK else UnlistedDocumentError
        )
        return error_type(
            self.message, target=self.target, doc_id=self.doc_id or "", location=self.location
        )


def issue_severity(issue: SiteIssue, policy: BrokenLinkPolicy) -> IssueSeverity:
    """Return how ``issue`` counts under the site's broken-link ``policy``.

    Unknown sidebars are always errors and unlisted documents always warnings;
    only broken links follow ``policy``.

    Examples
    --------
    >>> issue = SiteIssue(SiteIssueKind.UNLISTED_DOCUMENT, "footer", "/docs/x", "x")
    >>> issue_severity(issue, BrokenLinkPolicy.THROW)
    <IssueSeverity.WARNING: 'warning'>
    """
    if issue.kind is SiteIssueKind.UNKNOWN_SIDEBAR:
        return IssueSeverity.ERROR
    if issue.kind is SiteIssueKind.UNLISTED_DOCUMENT:
        return IssueSeverity.WARNING
    if policy is BrokenLinkPolicy.THROW:
        return IssueSeverity.ERROR
    if policy is BrokenLinkPolicy.WARN:
        return IssueSeverity.WARNING
    return IssueSeverity.IGNORED


def _with_index_aliases(doc_ids: Iterable[str]) -> frozenset[str]:
    routes: set[str] = set()
    for doc_id in doc_ids:
        routes.add(doc_id)
        if doc_id.endswith("/index"):
            routes.add(doc_id.removesuffix("/index"))
    return frozenset(routes)


def doc_routes(tree: NavigationTree) -> frozenset[str]:
    """Return the document ids reachable through any sidebar.

    A document whose id ends in ``/index`` is also reachable under its parent
    id, the way the site generator serves it.
    """
    return _with_index_aliases(tree.leaves())


def discover_documents(docs_dir: Path | str) -> frozenset[str]:
    """Return the ids of the Markdown documents under ``docs_dir``.

    An id is the path relative to ``docs_dir`` without its suffix, with ``/``
    separators, e.g. ``sprints/sprint-1/objetivos``.

    Raises
    ------
    SiteConfigError
        If ``docs_dir`` is not a directory.
    """
    root = Path(docs_dir)
    if not root.is_dir():
        message = f"{root}: documents directory does not exist"
        raise SiteConfigError(message, source=str(root))
    return frozenset(
        path.relative_to(root).with_suffix("").as_posix()
        for path in root.rglob("*")
        if path.suffix in _DOCUMENT_SUFFIXES and path.is_file()
    )


def _doc_id_for(target: str, route_base: str) -> str | None:
    path = target.split("#", 1)[0].split("?", 1)[0]
    if not path.startswith(route_base):
        return None
    doc_id = path[len(route_base) :].strip("/")
    return doc_id or None


def check_site(
    site: SiteConfig,
    tree: NavigationTree,
    *,
    docs_route_base: str | None = None,
    documents: Collection[str] | None = None,
) -> list[SiteIssue]:
    """List navbar and footer references that do not resolve against ``tree``.

    A document that no sidebar references still gets a page, so such links
    are reported as unlisted documents. They are broken links only when
    ``documents`` is given and does not contain them.

    Parameters
    ----------
    site : SiteConfig
        Site configuration to check.
    tree : NavigationTree
        Tree the site will be built with.
    docs_route_base : str | None, optional
        Route prefix of documents. Defaults to the configured ``docs_route_base``.
    documents : Collection[str] | None, optional
        Ids of every existing document, see :func:`discover_documents`.
        Defaults to None, in which case no link is known to be broken.

    Returns
    -------
    list[SiteIssue]
        Issues in configuration order: navbar first, then footer.
    """
    route_base = docs_route_base if docs_route_base is not None else get_settings().docs_route_base
    sidebars = set(tree.names())
    routes = doc_routes(tree)
    existing = _with_index_aliases(documents) if documents is not None else None
    issues: list[SiteIssue] = []

    def _check_doc(location: str, target: str, doc_id: str) -> None:
        if doc_id in routes:
            return
        if existing is not None and doc_id not in existing:
            kind = SiteIssueKind.BROKEN_LINK
        else:
            kind = SiteIssueKind.UNLISTED_DOCUMENT
        issues.append(SiteIssue(kind, location, target, doc_id))

    def _check_link(location: str, to: str | None) -> None:
        if to is None:
            return
        doc_id = _doc_id_for(to, route_base)
        if doc_id is not None:
            _check_doc(location, to, doc_id)

    if site.navbar is not None:
        for index, item in enumerate(site.navbar.items):
            location = f"navbar.items[{index}]"
            if item.type == "docSidebar":
                if item.sidebar_id not in sidebars:
                    issues.append(
                        SiteIssue(SiteIssueKind.UNKNOWN_SIDEBAR, location, item.sidebar_id or "")
                    )
            elif item.type == "doc":
                _check_doc(location, item.doc_id or "", item.doc_id or "")
            else:
                _check_link(location, item.to)

    if site.footer is not None:
        for col_index, column in enumerate(site.footer.links):
            for item_index, link in enumerate(column.items):
                _check_link(f"footer.links[{col_index}].items[{item_index}]", link.to)

    return issues


def enforce_site(
    site: SiteConfig,
    tree: NavigationTree,
    *,
    docs_route_base: str | None = None,
    documents: Collection[str] | None = None,
) -> list[SiteIssue]:
    """Apply :func:`issue_severity` to the issues found by :func:`check_site`.

    Unknown sidebars are always fatal and unlisted documents always warn.
    Broken links raise under ``throw``, are logged and returned under
    ``warn`` and dropped under ``ignore``.

    Returns
    -------
    list[SiteIssue]
        Issues tolerated at warning level, each logged once.

    Raises
    ------
    UnknownSidebarError
        If the navbar names a sidebar that ``tree`` does not define.
    BrokenLinkError
        If a link is broken and the policy is ``throw``.
    """
    issues = check_site(site, tree, docs_route_base=docs_route_base, documents=documents)
    severities = [(issue, issue_severity(issue, site.on_broken_links)) for issue in issues]
    errors = [issue for issue, severity in severities if severity is IssueSeverity.ERROR]
    if errors:
        # Unknown sidebars take precedence over broken links.
        errors.sort(key=lambda issue: issue.kind is not SiteIssueKind.UNKNOWN_SIDEBAR)
        raise errors[0].to_error()
    warnings = [issue for issue, severity in severities if severity is IssueSeverity.WARNING]
    for issue in warnings:
        LOGGER.warning(
            issue.message,
            extra={
                "operation": "check_site",
                "kind": issue.kind.value,
                "location": issue.location,
                "target": issue.target,
            },
        )
    return warnings


def load_site_config(path: Path | str) -> SiteConfig:
    """Read and validate the site configuration file at ``path``.

    Raises
    ------
    SiteConfigError
        If the file cannot be read or does not describe a valid site.
    """
    target = Path(path)
    try:
        payload = read_document(target)
    except NavigationLoadError as exc:
        raise SiteConfigError(exc.message, source=str(target), cause=exc) from exc
    try:
        site = SiteConfig.model_validate(payload)
    except ValidationError as exc:
        errors = list(validation_error_dicts(exc))
        message = f"{target}: invalid site configuration ({len(errors)} error(s))"
        raise SiteConfigError(message, source=str(target), errors=errors, cause=exc) from exc
    LOGGER.info("Loaded site configuration", extra={"operation": "load", "source": str(target)})
    return site
