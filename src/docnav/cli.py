"""Command line interface for checking and exporting sidebars files.

Every command records its outcome in a CLI envelope; when
``DOCNAV_ENVELOPE_DIR`` is set the envelope is written there as
``docnav-<command>.json``. Commands exit with status 0 on success and 1 on
any violation, load error or configuration error.
"""

from __future__ import annotations

import time
import uuid
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Literal

import typer

from docnav.cli_envelope import CliEnvelope, CliEnvelopeBuilder, render_cli_envelope
from docnav.config import CheckOptions, ExportOptions
from docnav.loader import dump_tree, format_for_path, load_tree
from docnav.site import (
    IssueSeverity,
    check_site,
    discover_documents,
    issue_severity,
    load_site_config,
)
from docnav.validator import iter_violations
from docnav_common.errors import DocnavError, ErrorCode, get_type_uri
from docnav_common.logging import CorrelationContext, get_logger, setup_logging, with_fields
from docnav_common.problem_details import (
    ExceptionProblemDetailsParams,
    ProblemDetailsParams,
    problem_from_exception,
    render_problem,
)
from docnav_common.settings import CrossSidebarPolicy, SettingsError, get_settings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from docnav.loader import TreeFormat
    from docnav.models import NavigationTree
    from docnav.site import SiteConfig
    from docnav.validator import Violation
    from docnav_common.logging import LoggerAdapter

__all__ = [
    "CLI_COMMAND",
    "ExportFormat",
    "app",
    "check",
    "export",
    "leaves",
    "run_check",
    "run_export",
    "run_leaves",
]

CLI_COMMAND = "docnav"
LOGGER = get_logger(__name__)

app = typer.Typer(
    help="Validate and export documentation sidebars.",
    no_args_is_help=True,
    add_completion=False,
)


class ExportFormat(StrEnum):
    """Serialization formats accepted by ``docnav export``."""

    JSON = "json"
    YAML = "yaml"


@app.callback()
def main() -> None:
    """Configure logging from the environment before any command runs.

    Raises
    ------
    typer.Exit
        With code 1 when the ``DOCNAV_*`` settings are invalid.
    """
    try:
        settings = get_settings()
    except SettingsError as exc:
        typer.echo(render_problem(exc.problem), err=True)
        raise typer.Exit(code=1) from exc
    setup_logging(settings.log_level)


def _write_envelope(envelope: CliEnvelope, logger: LoggerAdapter) -> Path | None:
    envelope_dir = get_settings().envelope_dir
    if envelope_dir is None:
        return None
    envelope_dir.mkdir(parents=True, exist_ok=True)
    path = envelope_dir / f"{CLI_COMMAND}-{envelope.subcommand}.json"
    path.write_text(render_cli_envelope(envelope) + "\n", encoding="utf-8")
    logger.debug("Wrote CLI envelope", extra={"cli_envelope": str(path)})
    return path


def _finish(builder: CliEnvelopeBuilder, start: float, logger: LoggerAdapter) -> CliEnvelope:
    duration = time.monotonic() - start
    envelope = builder.finish(duration_seconds=duration)
    _write_envelope(envelope, logger)
    duration_ms = round(duration * 1000, 3)
    if envelope.status == "success":
        logger.log_success("Command completed", duration_ms=duration_ms)
    else:
        logger.log_failure(
            "Command failed",
            duration_ms=duration_ms,
            status=envelope.status,
            error_count=len(envelope.errors),
        )
    return envelope


def _start(subcommand: str) -> tuple[CorrelationContext, CliEnvelopeBuilder]:
    correlation = CorrelationContext(uuid.uuid4().hex)
    builder = CliEnvelopeBuilder.create(
        command=CLI_COMMAND,
        subcommand=subcommand,
        correlation_id=correlation.correlation_id,
    )
    return correlation, builder


def _record_error(
    builder: CliEnvelopeBuilder,
    exc: DocnavError,
    *,
    file: str,
    status: Literal["error", "config"] = "error",
) -> None:
    problem = exc.to_problem_details()
    builder.add_error(status=status, message=exc.message, file=file, problem=problem)
    builder.add_file(path=file, status="error", message=exc.message)
    builder.set_status(status)
    builder.set_problem(problem)
    typer.echo(f"error: {exc.message}", err=True)


def _record_write_error(builder: CliEnvelopeBuilder, exc: OSError, *, file: str) -> None:
    problem = problem_from_exception(
        ExceptionProblemDetailsParams(
            base=ProblemDetailsParams(
                type=get_type_uri(ErrorCode.RUNTIME_ERROR),
                title="Output not written",
                status=500,
                detail="",
                instance=f"urn:docnav:output:{file}",
            ),
            exception=exc,
            extensions={"code": ErrorCode.RUNTIME_ERROR.value, "path": file},
        )
    )
    message = f"cannot write {file}: {exc.strerror or exc}"
    builder.add_error(status="error", message=message, file=file, problem=problem)
    builder.add_file(path=file, status="error", message=message)
    builder.set_status("error")
    builder.set_problem(problem)
    typer.echo(f"error: {message}", err=True)


def _record_violations(
    builder: CliEnvelopeBuilder,
    violations: Sequence[Violation],
    *,
    source: str,
    err: bool = False,
) -> None:
    for violation in violations:
        builder.add_error(
            status="violation",
            message=violation.message,
            file=source,
            problem=violation.to_error().to_problem_details(),
        )
        typer.echo(f"{source}: {violation.message}", err=err)
    if violations:
        builder.add_file(path=source, status="violation", message=f"{len(violations)} violation(s)")
    else:
        builder.add_file(path=source, status="success")


def _check_site_file(
    builder: CliEnvelopeBuilder,
    site: SiteConfig,
    tree: NavigationTree,
    *,
    source: str,
    documents: frozenset[str] | None,
    logger: LoggerAdapter,
) -> int:
    failures = 0
    for issue in check_site(site, tree, documents=documents):
        severity = issue_severity(issue, site.on_broken_links)
        if severity is IssueSeverity.ERROR:
            failures += 1
            builder.add_error(
                status="violation",
                message=issue.message,
                file=source,
                problem=issue.to_error().to_problem_details(),
            )
            typer.echo(f"{source}: {issue.message}")
        elif severity is IssueSeverity.WARNING:
            logger.warning(
                issue.message,
                extra={"kind": issue.kind.value, "location": issue.location, "target": issue.target},
            )
            typer.echo(f"{source}: warning: {issue.message}")
    if failures:
        builder.add_file(
            path=source, status="violation", message=f"{failures} unresolved reference(s)"
        )
    else:
        builder.add_file(path=source, status="success")
    return failures


def _set_first_problem(builder: CliEnvelopeBuilder) -> None:
    first_problem = builder.envelope.errors[0].problem
    builder.set_problem(first_problem if isinstance(first_problem, dict) else None)


def run_check(options: CheckOptions) -> CliEnvelope:
    """Load, validate and optionally cross-check a sidebars file.

    Each violation is printed on its own line. Nothing is raised: load and
    configuration failures are recorded in the returned envelope.

    Parameters
    ----------
    options : CheckOptions
        What to check.

    Returns
    -------
    CliEnvelope
        Outcome of the run; ``status`` is ``"success"`` when nothing was found.
    """
    start = time.monotonic()
    source = str(options.sidebars)
    correlation, builder = _start("check")
    with correlation, with_fields(LOGGER, operation="check", sidebars=source) as logger:
        try:
            tree = load_tree(options.sidebars)
        except DocnavError as exc:
            _record_error(builder, exc, file=source)
            return _finish(builder, start, logger)

        violations = list(iter_violations(tree, cross_sidebar=options.cross_sidebar))
        _record_violations(builder, violations, source=source)
        failures = len(violations)

        if options.site is not None:
            site_source = str(options.site)
            try:
                site = load_site_config(options.site)
                documents = discover_documents(options.docs) if options.docs is not None else None
            except DocnavError as exc:
                _record_error(builder, exc, file=site_source, status="config")
                return _finish(builder, start, logger)
            failures += _check_site_file(
                builder, site, tree, source=site_source, documents=documents, logger=logger
            )

        if failures:
            builder.set_status("violation")
            _set_first_problem(builder)
        else:
            documents_count = sum(1 for _ in tree.leaves())
            typer.echo(
                f"OK: {source} ({len(tree.names())} sidebar(s), {documents_count} document(s))"
            )
        return _finish(builder, start, logger)


def _resolve_format(options: ExportOptions, explicit: bool) -> TreeFormat:
    if explicit or options.output is None:
        return options.fmt
    return format_for_path(options.output)


def run_export(options: ExportOptions, *, explicit_format: bool = True) -> CliEnvelope:
    """Validate a sidebars file and write its normalised form.

    Parameters
    ----------
    options : ExportOptions
        Source, format and destination. Output goes to stdout when
        ``options.output`` is ``None``.
    explicit_format : bool, optional
        When ``False`` the format is taken from the output suffix instead of
        ``options.fmt``. Defaults to ``True``.

    Returns
    -------
    CliEnvelope
        Outcome of the run.
    """
    start = time.monotonic()
    source = str(options.sidebars)
    correlation, builder = _start("export")
    with correlation, with_fields(LOGGER, operation="export", sidebars=source) as logger:
        try:
            tree = load_tree(options.sidebars)
            fmt = _resolve_format(options, explicit_format)
        except DocnavError as exc:
            _record_error(builder, exc, file=source)
            return _finish(builder, start, logger)

        violations = list(iter_violations(tree))
        if violations:
            _record_violations(builder, violations, source=source, err=True)
            builder.set_status("violation")
            _set_first_problem(builder)
            return _finish(builder, start, logger)

        rendered = dump_tree(tree, fmt)
        if options.output is None:
            typer.echo(rendered, nl=False)
            builder.add_file(path="<stdout>", status="success", message=f"exported as {fmt}")
            return _finish(builder, start, logger)

        target = str(options.output)
        try:
            options.output.parent.mkdir(parents=True, exist_ok=True)
            options.output.write_text(rendered, encoding="utf-8")
        except OSError as exc:
            _record_write_error(builder, exc, file=target)
            return _finish(builder, start, logger)
        builder.add_file(path=target, status="success", message=f"exported as {fmt}")
        return _finish(builder, start, logger)


def run_leaves(sidebars: Path, *, sidebar: str | None = None) -> CliEnvelope:
    """Print the document ids of ``sidebars`` in navigation order.

    Parameters
    ----------
    sidebars : Path
        Sidebars file to read. It is loaded but not validated.
    sidebar : str | None, optional
        Restrict the listing to one sidebar. Defaults to all sidebars.

    Returns
    -------
    CliEnvelope
        Outcome of the run; ``status`` is ``"error"`` for an unknown sidebar.
    """
    start = time.monotonic()
    source = str(sidebars)
    correlation, builder = _start("leaves")
    with correlation, with_fields(LOGGER, operation="leaves", sidebars=source) as logger:
        try:
            tree = load_tree(sidebars)
        except DocnavError as exc:
            _record_error(builder, exc, file=source)
            return _finish(builder, start, logger)
        if sidebar is not None and sidebar not in tree.sidebars:
            message = f"unknown sidebar {sidebar!r}; defined: {', '.join(tree.names()) or '(none)'}"
            typer.echo(f"error: {message}", err=True)
            builder.add_error(status="error", message=message, file=source)
            builder.add_file(path=source, status="error", message=message)
            builder.set_status("error")
            return _finish(builder, start, logger)
        documents = list(tree.leaves(sidebar))
        for document in documents:
            typer.echo(document)
        builder.add_file(path=source, status="success", message=f"{len(documents)} document(s)")
        return _finish(builder, start, logger)


def _exit_for(envelope: CliEnvelope) -> None:
    if envelope.status != "success":
        raise typer.Exit(code=1)


@app.command()
def check(
    sidebars: Annotated[Path, typer.Argument(help="Sidebars file (JSON or YAML).", metavar="SIDEBARS")],
    site: Annotated[
        Path | None,
        typer.Option("--site", "-s", help="Site configuration to cross-check.", metavar="SITE"),
    ] = None,
    docs: Annotated[
        Path | None,
        typer.Option(
            "--docs",
            help="Documents directory; with --site, links to missing documents are broken.",
            metavar="DIR",
        ),
    ] = None,
    cross_sidebar: Annotated[
        CrossSidebarPolicy | None,
        typer.Option(
            "--cross-sidebar",
            help="Treatment of documents referenced by several sidebars.",
            case_sensitive=False,
        ),
    ] = None,
) -> None:
    """Validate a sidebars file and report every violation.

    Raises
    ------
    typer.Exit
        With code 1 when the file cannot be loaded or has violations.
    """
    options = CheckOptions(sidebars=sidebars, site=site, docs=docs, cross_sidebar=cross_sidebar)
    _exit_for(run_check(options))


@app.command()
def export(
    sidebars: Annotated[Path, typer.Argument(help="Sidebars file (JSON or YAML).", metavar="SIDEBARS")],
    fmt: Annotated[
        ExportFormat | None,
        typer.Option(
            "--format",
            "-f",
            help="Output format; defaults to the output suffix, or json on stdout.",
            case_sensitive=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Destination file; stdout when omitted.", metavar="PATH"),
    ] = None,
) -> None:
    """Validate a sidebars file and write it back in normalised form.

    Raises
    ------
    typer.Exit
        With code 1 when the file cannot be loaded or has violations.
    """
    options = ExportOptions(
        sidebars=sidebars,
        fmt=fmt.value if fmt is not None else "json",
        output=output,
    )
    _exit_for(run_export(options, explicit_format=fmt is not None))


@app.command()
def leaves(
    sidebars: Annotated[Path, typer.Argument(help="Sidebars file (JSON or YAML).", metavar="SIDEBARS")],
    sidebar: Annotated[
        str | None,
        typer.Option("--sidebar", help="Only list documents of this sidebar.", metavar="NAME"),
    ] = None,
) -> None:
    """Print referenced document ids in navigation order.

    Raises
    ------
    typer.Exit
        With code 1 when the file cannot be loaded or the sidebar is unknown.
    """
    _exit_for(run_leaves(sidebars, sidebar=sidebar))
