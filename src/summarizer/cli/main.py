"""summarizer command-line interface.

Commands:
    extract  Extract readable content from a URL
    run      Extract a URL and summarize it
    text     Summarize a file or stdin
    models   List the OpenRouter model catalog
"""

from __future__ import annotations

import asyncio
import functools
import logging
import signal
from contextlib import contextmanager, suppress
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Coroutine, Iterator, Optional, TypeVar

import click

from summarizer import __version__
from summarizer.config.settings import SummarizeConfig
from summarizer.core.errors.base import error_to_code
from summarizer.core.errors.llm import NotConfiguredError
from summarizer.core.llm.models import CompletionResult, SummarizeOptions, SummaryLength
from summarizer.core.service import SummarizeService
from summarizer.core.streaming.signal import AbortSignal
from summarizer.core.streaming.sink import StreamingInsertSink, TextBufferHost

logger = logging.getLogger(__name__)

T = TypeVar("T")

PREVIEW_CHARS = 500
LENGTH_CHOICES = [level.value for level in SummaryLength]


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Print known failures as ``Error [CODE]: message`` and exit 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            code = error_to_code(e)
            if code is None:
                raise
            logger.debug("Command failed", exc_info=True)
            click.echo(f"Error [{code}]: {e}", err=True)
            raise SystemExit(1) from e

    return wrapper


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


@contextmanager
def _interrupt_aborts(abort_signal: AbortSignal) -> Iterator[None]:
    """Route Ctrl-C to ``abort_signal`` for the duration of the block."""
    loop = asyncio.get_running_loop()
    installed = False
    with suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, abort_signal.abort, "Interrupted")
        installed = True
    try:
        yield
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _options(
    length: Optional[str],
    model: Optional[str],
    language: Optional[str],
    stream: bool,
    abort_signal: AbortSignal,
) -> SummarizeOptions:
    return SummarizeOptions(
        length=SummaryLength.parse(length) if length else None,
        language=language,
        model=model,
        on_stream=(lambda chunk: click.echo(chunk, nl=False)) if stream else None,
        abort_signal=abort_signal,
    )


async def _summarize(
    service: SummarizeService,
    content: str,
    options: SummarizeOptions,
    into: Optional[Path] = None,
    line: Optional[int] = None,
) -> CompletionResult:
    if options.abort_signal is None:
        options = replace(options, abort_signal=AbortSignal())
    with _interrupt_aborts(options.abort_signal):
        if into is None:
            return await service.summarize(content, options)

        host = TextBufferHost(
            into.read_text(encoding="utf-8") if into.exists() else "",
            cursor_line=line - 1 if line else None,
        )
        sink = StreamingInsertSink(host, options.abort_signal)
        try:
            return await service.summarize_into(sink, content, options)
        finally:
            into.write_text(host.text, encoding="utf-8")


def _check_line(into: Path, line: int) -> None:
    """Reject a --line past the end of the --into file."""
    line_count = into.read_text(encoding="utf-8").count("\n") + 1 if into.exists() else 1
    if line > line_count:
        raise click.BadParameter(
            f"line {line} is past the end of {into} ({line_count} lines)",
            param_hint="'--line'",
        )


def _report(result: CompletionResult, streamed: bool, into: Optional[Path]) -> None:
    if streamed:
        click.echo()
    elif into is None:
        click.echo(result.content.strip())

    if result.cancelled:
        click.echo("Cancelled; partial summary kept.", err=True)
    if into is not None:
        click.echo(f"Summary written to {into}", err=True)
    click.echo(f"Model: {result.model}", err=True)


@click.group()
@click.version_option(__version__, prog_name="summarizer")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML config file (overrides the layered lookup).",
)
@click.option("--log-level", default=None, help="Override the configured log level.")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], log_level: Optional[str]) -> None:
    """Summarize web pages and text with OpenRouter models."""
    config = SummarizeConfig.from_env(config_file)
    if log_level:
        config.log_level = log_level.upper()
    config.setup_logging()
    ctx.obj = config


@cli.command("extract")
@click.argument("url")
@click.option("--no-follow", is_flag=True, help="Do not follow the link inside a tweet.")
@click.option("--verbose", "-v", is_flag=True, help="Print the full extracted content.")
@click.pass_obj
@handle_errors
def extract_cmd(config: SummarizeConfig, url: str, no_follow: bool, verbose: bool) -> None:
    """Extract readable content from URL without summarizing it."""
    service = SummarizeService(config)
    extracted = _run(service.extract(url, follow_links=not no_follow))

    click.echo(f"Title: {extracted.title}")
    click.echo(f"Words: {extracted.word_count}")
    click.echo(f"URL:   {extracted.url}")
    click.echo()
    if verbose or len(extracted.content) <= PREVIEW_CHARS:
        click.echo(extracted.content)
    else:
        click.echo(extracted.content[:PREVIEW_CHARS] + "...")


@cli.command("run")
@click.argument("url")
@click.option("--length", type=click.Choice(LENGTH_CHOICES, case_sensitive=False), default=None)
@click.option("--model", default=None, help='Model id, or "auto-free" for the ranked free models.')
@click.option("--language", default=None, help="Output language (default: source language).")
@click.option("--no-follow", is_flag=True, help="Do not follow the link inside a tweet.")
@click.option("--stream", is_flag=True, help="Print the summary as it is generated.")
@click.option(
    "--into",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Stream the summary into this Markdown file.",
)
@click.option("--line", type=click.IntRange(min=1), default=None, help="1-based line to insert below (with --into).")
@click.pass_obj
@handle_errors
def run_cmd(
    config: SummarizeConfig,
    url: str,
    length: Optional[str],
    model: Optional[str],
    language: Optional[str],
    no_follow: bool,
    stream: bool,
    into: Optional[Path],
    line: Optional[int],
) -> None:
    """Extract URL and summarize its content."""
    if line is not None and into is None:
        raise click.UsageError("--line requires --into")
    if into is not None and line is not None:
        _check_line(into, line)

    service = SummarizeService(config)
    abort_signal = AbortSignal()

    async def go() -> CompletionResult:
        extracted = await service.extract(url, follow_links=not no_follow)
        click.echo(f"{extracted.title} ({extracted.word_count} words)", err=True)
        options = _options(length, model, language, stream, abort_signal)
        return await _summarize(service, extracted.content, options, into, line)

    if not service.is_configured():
        raise NotConfiguredError()
    result = _run(go())
    _report(result, stream, into)


@cli.command("text")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--length", type=click.Choice(LENGTH_CHOICES, case_sensitive=False), default=None)
@click.option("--model", default=None, help='Model id, or "auto-free" for the ranked free models.')
@click.option("--language", default=None, help="Output language (default: source language).")
@click.option("--stream", is_flag=True, help="Print the summary as it is generated.")
@click.pass_obj
@handle_errors
def text_cmd(
    config: SummarizeConfig,
    source: Any,
    length: Optional[str],
    model: Optional[str],
    language: Optional[str],
    stream: bool,
) -> None:
    """Summarize SOURCE (a file, or stdin when omitted or "-")."""
    content = source.read().strip()
    if not content:
        raise click.UsageError("No content to summarize")

    service = SummarizeService(config)
    options = _options(length, model, language, stream, AbortSignal())
    result = _run(_summarize(service, content, options))
    _report(result, stream, None)


@cli.command("models")
@click.option("--free", "free_only", is_flag=True, help="Only list free models.")
@click.pass_obj
@handle_errors
def models_cmd(config: SummarizeConfig, free_only: bool) -> None:
    """List models available through OpenRouter."""
    service = SummarizeService(config)
    models = _run(service.client.fetch_models())
    if free_only:
        models = [model for model in models if model.is_free]

    for model in sorted(models, key=lambda m: m.id):
        click.echo(f"{model.id}\t{model.format_pricing()}\t{model.context_length}")
    click.echo(f"{len(models)} models", err=True)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
