"""CLI entry point for PolicyScope."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from policyscope.config import get_settings
from policyscope.errors import ConfigurationError, FetchError, PolicyScopeError
from policyscope.logger import get_logger
from policyscope.report import render_report
from policyscope.services.content_fetcher import ContentFetcher, is_url
from policyscope.services.policy_analyzer import PolicyAnalyzer

console = Console()
logger = get_logger(__name__)


@click.group()
@click.version_option(version="0.1.0", prog_name="policyscope")
def cli():
    """PolicyScope: privacy policy analysis.

    Find out what a privacy policy lets a service collect, share and do.
    """
    pass


@cli.command()
@click.argument("policy", required=False)
@click.option(
    "--file",
    "-f",
    "policy_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the policy text from a file",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def analyze(policy: str | None, policy_file: Path | None, as_json: bool):
    """Analyze POLICY (text or an http(s) URL)."""
    logger.info("=" * 60)
    logger.info("PolicyScope session started")

    if policy_file is not None:
        try:
            policy = policy_file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            logger.error(f"Could not decode {policy_file}: {e}")
            console.print(f"[red]Error:[/red] {escape(str(policy_file))} is not UTF-8 text")
            raise SystemExit(1)
    if policy is None:
        policy = click.prompt("Privacy policy text or URL")
    policy = policy.strip()
    if not policy:
        console.print("[red]Error:[/red] Please provide privacy policy text or a link")
        raise SystemExit(1)

    settings = get_settings()
    fetcher = ContentFetcher(settings)
    analyzer = PolicyAnalyzer(settings)
    result = None

    try:
        analyzer.check_config()
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Preparing analysis...", total=None)

            text = policy
            if is_url(policy):
                progress.update(task, description=f"Fetching {policy}...")
                text = fetcher.fetch_text(policy)
                logger.info(f"Fetched {len(text)} chars")

            for event in analyzer.iter_analysis(text):
                if event["type"] == "status":
                    progress.update(task, description=event["data"]["message"])
                elif event["type"] == "complete":
                    result = event["data"]["result"]

        if as_json:
            click.echo(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        else:
            render_report(result, console)
        logger.info("Session completed successfully")
        logger.info("=" * 60)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        console.print("Make sure OPENAI_API_KEY and OPENAI_ASSISTANT_ID are set")
        raise SystemExit(1)
    except FetchError as e:
        logger.error(f"Fetch error: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)
    except PolicyScopeError as e:
        logger.error(f"Analysis error: {e}")
        console.print(f"[red]Analysis error:[/red] {escape(str(e))}")
        raise SystemExit(1)
    finally:
        fetcher.close()
        analyzer.close()


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", "-p", type=int, default=8000, help="Port (default: 8000)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    logger.info(f"Serving API on {host}:{port}")
    uvicorn.run("policyscope.api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
