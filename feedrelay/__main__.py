"""CLI entry point: python -m feedrelay [command]"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import requests
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_checked_settings():
    from feedrelay.config import load_settings

    settings = load_settings()
    setup_logging(settings.log_level)

    errors = settings.validate()
    if errors:
        for err in errors:
            console.print(f"[red]Config error: {err}[/red]")
        console.print("\n[dim]Set the variables in your environment or a .env file.[/dim]")
        sys.exit(1)
    return settings


def cmd_serve(args):
    """Start the feed proxy."""
    settings = _load_checked_settings()

    import uvicorn

    host = args.host or settings.web_host
    port = args.port or settings.web_port
    console.print(
        f"\n[bold cyan]FEEDRELAY[/bold cyan] - proxy at http://{host}:{port}{settings.proxy_path} "
        f"({settings.environment})"
    )
    uvicorn.run("feedrelay.web.app:create_app", factory=True, host=host, port=port, reload=False)


def cmd_render(args):
    """Render the article list into a static page."""
    from bs4 import BeautifulSoup

    from feedrelay.models import RenderState
    from feedrelay.renderer import FeedRenderer

    settings = _load_checked_settings()
    if args.proxy:
        settings.proxy_base_url = args.proxy

    page_path = Path(args.page)
    page = BeautifulSoup(page_path.read_text(encoding="utf-8"), "html.parser")
    if page.find(id=args.container) is None:
        console.print(f"[yellow]No #{args.container} element in {page_path}, nothing to render[/yellow]")
        return

    renderer = FeedRenderer(settings)
    renderer.load(page, args.container)

    out_path = Path(args.output) if args.output else page_path
    out_path.write_text(str(page), encoding="utf-8")
    colour = "green" if renderer.state is RenderState.RENDERED else "red"
    console.print(f"[{colour}]{renderer.state.value}[/{colour}]: wrote {out_path}")
    if renderer.state is RenderState.ERROR:
        sys.exit(1)


def cmd_fetch(args):
    """Fetch a feed through the retry loop and list its articles."""
    from feedrelay.feed import FeedParseError, parse_feed
    from feedrelay.proxy import FeedFetchError, fetch_with_retry, is_allowed_feed_url

    settings = _load_checked_settings()
    url = args.url or settings.feed_url
    if not is_allowed_feed_url(url, settings.feed_domain):
        console.print(f"[red]Invalid URL - must contain {settings.feed_domain}[/red]")
        sys.exit(1)

    try:
        resp = fetch_with_retry(
            url,
            max_attempts=settings.fetch_max_attempts,
            base_delay=settings.fetch_base_delay,
            timeout=settings.fetch_timeout,
        )
        articles = parse_feed(resp.content, max_articles=args.limit or settings.max_articles)
    except (requests.RequestException, FeedFetchError, FeedParseError) as e:
        console.print(f"[red]Failed to fetch feed: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Articles ({len(articles)})")
    table.add_column("Date")
    table.add_column("Title", max_width=50)
    table.add_column("Excerpt", max_width=70)
    for a in articles:
        table.add_row(a.date, a.title, a.excerpt[:70] + ("..." if len(a.excerpt) > 70 else ""))
    console.print(table)


def cmd_healthcheck(args):
    """Run health checks on config and the upstream feed."""
    from feedrelay.config import load_settings
    from feedrelay.healthcheck import run_all_checks

    settings = load_settings()
    setup_logging(settings.log_level)

    console.print("\n[bold cyan]FEEDRELAY HEALTH CHECK[/bold cyan]")
    console.print("━" * 40)

    results = run_all_checks(settings)
    all_ok = True

    for result in results:
        icon = "[green]PASS[/green]" if result.ok else "[red]FAIL[/red]"
        console.print(f"  {icon} {result.name}: {result.message}")
        if not result.ok:
            all_ok = False

    console.print("━" * 40)
    if all_ok:
        console.print("[green]All checks passed![/green]")
    else:
        console.print("[red]Some checks failed. Fix the issues above.[/red]")
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        prog="feedrelay",
        description="feedrelay - CORS proxy and article renderer for publication feeds",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the feed proxy")
    serve_parser.add_argument("--host", type=str, help="Bind host (default: from config)")
    serve_parser.add_argument("--port", type=int, help="Bind port (default: from config)")
    serve_parser.set_defaults(func=cmd_serve)

    # render
    render_parser = subparsers.add_parser("render", help="Render articles into an HTML page")
    render_parser.add_argument("--page", type=str, required=True, help="HTML page to render into")
    render_parser.add_argument("--container", type=str, default="articles-content", help="Container element id")
    render_parser.add_argument("--output", type=str, help="Write here instead of overwriting --page")
    render_parser.add_argument("--proxy", type=str, help="Proxy base URL (default: from config)")
    render_parser.set_defaults(func=cmd_render)

    # fetch
    fetch_parser = subparsers.add_parser("fetch", help="Fetch a feed and list its articles")
    fetch_parser.add_argument("url", nargs="?", help="Feed URL (default: from config)")
    fetch_parser.add_argument("--limit", type=int, help="Max articles (default: from config)")
    fetch_parser.set_defaults(func=cmd_fetch)

    # healthcheck
    health_parser = subparsers.add_parser("healthcheck", help="Check config and feed reachability")
    health_parser.set_defaults(func=cmd_healthcheck)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
