"""
SpoonFeeder command line.

Usage:
    spoonfeeder render notes.txt --mode math --format html --standalone
    cat answer.txt | spoonfeeder render - --detect-code
    spoonfeeder fetch 42
    spoonfeeder config set-token YOUR_TOKEN
    spoonfeeder health
"""

import json
import logging
import sys
import os
from pathlib import Path
from typing import List, Optional

# Windows console encoding
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")

import click
import httpx
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from spoonfeeder import __version__
from spoonfeeder.client import SpoonFeederClient
from spoonfeeder.config import get_config_manager
from spoonfeeder.exceptions import SpoonFeederError, AuthenticationError
from spoonfeeder.html_renderer import escape_html, render_html, render_page, wrap_page
from spoonfeeder.models import RenderedDocument, RenderMode
from spoonfeeder.segmenter import render as render_blocks
from spoonfeeder.terminal import render_terminal

console = Console()

MODE_CHOICES = [mode.value for mode in RenderMode]
FORMAT_CHOICES = ["terminal", "html", "json"]


def get_client(ctx) -> SpoonFeederClient:
    """Client built from the global options."""
    return SpoonFeederClient(
        api_url=ctx.obj.get("api_url"),
        config_dir=ctx.obj.get("config_dir"),
    )


def error(message: str) -> None:
    """Print an error."""
    console.print(f"[red]✗[/red] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def info(message: str) -> None:
    """Print a note."""
    console.print(f"[blue]ℹ[/blue] {message}")


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        success(f"Written to [bold]{output}[/bold]")
    else:
        click.echo(text)


def _emit_terminal(renderables: List, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            file_console = Console(file=f, width=100)
            for renderable in renderables:
                file_console.print(renderable)
        success(f"Written to [bold]{output}[/bold]")
    else:
        for renderable in renderables:
            console.print(renderable)


@click.group()
@click.version_option(__version__, prog_name="spoonfeeder")
@click.option(
    "--api-url", "-a",
    envvar="SPOONFEEDER_API_URL",
    help="Content API base URL (default: http://localhost:5000/api)"
)
@click.option(
    "--config-dir",
    envvar="SPOONFEEDER_CONFIG_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    help="Configuration directory (default: ~/.spoonfeeder)"
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx, api_url: Optional[str], config_dir: Optional[Path], verbose: bool):
    """SpoonFeeder CLI - render structured study notes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url
    ctx.obj["config_dir"] = config_dir
    ctx.obj["config_manager"] = get_config_manager(config_dir)


# ===== RENDER COMMANDS =====

@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--mode", "-m", type=click.Choice(MODE_CHOICES), help="Render mode (default from config)")
@click.option("--format", "-f", "output_format", type=click.Choice(FORMAT_CHOICES), default="terminal")
@click.option("--detect-code", is_flag=True, help="Render code-looking text as one code block")
@click.option("--standalone", is_flag=True, help="With --format html: full page with MathJax")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to a file instead of stdout")
@click.pass_context
def render(ctx, source, mode: Optional[str], output_format: str,
           detect_code: bool, standalone: bool, output: Optional[str]):
    """Render a text file (or - for stdin)."""
    config = ctx.obj["config_manager"].get_config()
    effective_mode = RenderMode.coerce(mode) if mode else config.default_mode
    detect_code = detect_code or config.detect_code

    try:
        text = source.read()
        blocks = render_blocks(text, effective_mode, detect_code=detect_code)

        if output_format == "json":
            document = RenderedDocument(mode=effective_mode, blocks=blocks)
            _emit(document.model_dump_json(indent=2), output)
        elif output_format == "html":
            if standalone:
                name = getattr(source, "name", None)
                if isinstance(name, str) and name != "-" and not name.startswith("<"):
                    title = Path(name).name
                else:
                    title = "SpoonFeeder"
                _emit(render_page(blocks, title=title, mathjax_url=config.mathjax_url), output)
            else:
                _emit(render_html(blocks), output)
        else:
            _emit_terminal([render_terminal(blocks)], output)

    except UnicodeDecodeError as e:
        error(f"Source is not valid UTF-8: {e}")
        sys.exit(1)
    except OSError as e:
        error(f"Cannot write output: {e}")
        sys.exit(1)
    except SpoonFeederError as e:
        error(f"Error: {e.message}")
        sys.exit(1)
    except Exception as e:
        error(f"Error: {e}")
        sys.exit(1)


@main.command()
@click.argument("subtopic_id", type=int)
@click.option("--mode", "-m", type=click.Choice(MODE_CHOICES), help="Override the stored mode")
@click.option("--format", "-f", "output_format", type=click.Choice(FORMAT_CHOICES), default="terminal")
@click.option("--standalone", is_flag=True, help="With --format html: full page with MathJax")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to a file instead of stdout")
@click.pass_context
def fetch(ctx, subtopic_id: int, mode: Optional[str], output_format: str,
          standalone: bool, output: Optional[str]):
    """Fetch and render the content of a subtopic."""
    try:
        with get_client(ctx) as client:
            rendered = client.render_subtopic(subtopic_id, RenderMode.coerce(mode) if mode else None)

        if not rendered:
            info(f"Subtopic {subtopic_id} has no content")
            return

        if output_format == "json":
            payload = [
                {
                    "record": record.model_dump(mode="json", by_alias=True),
                    "document": document.model_dump(mode="json"),
                }
                for record, document in rendered
            ]
            _emit(json.dumps(payload, indent=2, ensure_ascii=False), output)

        elif output_format == "html":
            sections = []
            for record, document in rendered:
                heading = escape_html(record.title or record.content_type)
                sections.append(
                    f'<section class="content-{escape_html(record.content_type)}">'
                    f'<h2>{heading}</h2>\n{render_html(document.blocks)}\n</section>'
                )
            if standalone:
                config = ctx.obj["config_manager"].get_config()
                page = wrap_page("\n".join(sections), title=f"Subtopic {subtopic_id}", mathjax_url=config.mathjax_url)
                _emit(page, output)
            else:
                _emit("\n".join(sections), output)

        else:
            renderables = []
            for record, document in rendered:
                renderables.append(Rule(f"[bold]{record.title or record.content_type}[/bold]"))
                renderables.append(render_terminal(document.blocks))
            _emit_terminal(renderables, output)

    except AuthenticationError as e:
        error(f"Authentication failed: {e.message}")
        sys.exit(1)
    except SpoonFeederError as e:
        error(f"Error: {e.message}")
        sys.exit(1)
    except httpx.HTTPError as e:
        error(f"Cannot reach the API: {e}")
        sys.exit(1)
    except OSError as e:
        error(f"Cannot write output: {e}")
        sys.exit(1)
    except Exception as e:
        error(f"Error: {e}")
        sys.exit(1)


@main.command()
@click.pass_context
def health(ctx):
    """Check that the content API is up."""
    try:
        with get_client(ctx) as client:
            status = client.health()
        success(f"API is up: {status.status}")
        if status.message:
            info(status.message)

    except httpx.ConnectError:
        error("Could not connect to the API")
        sys.exit(1)
    except SpoonFeederError as e:
        error(f"API returned an error: {e.message}")
        sys.exit(1)
    except httpx.HTTPError as e:
        error(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        error(f"Error: {e}")
        sys.exit(1)


# ===== CONFIG COMMANDS =====

@main.group()
def config():
    """Local configuration."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx):
    """Show the current configuration."""
    manager = ctx.obj["config_manager"]
    current = manager.get_config()

    table = Table(title="Configuration", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Config file", str(manager.config_file))
    table.add_row("API URL", current.api_url)
    table.add_row("Token", "✓ set" if current.token else "✗ not set")
    table.add_row("Default mode", current.default_mode.value)
    table.add_row("Detect code", "yes" if current.detect_code else "no")
    table.add_row("MathJax URL", current.mathjax_url)

    console.print(table)


@config.command("set-server")
@click.argument("url")
@click.pass_context
def config_set_server(ctx, url: str):
    """Set the content API base URL."""
    try:
        ctx.obj["config_manager"].set_api_url(url)
        success(f"API URL set to [bold]{url.strip().rstrip('/')}[/bold]")
    except SpoonFeederError as e:
        error(e.message)
        sys.exit(1)


@config.command("set-token")
@click.argument("token")
@click.pass_context
def config_set_token(ctx, token: str):
    """Store the API bearer token ('none' clears it)."""
    manager = ctx.obj["config_manager"]
    if token.lower() == "none":
        manager.set_token(None)
        success("Token cleared")
    else:
        manager.set_token(token)
        success("Token saved")


@config.command("set-mode")
@click.argument("mode", type=click.Choice(MODE_CHOICES))
@click.pass_context
def config_set_mode(ctx, mode: str):
    """Set the default render mode."""
    ctx.obj["config_manager"].set_default_mode(mode)
    success(f"Default mode set to [bold]{mode}[/bold]")


@config.command("set-detect-code")
@click.argument("enabled", type=click.Choice(["on", "off"]))
@click.pass_context
def config_set_detect_code(ctx, enabled: str):
    """Turn code auto-detection on or off by default."""
    ctx.obj["config_manager"].set_detect_code(enabled == "on")
    success(f"Code detection {enabled}")


if __name__ == "__main__":
    main()
