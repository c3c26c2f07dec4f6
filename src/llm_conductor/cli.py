"""CLI interface for one-off generations."""

import logging
import sys
from dataclasses import replace
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from .config import load_configuration
from .errors import LLMConductorError
from .image_processor import QUALITY_PRESETS, ImageProcessor
from .prompts import TEMPLATES

console = Console()


def setup_logging(verbose: bool = False, level: str = "WARNING"):
    """Configure logging with Rich handler."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_time=False)],
    )


def _parse_data(pairs: tuple) -> dict:
    data = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got: {pair}", param_hint="--data")
        data[key.strip()] = value
    return data


@click.command()
@click.argument("prompt", required=False)
@click.option("--model", "-m", type=str, default=None, help="Model to use (vendor is inferred from it)")
@click.option("--vendor", "-V", type=str, default=None, help="Force a specific vendor")
@click.option("--image", "-i", "images", multiple=True, help="Image path or URL (repeatable)")
@click.option("--detail", type=click.Choice(["low", "high", "auto"]), default=None, help="Image detail level")
@click.option("--quality", "-q", type=click.Choice(list(QUALITY_PRESETS)), default="normal", help="Local image quality preset")
@click.option("--type", "-t", "prompt_type", type=click.Choice(list(TEMPLATES)), default=None, help="Prompt template type")
@click.option("--data", "-d", "data_pairs", multiple=True, help="Template data as KEY=VALUE (repeatable)")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Save output to file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(
    prompt: str | None,
    model: str | None,
    vendor: str | None,
    images: tuple[str, ...],
    detail: str | None,
    quality: str,
    prompt_type: str | None,
    data_pairs: tuple[str, ...],
    output: Path | None,
    verbose: bool,
):
    """Generate a completion from any supported LLM vendor.

    Examples:

        llm-conductor "Explain HTTP/2 in one paragraph" -m gpt-4o-mini

        llm-conductor "What is in this image?" -m claude-3-5-sonnet-latest -i photo.jpg

        llm-conductor -m llama3 -t summarize_text -d text="..." -d max_length="50 words"
    """
    load_dotenv()

    try:
        configuration = load_configuration()
    except LLMConductorError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if verbose:
        configuration = replace(configuration, log_level="DEBUG")
    setup_logging(verbose, configuration.log_level)

    from .conductor import generate

    try:
        if prompt_type:
            if prompt or images:
                raise click.UsageError("--type cannot be combined with a prompt or images")
            response = generate(
                model=model,
                data=_parse_data(data_pairs),
                type=prompt_type,
                vendor=vendor,
                configuration=configuration,
            )
        else:
            if not prompt:
                raise click.UsageError("Provide a PROMPT or a --type with --data")
            if images:
                processor = ImageProcessor(quality=quality)
                refs = [processor.to_image_ref(source, detail) for source in images]
                prompt = {"text": prompt, "images": refs}
            response = generate(
                model=model,
                prompt=prompt,
                vendor=vendor,
                configuration=configuration,
            )
    except click.UsageError:
        raise
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    _display_response(response)

    if not response.success:
        sys.exit(1)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(response.output)
        console.print(f"\n[green]Saved to {output}[/green]")


def _display_response(response):
    """Display a response panel with token usage."""
    title = f"{response.vendor}:{response.model}"

    if response.success:
        console.print(Panel(response.output, title=title, border_style="green"))
        console.print(
            f"[dim]Tokens: {response.total_tokens:,} "
            f"(input: {response.input_tokens:,}, output: {response.output_tokens:,})[/dim]"
        )
        return

    error = response.error or {}
    message = error.get("message") or "Empty response"
    kind = error.get("kind") or "empty"
    console.print(Panel(message, title=f"{title} failed ({kind})", border_style="red"))
    console.print(f"[dim]Attempts: {response.metadata.get('attempts', 0)}[/dim]")


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
