"""Main CLI entry point for Tweet Media."""

import asyncio
from pathlib import Path
from typing import Optional

import hydra
from omegaconf import DictConfig
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .errors import AcquisitionFailed, InvalidReference, NoMediaFound
from .extractor import ExtractionResult, MediaExtractor
from .parser import extract_post_id
from .scraper import HttpFetcher, default_sources
from .validator import LivenessProbe
from .downloader import MediaDownloader

console = Console()


@hydra.main(version_base=None, config_path="../../conf", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    console.print("[bold blue]Tweet Media[/bold blue]")
    console.print()

    result = asyncio.run(run_extraction(cfg))
    if result is None:
        return

    show_result(result)

    if cfg.output.download:
        download(result, Path(cfg.output.save_dir))


def build_extractor(cfg: DictConfig) -> MediaExtractor:
    """Create an extractor from configuration."""
    fetcher = HttpFetcher(
        timeout=cfg.scraper.timeout,
        user_agent=cfg.scraper.user_agent,
    )
    sources = default_sources(
        names=list(cfg.scraper.sources),
        min_length=cfg.scraper.min_length,
        user_agent=cfg.scraper.user_agent,
        timeout=cfg.scraper.timeout,
    )
    probe = None
    if cfg.validator.enabled:
        probe = LivenessProbe(
            timeout=cfg.validator.timeout,
            user_agent=cfg.scraper.user_agent,
        )

    return MediaExtractor(
        fetcher=fetcher,
        sources=sources,
        probe=probe,
        deadline=cfg.extractor.deadline,
        guess_when_empty=cfg.extractor.guess_when_empty,
    )


async def run_extraction(cfg: DictConfig) -> Optional[ExtractionResult]:
    """Run one extraction and report failures on the console."""
    extractor = build_extractor(cfg)

    try:
        if cfg.input.content_file:
            content_file = Path(cfg.input.content_file)
            console.print(f"[cyan]Content file:[/cyan] {content_file}")
            text = content_file.read_text(encoding="utf-8", errors="replace")
            post_id = extract_post_id(cfg.input.url or "")
            result = extractor.extract_from_content(text, post_id=post_id, base_url=cfg.input.base_url)
            return await extractor.check_liveness(result)

        if not cfg.input.url:
            console.print("[yellow]No URL given.[/yellow] Pass input.url=<post url>")
            return None

        console.print(f"[cyan]Post URL:[/cyan] {cfg.input.url}")
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Extracting media...", total=None)
            return await extractor.extract(cfg.input.url)

    except InvalidReference as e:
        console.print(f"[red]Not a post link:[/red] {e.url}")
    except AcquisitionFailed as e:
        console.print("[red]Could not reach any source.[/red]")
        show_failures(e)
    except NoMediaFound as e:
        source = f" ({e.source})" if e.source else ""
        console.print(f"[yellow]Reached the post{source} but found no media.[/yellow]")
    return None


def show_result(result: ExtractionResult) -> None:
    """Display extracted media."""
    table = Table(title=f"Media for post {result.post_id or '?'}")
    table.add_column("#", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Bitrate", style="magenta")
    table.add_column("URL", style="green")

    for index, descriptor in enumerate(result, start=1):
        bitrate = f"{descriptor.bitrate // 1000} kbps" if descriptor.bitrate else "-"
        table.add_row(str(index), descriptor.kind.value, bitrate, descriptor.url)

    console.print(table)
    if result.source:
        console.print(f"  Source: [cyan]{result.source}[/cyan]")
    if result.source_failures:
        skipped = ", ".join(str(f) for f in result.source_failures)
        console.print(f"  [dim]Skipped sources: {skipped}[/dim]")
    console.print(
        f"  Photos: {len(result.photos)}  Videos: {len(result.videos)}  GIFs: {len(result.gifs)}"
    )
    if result.is_partial:
        console.print(f"  [yellow]{len(result.dropped)} unreachable URL(s) removed[/yellow]")


def show_failures(error: AcquisitionFailed) -> None:
    table = Table(title="Sources tried")
    table.add_column("Source", style="cyan")
    table.add_column("Failure", style="red")
    table.add_column("Detail")

    for failure in error.failures:
        detail = f"HTTP {failure.status}" if failure.status is not None else failure.detail
        table.add_row(failure.source, failure.kind, detail)

    console.print(table)


def download(result: ExtractionResult, save_dir: Path) -> None:
    """Download every extracted file."""
    downloader = MediaDownloader(save_dir)

    def report_error(descriptor, error):
        console.print(f"  [red]Failed to download {descriptor.url}: {error}[/red]")

    paths = downloader.download_all(
        result,
        progress_callback=lambda message: console.print(f"  {message}"),
        error_callback=report_error,
    )
    console.print(f"Started [green]{len(paths)}[/green] downloads into {save_dir}")


if __name__ == "__main__":
    main()
