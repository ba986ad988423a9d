"""Command-line interface for bottle_wrangler.

Provides the main entry point and subcommands for fetching prebuilt
bottles, auditing the bottle manifest and managing the local bottle
cache.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from bottle_wrangler.audit import audit_formulas, render_rows
from bottle_wrangler.builder import BuildFallback
from bottle_wrangler.cache import BottleCache
from bottle_wrangler.config import WranglerConfig
from bottle_wrangler.constants import (
    CURRENT_LLVM_VERSION,
    DEFAULT_BOTTLE_MANIFEST,
    DEFAULT_DEST_DIR,
    DEFAULT_FORMULA_DIR,
    DEFAULT_FORMULA_TYPES,
    DEFAULT_HOST_KEY,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_PLATFORM_COMMAND,
    DEFAULT_PROVISION_DIR,
    DEFAULT_TIMEOUT_SECONDS,
)
from bottle_wrangler.fetchers import BottleFetcher, BucketLister
from bottle_wrangler.models import ResolutionOutcome, ResolutionState
from bottle_wrangler.platform import PlatformError, get_distros, get_platform
from bottle_wrangler.reporters import MarkdownReporter
from bottle_wrangler.resolver import BottleResolver
from bottle_wrangler.scanners import (
    BottleManifestScanner,
    FormulaScanner,
    PlatformManifestScanner,
)

app = typer.Typer(
    name="bottle-wrangler",
    help="Fetch prebuilt bottles for a platform, falling back to local builds.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("bottle_wrangler")

EXIT_MISSING = 2


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("bottle_wrangler").setLevel(level)


def _load_config(
    formula_dir: Path,
    bottles: Path,
    distros: tuple[str, ...],
    dest: Path,
    jobs: int,
    llvm_version: str,
    verify: bool,
) -> WranglerConfig:
    """Load the static inputs into a configuration bundle.

    Raises:
        OSError: If a directory or manifest is missing or unreadable.
        ValueError: If the configuration is invalid.
    """
    return WranglerConfig(
        formulas=FormulaScanner(formula_dir).scan_index(),
        availability=BottleManifestScanner(bottles).scan(),
        dest_dir=dest,
        distros=distros,
        llvm_version=llvm_version,
        verify=verify,
        max_concurrency=jobs,
    )


async def _resolve(
    config: WranglerConfig, needed: list[str], timeout: float
) -> list[ResolutionOutcome]:
    """Resolve needed formulas with a fetcher bound to the configured hosts."""
    fetcher = BottleFetcher(
        config.availability.hosts, verify=config.verify, timeout=timeout
    )
    async with BottleResolver(config, fetcher=fetcher) as resolver:
        return await resolver.resolve_batch(needed)


def _print_summary(outcomes: list[ResolutionOutcome]) -> None:
    counts = {state: 0 for state in ResolutionState}
    for outcome in outcomes:
        counts[outcome.state] += 1

    console.print(
        f"Resolved [bold]{len(outcomes)}[/bold] formulas: "
        f"[green]{counts[ResolutionState.CACHED]} cached[/green], "
        f"[green]{counts[ResolutionState.DOWNLOADED]} downloaded[/green], "
        f"[yellow]{counts[ResolutionState.MISSING]} missing[/yellow], "
        f"[red]{counts[ResolutionState.UNKNOWN]} unknown[/red]"
    )

    for outcome in outcomes:
        if outcome.state is ResolutionState.UNKNOWN:
            err_console.print(
                f"[red]ERROR:[/red] formula file not found for '{outcome.name}'"
            )
        elif outcome.state is ResolutionState.MISSING and outcome.formula:
            console.print(f"[yellow]bottle not found for[/yellow] {outcome.formula}")


@app.command()
def fetch(
    formula_dir: Annotated[
        Path,
        typer.Option("--formula-dir", help="Directory of formula definitions"),
    ] = DEFAULT_FORMULA_DIR,
    bottles: Annotated[
        Path,
        typer.Option("--bottles", "-b", help="Hosted bottle manifest (CSV)"),
    ] = DEFAULT_BOTTLE_MANIFEST,
    provision_dir: Annotated[
        Path,
        typer.Option(
            "--provision-dir",
            help="Directory holding <platform>-formulas.csv manifests",
        ),
    ] = DEFAULT_PROVISION_DIR,
    platform_manifest: Annotated[
        Optional[Path],
        typer.Option(
            "--platform-manifest",
            help="Platform formula manifest (overrides --provision-dir lookup)",
        ),
    ] = None,
    platform: Annotated[
        Optional[str],
        typer.Option(
            "--platform",
            "-p",
            envvar="BOTTLE_WRANGLER_PLATFORM",
            help="Platform token (skips the platform helper)",
        ),
    ] = None,
    platform_cmd: Annotated[
        str,
        typer.Option("--platform-cmd", help="Command printing the platform token"),
    ] = DEFAULT_PLATFORM_COMMAND,
    distro: Annotated[
        Optional[list[str]],
        typer.Option(
            "--distro",
            "-d",
            help="Acceptable distro, most preferred first (repeatable)",
        ),
    ] = None,
    formula_type: Annotated[
        Optional[list[str]],
        typer.Option(
            "--type",
            "-t",
            help="Formula types to fetch from the platform manifest (repeatable)",
        ),
    ] = None,
    dest: Annotated[
        Path,
        typer.Option(
            "--dest",
            envvar="BOTTLE_WRANGLER_DEST",
            help="Destination directory for bottles",
        ),
    ] = DEFAULT_DEST_DIR,
    jobs: Annotated[
        int,
        typer.Option("--jobs", "-j", min=1, help="Concurrent formula resolutions"),
    ] = DEFAULT_MAX_CONCURRENCY,
    timeout: Annotated[
        float,
        typer.Option("--timeout", min=1, help="Per-download timeout in seconds"),
    ] = DEFAULT_TIMEOUT_SECONDS,
    verify: Annotated[
        bool,
        typer.Option("--verify", help="Check sha256 of downloaded bottles"),
    ] = False,
    llvm_version: Annotated[
        str,
        typer.Option(
            "--llvm-version",
            envvar="BOTTLE_WRANGLER_LLVM_VERSION",
            help="Version used for formulas with an llvm_version placeholder",
        ),
    ] = CURRENT_LLVM_VERSION,
    report: Annotated[
        Optional[Path],
        typer.Option("--report", "-r", help="Write a Markdown resolution report"),
    ] = None,
    brew: Annotated[
        Optional[Path],
        typer.Option("--brew", help="brew executable used to build missing bottles"),
    ] = None,
    fail_on_missing: Annotated[
        bool,
        typer.Option(
            "--fail-on-missing",
            help=f"Exit with code {EXIT_MISSING} if any bottle is missing",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Fetch prebuilt bottles for the formulas this platform needs.

    Loads formula definitions and the hosted bottle manifest, reuses
    bottles already in the destination directory, downloads the rest and
    hands formulas without a bottle to the build fallback.

    Exit codes:
        0 - Run completed (missing bottles are reported, not an error)
        1 - Configuration error
        2 - Bottles missing and --fail-on-missing given
    """
    _setup_logging(verbose)

    try:
        if platform is None:
            platform = get_platform(platform_cmd)
        distros = tuple(distro) if distro else get_distros(platform)
        config = _load_config(
            formula_dir=formula_dir,
            bottles=bottles,
            distros=distros,
            dest=dest,
            jobs=jobs,
            llvm_version=llvm_version,
            verify=verify,
        )
        manifest_scanner = (
            PlatformManifestScanner(
                platform_manifest, types=formula_type or DEFAULT_FORMULA_TYPES
            )
            if platform_manifest
            else PlatformManifestScanner.for_platform(
                provision_dir, platform, types=formula_type or DEFAULT_FORMULA_TYPES
            )
        )
        needed = manifest_scanner.scan()
        BottleCache(dest, llvm_version=llvm_version).ensure()
    except (OSError, ValueError, PlatformError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"platform:{platform}")
    if verbose:
        console.print(f"[dim]platform formulas:{','.join(needed)}[/dim]")
        console.print(f"[dim]Loaded {len(config.formulas)} formulas[/dim]")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Resolving bottles...", total=None)
        outcomes = asyncio.run(_resolve(config, needed, timeout))
        progress.update(task, completed=True)

    _print_summary(outcomes)

    if report:
        try:
            MarkdownReporter().write(outcomes, report, platform, distros)
            console.print(f"[green]Report:[/green] {report}")
        except OSError as e:
            err_console.print(f"[red]Error writing report:[/red] {e}")
            raise typer.Exit(code=1)

    missing = BottleResolver.missing(outcomes)
    builder = BuildFallback(brew)
    for formula in missing:
        console.print(f"Building bottle {formula.name}")
        builder.build(formula)

    if missing and fail_on_missing:
        raise typer.Exit(code=EXIT_MISSING)
    raise typer.Exit(code=0)


@app.command()
def manifest(
    formula_dir: Annotated[
        Path,
        typer.Option("--formula-dir", help="Directory of formula definitions"),
    ] = DEFAULT_FORMULA_DIR,
    host: Annotated[
        str,
        typer.Option("--host", help="Host key written into each row"),
    ] = DEFAULT_HOST_KEY,
    listing: Annotated[
        Optional[str],
        typer.Option(
            "--listing",
            "-l",
            help="S3 bottle URL whose bucket listing is checked for each row",
        ),
    ] = None,
    llvm_version: Annotated[
        str,
        typer.Option(
            "--llvm-version",
            envvar="BOTTLE_WRANGLER_LLVM_VERSION",
            help="Version used for formulas with an llvm_version placeholder",
        ),
    ] = CURRENT_LLVM_VERSION,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Print bottle manifest rows for every declared bottle hash.

    With --listing, rows whose bottle is absent from the bucket are
    followed by a _MISSING marker and the command exits with code 1.
    """
    _setup_logging(verbose)

    try:
        formulas = FormulaScanner(formula_dir).scan()
    except (OSError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    listed: Optional[set[str]] = None
    if listing:

        async def run_listing() -> Optional[set[str]]:
            async with BucketLister() as lister:
                return await lister.list_bottles(listing)

        listed = asyncio.run(run_listing())
        if listed is None:
            err_console.print(f"[red]Error:[/red] could not list bottles at {listing}")
            raise typer.Exit(code=1)

    rows = audit_formulas(formulas, listing=listed, host=host, llvm_version=llvm_version)
    for line in render_rows(rows):
        typer.echo(line)

    missing = sum(1 for row in rows if not row.listed)
    if missing:
        err_console.print(f"[yellow]{missing} bottles missing from listing[/yellow]")
        raise typer.Exit(code=1)


@app.command()
def cache(
    action: Annotated[
        str,
        typer.Argument(help="Cache action: 'show' or 'clear'"),
    ],
    formula: Annotated[
        Optional[str],
        typer.Argument(help="Specific formula to clear (optional)"),
    ] = None,
    dest: Annotated[
        Path,
        typer.Option(
            "--dest",
            envvar="BOTTLE_WRANGLER_DEST",
            help="Destination directory for bottles",
        ),
    ] = DEFAULT_DEST_DIR,
    formula_dir: Annotated[
        Path,
        typer.Option(
            "--formula-dir",
            help="Directory of formula definitions, used to name one formula's bottles",
        ),
    ] = DEFAULT_FORMULA_DIR,
    llvm_version: Annotated[
        str,
        typer.Option(
            "--llvm-version",
            envvar="BOTTLE_WRANGLER_LLVM_VERSION",
            help="Version used for formulas with an llvm_version placeholder",
        ),
    ] = CURRENT_LLVM_VERSION,
) -> None:
    """Manage the local bottle cache.

    Actions:
        show  - Display cache location, bottle count, and size
        clear - Delete all cached bottles (or those of one formula)
    """
    cache_instance = BottleCache(dest, llvm_version=llvm_version)

    if action == "show":
        info = cache_instance.info()
        console.print(f"[bold]Cache Location:[/bold] {info['path']}")
        console.print(f"[bold]Bottles:[/bold] {info['count']}")
        console.print(f"[bold]Size:[/bold] {info['size_bytes'] / 1024:.1f} KB")

    elif action == "clear":
        if formula:
            try:
                definition = FormulaScanner(formula_dir).scan_index().get(formula)
                if definition is None:
                    raise ValueError(f"formula file not found for '{formula}'")
                removed = cache_instance.clear(definition)
            except (OSError, ValueError) as e:
                err_console.print(f"[red]Error:[/red] {e}")
                raise typer.Exit(code=1)
            console.print(f"[green]Cleared {removed} bottles for:[/green] {formula}")
        else:
            removed = cache_instance.clear()
            console.print(f"[green]Cache cleared[/green] ({removed} bottles)")

    else:
        err_console.print(f"[red]Unknown action:[/red] {action}")
        err_console.print("Valid actions: show, clear")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
