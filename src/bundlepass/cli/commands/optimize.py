"""
Optimize Command - Run the post-build pass over a build directory.

1. Load the build configuration (file plus command line overrides)
2. Inline CSS proxy imports, inject module preloads, minify
3. Write the manifest and the combined stylesheet
4. Report per-file failures without failing the run
"""

from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ...config import DEFAULT_CONFIG_FILENAME, BuildConfig
from ...optimizer import Optimizer
from ..utils import configure_logging, echo_success, echo_warning

console = Console()


@click.command()
@click.argument("build_dir", required=False, type=click.Path(exists=True, file_okay=False))
@click.option("-c", "--config", "config_file", type=click.Path(dir_okay=False),
              help=f"Configuration file (default: ./{DEFAULT_CONFIG_FILENAME} if present)")
@click.option("--meta-dir", help="Metadata directory inside the build directory")
@click.option("--minify-js/--no-minify-js", default=None, help="Minify JavaScript")
@click.option("--minify-css/--no-minify-css", default=None, help="Minify CSS")
@click.option("--minify-html/--no-minify-html", default=None, help="Minify HTML")
@click.option("--preload-modules/--no-preload-modules", default=None,
              help="Inject modulepreload hints into HTML")
@click.option("--combined-css-name", help="Path of the combined stylesheet, relative to the build root")
@click.option("--exclude", multiple=True, help="Glob of files to leave untouched (repeatable)")
@click.option("--target", help="Target environment hint for the JS minifier")
@click.option("-w", "--workers", type=click.IntRange(min=1), help="Worker threads (default: CPU count)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output")
def optimize(
    build_dir: Optional[str],
    config_file: Optional[str],
    meta_dir: Optional[str],
    minify_js: Optional[bool],
    minify_css: Optional[bool],
    minify_html: Optional[bool],
    preload_modules: Optional[bool],
    combined_css_name: Optional[str],
    exclude: Tuple[str, ...],
    target: Optional[str],
    workers: Optional[int],
    as_json: bool,
    verbose: bool,
):
    """
    Optimize an already-built static bundle in place.

    Individual files that fail are reported and left untouched; the run
    itself always completes.

    \b
    Examples:
        bundlepass optimize ./build
        bundlepass optimize ./build --preload-modules --exclude "vendor/*"
        bundlepass optimize --config bundlepass.yaml --json
    """
    configure_logging(verbose)

    config_path = Path(config_file) if config_file else Path(DEFAULT_CONFIG_FILENAME)
    if config_file and not config_path.exists():
        raise click.BadParameter(f"{config_file} does not exist", param_hint="--config")

    try:
        config = BuildConfig.load(
            config_path,
            build_directory=build_dir,
            meta_dir=meta_dir,
            options={
                "minify_js": minify_js,
                "minify_css": minify_css,
                "minify_html": minify_html,
                "preload_modules": preload_modules,
                "combined_css_name": combined_css_name,
                "exclude": exclude or None,
                "target": target,
            },
        )
    except (ValueError, ValidationError) as e:
        raise click.UsageError(str(e))

    if not config.build_directory.is_dir():
        raise click.UsageError(f"Build directory not found: {config.build_directory}")

    if not as_json:
        console.print(f"⚡ Optimizing [cyan]{config.build_directory}[/cyan]")

    report = Optimizer(config, max_workers=workers).optimize()

    if as_json:
        click.echo(report.model_dump_json(indent=2))
        return

    console.print(f"   Files: {report.total_files} ({report.files_optimized} optimized)")
    if report.css_imports_found:
        console.print(f"   Inlined {report.css_files_inlined} CSS import(s)")
        console.print(f"   Combined stylesheet: [dim]{report.combined_css_path}[/dim]")
    console.print(f"   Manifest: [dim]{report.manifest_path}[/dim]")

    if report.failures:
        echo_warning(f"{report.files_failed} file(s) could not be optimized and were left as-is")
        table = Table("File", "Error", show_lines=False)
        for file, message in sorted(report.failures.items()):
            table.add_row(file, message.splitlines()[0] if message else "")
        console.print(table)
    else:
        echo_success(f"Optimization complete in {report.duration_sec}s")
