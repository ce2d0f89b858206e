"""
Preload Command - Show the modules a page would preload.
"""

import json
from pathlib import Path
from typing import Optional

import click

from ...core.errors import StructuralError
from ...transform.html import compute_preload_set, find_entry_scripts, preload_js_and_css
from ..utils import configure_logging, echo_error, echo_info


@click.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-r", "--root", "root_dir", type=click.Path(exists=True, file_okay=False),
              help="Build root used to resolve absolute script paths (default: the page's directory)")
@click.option("--show-html", is_flag=True, help="Print the page with the hints injected instead")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Show detailed output")
def preload(html_file: str, root_dir: Optional[str], show_html: bool, as_json: bool, verbose: bool):
    """
    List the module preload set of an HTML page without modifying it.

    \b
    Examples:
        bundlepass preload build/index.html
        bundlepass preload build/app/index.html --root build --json
    """
    configure_logging(verbose)

    page = Path(html_file).resolve()
    root = Path(root_dir).resolve() if root_dir else page.parent
    code = page.read_text(encoding="utf-8")

    if show_html:
        try:
            click.echo(preload_js_and_css(code, root_dir=root, html_file=page))
        except StructuralError as e:
            echo_error(str(e).splitlines()[0])
            raise SystemExit(1)
        return

    entries = find_entry_scripts(code)
    modules = compute_preload_set(page, entries, root)

    if as_json:
        click.echo(json.dumps({"entries": entries, "modules": modules}, indent=2))
        return

    if not entries:
        echo_info("No module scripts found")
        return

    click.echo(f"Entries ({len(entries)}):")
    for entry in entries:
        click.echo(f"  {entry}")
    click.echo(f"Preload ({len(modules)}):")
    for module in modules:
        click.echo(f"  {module}")
