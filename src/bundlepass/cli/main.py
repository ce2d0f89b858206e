"""
bundlepass CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import click

from .commands import optimize, preload


@click.group()
@click.version_option(package_name="bundlepass")
def main():
    """bundlepass: post-build optimizer for static web bundles.

    Inlines CSS proxy imports, injects module preload hints and
    minifies HTML, JS and CSS in an already-built directory.

    \b
    Quick Start:
      bundlepass optimize ./build
      bundlepass optimize ./build --preload-modules
      bundlepass preload ./build/index.html
    """
    pass


# Register commands
main.add_command(optimize.optimize)
main.add_command(preload.preload)

if __name__ == "__main__":
    main()
