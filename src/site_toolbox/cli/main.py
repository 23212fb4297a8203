"""CLI entry point — click group that registers each tool's sub-command."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from site_toolbox.codec import BACKENDS
from site_toolbox.core.config import ConfigManager
from site_toolbox.core.exceptions import ToolboxError


@click.group()
@click.version_option(package_name="site-toolbox")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def cli(verbose: bool) -> None:
    """Site Toolbox — build-time helpers for the website."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="responsive-set", context_settings={"ignore_unknown_options": True})
@click.argument("source", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("scale", type=int, default=100, required=False)
@click.option("--alt", default="", help="Alt text for the <img> element.")
@click.option("--url-prefix", default=None, help="Public URL directory (default: config or '/images/').")
@click.option(
    "--codec",
    default=None,
    type=click.Choice(sorted(BACKENDS)),
    help="Image codec backend (default: config or 'pillow').",
)
@click.option("--legacy-sizes", is_flag=True, default=False, help="Reproduce the markup of older pages.")
@click.option("-q", "--quiet", is_flag=True, default=False, help="Print only the HTML fragment.")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Configuration directory (default: ~/.config/site-toolbox).",
)
def responsive_set_cmd(
    source: Path,
    scale: int,
    alt: str,
    url_prefix: str | None,
    codec: str | None,
    legacy_sizes: bool,
    quiet: bool,
    config_dir: Path | None,
) -> None:
    """Write AVIF/WebP renditions at 480, 960 and 1920px plus a JPEG fallback.

    SOURCE is the image to convert; SCALE is a percentage applied to every
    width (default 100).  Files are written next to SOURCE and the
    <picture> fragment is printed last.
    """
    from site_toolbox.codec import get_transcoder
    from site_toolbox.core.events import EventBus
    from site_toolbox.tools.responsive_set import ResponsiveSetTool

    tool_name = ResponsiveSetTool.name
    config = ConfigManager(config_dir=config_dir)

    bus = EventBus()
    if not quiet:
        bus.subscribe("log", lambda **kw: click.echo(kw["message"]))

    try:
        config.load()
        backend = codec or config.get("codec", tool=tool_name)
        options = {"binary": config.get("magick_binary", tool=tool_name)} if backend == "magick" else {}
        tool = ResponsiveSetTool(event_bus=bus, transcoder=get_transcoder(backend, **options))
        result = tool.run(
            params={
                "source": source,
                "scale_percent": scale,
                "url_prefix": url_prefix or config.get("url_prefix", tool=tool_name),
                "alt": alt,
                "legacy_sizes": legacy_sizes,
            },
        )
    except ToolboxError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(result.html)
