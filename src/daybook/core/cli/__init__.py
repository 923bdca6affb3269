"""Daybook CLI entry point for journal commands."""

import click

from daybook import __version__

from .common import DEFAULT_CONFIG_PATH, build_context


@click.group()
@click.version_option(version=__version__, package_name="daybook")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=str(DEFAULT_CONFIG_PATH),
    show_default=True,
    help="YAML or JSON config file.",
)
@click.option("--data-dir", type=click.Path(file_okay=False), default=None, help="Override the data directory.")
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
@click.pass_context
def main(ctx: click.Context, config_file: str, data_dir: str | None, verbose: int) -> None:
    """Daybook, a personal mood journal."""
    ctx.obj = build_context(config_file, data_dir, verbose)


from .entry_cmd import add, delete, edit, list_cmd, show
from .settings_cmd import settings
from .view_cmd import calendar, prompt, search, tags, trend

main.add_command(add)
main.add_command(list_cmd)
main.add_command(show)
main.add_command(edit)
main.add_command(delete)
main.add_command(search)
main.add_command(calendar)
main.add_command(tags)
main.add_command(trend)
main.add_command(prompt)
main.add_command(settings)
