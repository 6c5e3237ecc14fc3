"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated, Optional

import typer

from mdcms.cli.commands import (
    _settings, categories_cmd, delete_cmd, export_cmd, import_cmd, init_cmd,
    list_cmd, meta_cmd, new_cmd, pages_cmd, toc_cmd,
)
from mdcms.core.utils.log import configure_logging


app = typer.Typer(name="mdcms", no_args_is_help=True, help="Markdown blog and page editor content engine")


@app.callback()
def main(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")] = None,
    ):
    """Configure logging before any command runs."""
    configure_logging(log_level or _settings().log_level)


app.command(name="toc")(toc_cmd)
app.command(name="meta")(meta_cmd)
app.command(name="list")(list_cmd)
app.command(name="categories")(categories_cmd)
app.command(name="init")(init_cmd)
app.command(name="new")(new_cmd)
app.command(name="pages")(pages_cmd)
app.command(name="import")(import_cmd)
app.command(name="export")(export_cmd)
app.command(name="delete")(delete_cmd)
