"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdblog.cli.commands import build_cmd, init_cmd, render_cmd, theme_cmd


app = typer.Typer(name="mdblog", no_args_is_help=True, help="Markdown blog content pipeline")

app.command(name="build")(build_cmd)
app.command(name="render")(render_cmd)
app.command(name="theme")(theme_cmd)
app.command(name="init")(init_cmd)
