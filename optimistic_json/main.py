import typer

from optimistic_json.cli.cli import parse, stream, version

app = typer.Typer(pretty_exceptions_enable=False)
app.command(name="parse")(parse)
app.command(name="stream")(stream)
app.command(name="version")(version)
