import sys
from pathlib import Path
from typing import Annotated, Optional

import typer

from optimistic_json.helpers.json_helpers import json_dumps
from optimistic_json.json_parser import OptimisticJSONParser, get_json_parser
from optimistic_json.log import get_logger
from optimistic_json.settings import ParserBackend, settings
from optimistic_json.streaming import JSONStreamAccumulator

logger = get_logger(__name__)


def _read_input(path: Optional[Path]) -> str:
    if path is None:
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def parse(
    path: Annotated[Optional[Path], typer.Argument(help="File holding the (possibly truncated) JSON, stdin if omitted")] = None,
    record: Annotated[bool, typer.Option(help="Build objects as records instead of mappings")] = not settings.associative,
    strict: Annotated[bool, typer.Option(help="Fail on unterminated strings and numbers")] = settings.strict,
    backend: Annotated[ParserBackend, typer.Option(help="Parser backend to use")] = settings.backend,
):
    """Recover the most complete value from a JSON document"""
    text = _read_input(path)
    logger.debug(f"Parsing {len(text)} characters with the {backend.value} backend")
    parser = get_json_parser(backend=backend, strict=strict)
    if isinstance(parser, OptimisticJSONParser):
        parser.on_extra_token = lambda _text, _data, remainder: typer.secho(f"Trailing text: {remainder!r}", err=True, fg=typer.colors.YELLOW)

    try:
        data = parser.parse(text, associative=not record)
    except ValueError as e:
        typer.secho(f"Could not parse input: {e}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(json_dumps(data))


def stream(
    path: Annotated[Optional[Path], typer.Argument(help="File holding the JSON to replay, stdin if omitted")] = None,
    chunk_size: Annotated[int, typer.Option(min=1, help="Number of characters fed per step")] = 1,
):
    """Replay a JSON document in chunks, printing the partial parse after every chunk"""
    text = _read_input(path)
    parser = OptimisticJSONParser()
    parser.on_extra_token = None
    accumulator = JSONStreamAccumulator(parser=parser)

    chunks = [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]
    for parsed in accumulator.iter_parsed(chunks):
        typer.echo(json_dumps(parsed, indent=None))


def version():
    import optimistic_json

    print(optimistic_json.__version__)
