from pathlib import Path
from typing import Optional

import typer

from fakeg.app import convert
from fakeg.config import APP_SPECS, DEFAULT_PROGRAM, AppSpec
from fakeg.parsers import Dialect
from fakeg.utils import set_debug

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(help="FakeG: turn quantum-chemistry logs into Gaussian-format output", context_settings=CONTEXT_SETTINGS)


def clean_path(text: str) -> str:
    """Strip whitespace and the quotes a file manager adds when a path is dropped on the terminal."""
    return text.strip().strip("\"'").strip()


def _resolve_input(input_file: Optional[Path], spec: AppSpec) -> str:
    if input_file is not None:
        return str(input_file)
    return clean_path(typer.prompt(spec.input_prompt))


def _run(spec: AppSpec, input_file: Optional[Path], output: Optional[Path], debug: bool, plot: Optional[Path]) -> None:
    set_debug(debug)
    path = _resolve_input(input_file, spec)
    if not path:
        typer.echo("No input file given.", err=True)
        raise typer.Exit(code=1)
    ok = convert(path, spec.dialect, output_path=output, plot_path=plot)
    raise typer.Exit(code=0 if ok else 1)


@app.command("convert")
def convert_command(
    input_file: Optional[Path] = typer.Argument(None, help="Log or trajectory to convert; prompted for when omitted"),
    dialect: Dialect = typer.Option(..., "--dialect", "-d", help="Format of the input file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: <input>_fake.<ext>)"),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging"),
    plot: Optional[Path] = typer.Option(None, "--plot", help="Write an HTML optimization-progress figure"),
):
    """Convert one file into a Gaussian-format log."""
    _run(APP_SPECS[dialect], input_file, output, debug, plot)


@app.command()
def version():
    """Show the program version."""
    typer.echo(f"{DEFAULT_PROGRAM.name} {DEFAULT_PROGRAM.version}")


def make_dialect_app(dialect: Dialect) -> typer.Typer:
    """Single-command application bound to one dialect (afakeg, bfakeg, xfakeg, xtbfakeg)."""
    spec = APP_SPECS[dialect]
    dialect_app = typer.Typer(help=spec.description, context_settings=CONTEXT_SETTINGS, add_completion=False)

    def show_version(value: bool) -> None:
        if value:
            typer.echo(f"{spec.program_name} {DEFAULT_PROGRAM.version} ({DEFAULT_PROGRAM.author})")
            raise typer.Exit()

    @dialect_app.command(help=spec.description)
    def main(
        input_file: Optional[Path] = typer.Argument(None, help="File to convert; prompted for when omitted"),
        output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file (default: <input>_fake.<ext>)"),
        debug: bool = typer.Option(False, "--debug", help="Verbose logging"),
        plot: Optional[Path] = typer.Option(None, "--plot", help="Write an HTML optimization-progress figure"),
        version: bool = typer.Option(
            False, "--version", "-v", callback=show_version, is_eager=True, help="Show the version and exit"
        ),
    ):
        _run(spec, input_file, output, debug, plot)

    return dialect_app


def afakeg() -> None:
    make_dialect_app(Dialect.AMESP)()


def bfakeg() -> None:
    make_dialect_app(Dialect.BDF)()


def xfakeg() -> None:
    make_dialect_app(Dialect.XYZ)()


def xtbfakeg() -> None:
    make_dialect_app(Dialect.XTB)()


if __name__ == "__main__":
    app()
