import logging
from multiprocessing import Pool
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import track
from rich.table import Table

from . import __version__
from .formats import FORMATS
from .types import Mode

log = logging.getLogger(__name__)

ModeChoice = click.Choice([mode.value for mode in Mode], case_sensitive=False)
FormatChoice = click.Choice(sorted(FORMATS), case_sensitive=False)


def setup_logging(level):
    FORMAT = "%(funcName)s: %(message)s"
    log_handler = RichHandler(level=level)
    logging.basicConfig(
        level="NOTSET", format=FORMAT, datefmt="[%X]", handlers=[log_handler]
    )
    logging.captureWarnings(True)


def _verbosity(verbose: int) -> str:
    if verbose == 0:
        return "WARNING"
    if verbose == 1:
        return "INFO"
    return "DEBUG"


@click.group()
def convert(): ...


@convert.command()
@click.argument("input_path")
@click.argument("out_path")
@click.option("--mode", "mode_", default="timeSeries", type=ModeChoice)
@click.option("--format", "fmt", default="sbe", type=FormatChoice)
@click.option("-v", "--verbose", count=True)
def convert_file(input_path, out_path, mode_, fmt, verbose):
    """Convert one instrument file to netCDF"""
    setup_logging(_verbosity(verbose))
    from .io import read_instrument

    ds = read_instrument(input_path, Mode(mode_), fmt=fmt)
    log.info("Saving to netCDF")
    ds.to_xarray().to_netcdf(out_path)
    log.info("Done :)")


def _convert_one(args) -> tuple[str, str | None]:
    input_path, out_dir, mode, fmt = args
    from .io import read_instrument

    out_path = Path(out_dir) / f"{Path(input_path).stem}.nc"
    try:
        ds = read_instrument(input_path, mode, fmt=fmt)
        ds.to_xarray().to_netcdf(out_path)
    except Exception as error:
        return input_path, "\n".join([str(error), *getattr(error, "__notes__", [])])
    return input_path, None


@convert.command()
@click.argument("out_dir")
@click.argument("input_paths", nargs=-1, required=True)
@click.option("--mode", "mode_", default="timeSeries", type=ModeChoice)
@click.option("--format", "fmt", default="sbe", type=FormatChoice)
@click.option("-v", "--verbose", count=True)
def convert_many(out_dir, input_paths, mode_, fmt, verbose):
    """Convert many independent instrument files to netCDF, in parallel"""
    setup_logging(_verbosity(verbose))
    Path(out_dir).mkdir(parents=True, exist_ok=True)

    mode = Mode(mode_)
    jobs = [(path, out_dir, mode, fmt) for path in input_paths]
    failures = 0
    with Pool() as pool:
        for input_path, error in track(
            pool.imap_unordered(_convert_one, jobs),
            total=len(jobs),
            description="Converting",
        ):
            if error is None:
                log.info(f"Converted: {input_path}")
            else:
                failures += 1
                log.error(f"Failed: {input_path}: {error}")

    if failures:
        raise click.ClickException(f"{failures} of {len(jobs)} files failed")


@click.group()
def inspect(): ...


@inspect.command()
@click.argument("input_path")
@click.option("--mode", "mode_", default="timeSeries", type=ModeChoice)
@click.option("--format", "fmt", default="sbe", type=FormatChoice)
def describe(input_path, mode_, fmt):
    """Print the instrument identity, dimensions and variables of a file"""
    from .io import read_instrument

    ds = read_instrument(input_path, Mode(mode_), fmt=fmt)
    meta = ds.metadata

    console = Console()
    console.print(
        f"{meta['instrument_make']} {meta['instrument_model']} "
        f"serial {meta['instrument_serial_no'] or '?'} "
        f"firmware {meta['instrument_firmware'] or '?'}"
    )
    if meta["time_low_confidence"]:
        console.print("[yellow]timestamps generated from default values[/yellow]")

    dims = Table("dimension", "size", "axis")
    for dim in ds.dimensions:
        dims.add_row(dim.name, str(len(dim)), dim.axis or "")
    console.print(dims)

    variables = Table("variable", "dimensions", "dtype", "applied_offset")
    for var in ds.variables:
        offset = "" if var.applied_offset is None else f"{var.applied_offset:.4f}"
        variables.add_row(
            var.name, ", ".join(ds.dims_of(var)), str(var.data.dtype), offset
        )
    console.print(variables)


cli = click.version_option(__version__)(
    click.CommandCollection(sources=[convert, inspect])
)


if __name__ == "__main__":
    cli()
