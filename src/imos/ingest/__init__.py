from importlib.metadata import PackageNotFoundError, version

__version__: str = "999"

try:
    __version__ = version("imos-ingest")
except PackageNotFoundError:
    pass

from .io import read_instrument, read_sbe, read_vemco

__all__ = ["read_instrument", "read_sbe", "read_vemco"]
