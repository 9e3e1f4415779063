"""kinchart package initialization."""

from importlib.metadata import version, PackageNotFoundError

from .engine import compute_layout, run_layout

__all__ = ["__version__", "compute_layout", "run_layout"]

try:
    __version__ = version("kinchart")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"
