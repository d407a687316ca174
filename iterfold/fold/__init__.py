"""
Reducer algebra: Folder, fan-out and the drive loops.
"""

from . import folds
from .combine import combine, combine_with, fixed, pipe
from .drive import drive, drive_async, drive_async_iter, drive_iter
from .folder import Folder

__all__ = (
    "Folder",
    # Fan-out
    "combine",
    "combine_with",
    "fixed",
    "pipe",
    # Drive loops
    "drive",
    "drive_async",
    "drive_async_iter",
    "drive_iter",
    # Catalog
    "folds",
)
