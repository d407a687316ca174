"""
Sequence pipelines: lazy immediate (`Iter`) and suspending (`AsyncIter`)
descriptions sharing one set of stage machines.
"""

from . import stages
from .async_iter import AnyIterable, AsyncIter
from .iter import Iter

__all__ = (
    "AnyIterable",
    "AsyncIter",
    "Iter",
    "stages",
)
