"""Multi-page and fan-out orchestration.

- AccumulationBuffer / CategoryAccumulator: Ordered collection of results
- PageDriver / PageCursor: Concurrent pagination of one resource
- run_concurrently: Spawn-all, await-all helper with cancellation

The resource cursors (``pagination.resources``) and the sitemap fan-out
(``pagination.diffusion``) build on requests and are imported from there.
"""

from .buffer import AccumulationBuffer, CategoryAccumulator
from .driver import PageCursor, PageDriver, run_concurrently

__all__ = [
    "AccumulationBuffer",
    "CategoryAccumulator",
    "PageCursor",
    "PageDriver",
    "run_concurrently",
]
