"""
Non-critical cleanup.

Side effects that follow a successful primary mutation (removing a superseded
image, dropping a record whose images never made it to storage) must not
change the outcome the caller sees. They run through these helpers, which log
a warning on failure and carry on.
"""
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@asynccontextmanager
async def best_effort(description: str):
    try:
        yield
    except Exception as e:
        logger.warning(f"Non-critical cleanup failed ({description}): {e}")


async def run_best_effort(awaitable: Awaitable[T], description: str) -> Optional[T]:
    """Await `awaitable`; on failure log and return None instead of raising."""
    async with best_effort(description):
        return await awaitable
    return None
