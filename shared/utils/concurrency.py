import asyncio
from typing import Callable, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args, **kwargs) -> T:
    """Run blocking function in default executor.

    Central helper for the synchronous database and password-hashing calls so
    they never stall the event loop.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
