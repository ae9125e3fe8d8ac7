import asyncio
from typing import Callable, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args, **kwargs) -> T:
    """Run blocking function in default executor.

    Keeps the event loop (and the HTTP server sharing it) responsive while
    synchronous network clients wait on the wire.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
