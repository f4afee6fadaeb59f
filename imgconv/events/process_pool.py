"""Process pool lifespan event for CPU-bound transcoding."""

import multiprocessing as mp
from concurrent.futures import ProcessPoolExecutor

from imgconv.core.lifespan import BaseEvent
from imgconv.core.settings import settings as st


def create_process_pool(max_workers: int | None = None) -> ProcessPoolExecutor:
    """Create ProcessPoolExecutor with spawn context for asyncio compatibility."""
    ctx = mp.get_context("spawn")
    return ProcessPoolExecutor(
        max_workers=max_workers or mp.cpu_count(),
        mp_context=ctx,
    )


class ProcessPoolEvent(BaseEvent[ProcessPoolExecutor | None]):
    """Manages the transcoding ProcessPoolExecutor lifecycle."""

    name = "process_pool"

    async def startup(self) -> ProcessPoolExecutor | None:
        """Create the process pool, or None to transcode on the default executor."""
        if not st.USE_PROCESS_POOL:
            return None
        return create_process_pool(max_workers=st.MAX_WORKERS or mp.cpu_count())

    async def shutdown(self, instance: ProcessPoolExecutor | None) -> None:
        """Shutdown the process pool."""
        if instance is not None:
            instance.shutdown(wait=True)
