"""output.py — Scoped, all-or-nothing writing of final output files."""

import asyncio
import os
from contextlib import asynccontextmanager
from pathlib import Path


def partial_path(path: Path) -> Path:
    return path.with_name(path.name + ".part")


class TextSink:
    """Writes text to an open file handle from the event loop, one part at a time."""

    def __init__(self, file):
        self._file = file

    async def write(self, data: str) -> None:
        await asyncio.to_thread(self._file.write, data)


@asynccontextmanager
async def open_output(path: Path):
    """
    Yield a TextSink writing to <path>.part. On success the part file replaces
    path; on failure it is removed and path is left untouched. The handle is
    closed on both paths.
    """
    path = Path(path)
    tmp = partial_path(path)
    await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
    f = await asyncio.to_thread(open, tmp, "w", encoding="utf-8")
    try:
        try:
            yield TextSink(f)
        finally:
            await asyncio.to_thread(f.close)
    except BaseException:
        await asyncio.to_thread(tmp.unlink, missing_ok=True)
        raise
    await asyncio.to_thread(os.replace, tmp, path)
