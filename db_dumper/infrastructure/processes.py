"""Small helpers shared by the adapters that run external programs."""

import asyncio
from pathlib import Path
from typing import Union

from ..application.exceptions import SpawnError


async def spawn(
    program: Union[str, Path], *args: str, **kwargs
) -> asyncio.subprocess.Process:
    """
    Start `program` as an asyncio subprocess.

    Raises:
        SpawnError: If the program cannot be started at all.
    """
    try:
        return await asyncio.create_subprocess_exec(
            str(program), *args, **kwargs
        )
    except OSError as e:
        raise SpawnError(f"Failed to start {program}: {e}") from e
