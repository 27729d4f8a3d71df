from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from rich.console import Console

from toksave.config.settings import config
from toksave.core.state import state

console = Console()


async def init_redis() -> Optional[aioredis.Redis]:
    """
    Connect the Redis history backend.
    Returns None when the server is unreachable, the caller falls back to a file.
    """
    client = aioredis.from_url(
        config.redis.url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=config.redis.socket_timeout,
    )
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        console.print(f"[yellow]⚠ Redis unavailable at {config.redis.url}: {e}[/yellow]")
        await client.aclose()
        state.redis = None
        return None

    console.print(f"[green]✓ History stored in Redis ({config.redis.url})[/green]")
    state.redis = client
    return client


async def close_redis() -> None:
    if state.redis is None:
        return
    await state.redis.aclose()
    state.redis = None
    console.print("[dim]✓ Redis connection closed[/dim]")
