import random
import time
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger

from lru_ttl_cache.cache.lru_cache import LRUCache
from lru_ttl_cache.core.errors import CacheConfigError
from lru_ttl_cache.core.logging import configure_logging
from lru_ttl_cache.core.settings import LogLevel, get_settings

app = typer.Typer(help="LRU + TTL cache - developer tools")


@app.callback()
def main(
    log_level: Optional[LogLevel] = typer.Option(None, help="Override LOG_LEVEL"),
) -> None:
    configure_logging(log_level)


def _build_cache(ttl: Optional[int], item_limit: Optional[int]) -> LRUCache[str]:
    try:
        defaults = get_settings().cache
        return LRUCache(
            ttl=ttl if ttl is not None else defaults.ttl_ms,
            item_limit=item_limit if item_limit is not None else defaults.item_limit,
        )
    except CacheConfigError as e:
        logger.error(str(e))
        raise typer.Exit(code=2)


def run_script_line(cache: LRUCache[str], line: str) -> Optional[str]:
    """
    Execute one replay command against the cache.
    Returns the text to print, or None for commands without output.
    Raises ValueError on malformed lines.
    """
    parts: List[str] = line.split()
    if not parts or parts[0].startswith("#"):
        return None

    op, args = parts[0].lower(), parts[1:]
    if op == "set" and len(args) >= 2:
        cache.set(args[0], " ".join(args[1:]))
        return None
    if op == "get" and len(args) == 1:
        value = cache.get(args[0])
        return f"get {args[0]} -> {'<absent>' if value is None else value}"
    if op == "has" and len(args) == 1:
        return f"has {args[0]} -> {str(cache.has(args[0])).lower()}"
    if op == "delete" and len(args) == 1:
        return f"delete {args[0]} -> {str(cache.delete(args[0])).lower()}"
    if op == "sleep" and len(args) == 1 and args[0].isdigit():
        time.sleep(int(args[0]) / 1000.0)
        return None
    raise ValueError(f"Malformed command: {line.strip()!r}")


@app.command()
def replay(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, help="File with one command per line"),
    ttl: Optional[int] = typer.Option(None, help="TTL in milliseconds"),
    item_limit: Optional[int] = typer.Option(None, help="Maximum number of live entries"),
) -> None:
    """
    Replay set/get/has/delete/sleep commands from SCRIPT and print the results.
    """
    with _build_cache(ttl, item_limit) as cache:
        for lineno, line in enumerate(script.read_text(encoding="utf-8").splitlines(), start=1):
            try:
                output = run_script_line(cache, line)
            except ValueError as e:
                logger.error(f"{script}:{lineno}: {e}")
                raise typer.Exit(code=1)
            if output is not None:
                typer.echo(output)
        typer.echo(f"size={len(cache)}")


@app.command()
def bench(
    ops: int = typer.Option(10_000, min=1, help="Number of operations"),
    keys: int = typer.Option(500, min=1, help="Size of the key space"),
    ttl: Optional[int] = typer.Option(None, help="TTL in milliseconds"),
    item_limit: Optional[int] = typer.Option(None, help="Maximum number of live entries"),
    write_ratio: float = typer.Option(0.3, min=0.0, max=1.0, help="Share of set operations"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
) -> None:
    """
    Run a random get/set workload and print cache statistics.
    """
    rng = random.Random(seed)
    with _build_cache(ttl, item_limit) as cache:
        started = time.perf_counter()
        for i in range(ops):
            key = f"k{rng.randrange(keys)}"
            if rng.random() < write_ratio:
                cache.set(key, str(i))
            else:
                cache.get(key)
        elapsed = time.perf_counter() - started
        stats = cache.stats()

    typer.echo(
        f"ops={ops} elapsed={elapsed:.3f}s hits={stats.hits} misses={stats.misses} "
        f"hit_rate={stats.hit_rate:.3f} evictions={stats.evictions} "
        f"expirations={stats.expirations} size={stats.size}"
    )


if __name__ == "__main__":
    app()
