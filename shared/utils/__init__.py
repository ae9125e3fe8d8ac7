from .concurrency import run_blocking

__all__ = ["run_blocking"]
