from .concurrency import run_blocking
from .retry import retry_async

__all__ = ["run_blocking", "retry_async"]
