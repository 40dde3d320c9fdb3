"""Error context chains, cause iteration, condition checks and stack snapshots."""

__version__ = "0.1.0"
__all__ = ["backtrace", "chain", "context", "tokens", "partition", "ensure"]