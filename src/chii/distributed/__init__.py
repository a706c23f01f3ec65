"""Cross-process coordination on top of the shared cache."""

from chii.distributed.lock import AdvisoryLock

__all__ = ["AdvisoryLock"]
