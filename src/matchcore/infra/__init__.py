"""
matchcore Infrastructure - concurrency primitives.
"""

from matchcore.infra.locks import ReadWriteLock

__all__ = ["ReadWriteLock"]
