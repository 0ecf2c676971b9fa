"""Backend key layout for remote storages."""

from .mapper import KeyMapper


__all__ = ["KeyMapper"]
