from .command import CommandSource

__all__ = ["CommandSource"]
