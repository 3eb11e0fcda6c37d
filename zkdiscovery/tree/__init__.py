from .interfaces import CoordinationTree
from .memory import InMemoryTree

__all__ = ["CoordinationTree", "InMemoryTree"]
