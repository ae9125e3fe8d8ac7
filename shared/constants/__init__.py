from .formats import LogFormat

__all__ = ["LogFormat"]
