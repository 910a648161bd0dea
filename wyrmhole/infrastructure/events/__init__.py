from .hub import EventHub

__all__ = ["EventHub"]
