from .timeline_tools import register_timeline_tools

__all__ = ["register_timeline_tools"]
