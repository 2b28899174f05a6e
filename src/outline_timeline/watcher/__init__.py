from .outline_watcher import OutlineWatcher

__all__ = ["OutlineWatcher"]
