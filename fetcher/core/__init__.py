from .cache import ResultCache
from .commands import init_db, list_saved, play, save, search
from .store import TrackStore

__all__ = ["ResultCache", "TrackStore", "search", "save", "list_saved", "play", "init_db"]
