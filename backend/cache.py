"""In-memory cache of parsed data files."""
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, Dict, Union

logger = logging.getLogger(__name__)


class ParsedFileCache:
    """
    Parsed file contents keyed by resolved path.

    Data files are static for the lifetime of the process, so entries are
    never invalidated. The least recently used entry is evicted once more
    than max_entries files are held; it is simply parsed again on the next
    access.
    """

    def __init__(self, max_entries: int = 32):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, Any]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get_or_load(self, path: Union[str, Path], loader: Callable[[Path], Any]) -> Any:
        """Return the parsed content of path, calling loader(path) on a miss."""
        path = Path(path).resolve()
        key = str(path)

        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug(f"Using cached parse of {key}")
            return self._entries[key]

        self.misses += 1
        value = loader(path)
        self._entries[key] = value
        if len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted {evicted} from parsed file cache")
        return value

    def clear(self):
        self._entries.clear()
        logger.info("Cleared parsed file cache")

    def __contains__(self, path) -> bool:
        return str(Path(path).resolve()) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}
