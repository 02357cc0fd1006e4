"""
Index of header files under a source root, keyed by class name
"""

from pathlib import Path

from . import logger


class HeaderIndex:
    """Maps a header's file stem to its path relative to the source root"""

    def __init__(self, root=None, prefixes: list[str] | None = None):
        self.root = Path(root) if root else None
        self.prefixes = list(prefixes or [])
        self._candidates: dict[str, list[str]] = {}
        if self.root is not None:
            self._scan()

    def _scan(self):
        if not self.root.is_dir():
            logger.warning(f"Source root {self.root} not found, headers will not be included")
            return
        for path in sorted(self.root.rglob("*.h")):
            relative = path.relative_to(self.root).as_posix()
            self._candidates.setdefault(path.stem, []).append(relative)
        logger.debug(f"Indexed {sum(len(c) for c in self._candidates.values())} headers under {self.root}")

    def lookup(self, class_name: str) -> str:
        """Relative header path for class_name, or an empty string"""
        candidates = self._candidates.get(class_name)
        if not candidates:
            return ""
        for prefix in self.prefixes:
            for candidate in candidates:
                if candidate.startswith(prefix):
                    return candidate
        return candidates[0]

    def __len__(self):
        return len(self._candidates)

    def __contains__(self, class_name: str):
        return class_name in self._candidates
