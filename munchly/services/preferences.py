"""
Preferences Store with File Locking

Favorite restaurants, favorite menu items and recent searches, kept in one
JSON document under the data directory. Every operation runs its
read-modify-write inside a ``FileLock`` so several API workers can share
the file.

Recent searches are most-recent-first, deduplicated case-insensitively and
capped at ``recent_searches_limit``.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from filelock import FileLock, Timeout
from pydantic import BaseModel, Field, ValidationError

from munchly.core.config import Settings, get_settings
from munchly.errors import PreferencesUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PreferencesDocument(BaseModel):
    """On-disk shape of the preferences file."""
    favorite_restaurant_ids: List[str] = Field(default_factory=list)
    favorite_menu_item_ids: List[str] = Field(default_factory=list)
    recent_searches: List[str] = Field(default_factory=list)


class PreferencesStore:
    """File-backed favorites and recent searches."""

    def __init__(self, path: Path, lock_timeout: float = 10, recent_limit: int = 10):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout
        self.recent_limit = recent_limit

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PreferencesStore":
        settings = settings or get_settings()
        return cls(
            settings.preferences_path,
            lock_timeout=settings.preferences_lock_timeout,
            recent_limit=settings.recent_searches_limit,
        )

    def _ensure_data_dir(self) -> None:
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.path.parent}")

    def _load(self) -> PreferencesDocument:
        if not self.path.exists():
            return PreferencesDocument()
        try:
            return PreferencesDocument.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (ValidationError, ValueError) as e:
            logger.warning(f"Error reading {self.path}, starting fresh: {e}")
            return PreferencesDocument()

    def _save(self, document: PreferencesDocument) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(document.model_dump_json(indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def _locked(self, operation: Callable[[PreferencesDocument], T], write: bool = False) -> T:
        """Run ``operation`` on the document while holding the file lock."""
        self._ensure_data_dir()
        try:
            with FileLock(str(self.lock_path), timeout=self.lock_timeout):
                document = self._load()
                result = operation(document)
                if write:
                    self._save(document)
                return result
        except Timeout:
            logger.error(f"Lock timeout ({self.lock_timeout}s) on {self.lock_path}")
            raise PreferencesUnavailable()

    # ==========================================================================
    # READ
    # ==========================================================================

    def load(self) -> PreferencesDocument:
        return self._locked(lambda doc: doc)

    def favorite_restaurant_ids(self) -> List[str]:
        return self.load().favorite_restaurant_ids

    def favorite_menu_item_ids(self) -> List[str]:
        return self.load().favorite_menu_item_ids

    def recent_searches(self) -> List[str]:
        return self.load().recent_searches

    def is_favorite_restaurant(self, restaurant_id: str) -> bool:
        return restaurant_id in self.favorite_restaurant_ids()

    def is_favorite_menu_item(self, menu_item_id: str) -> bool:
        return menu_item_id in self.favorite_menu_item_ids()

    # ==========================================================================
    # FAVORITES
    # ==========================================================================

    @staticmethod
    def _toggle(ids: List[str], value: str) -> bool:
        if value in ids:
            ids.remove(value)
            return False
        ids.append(value)
        return True

    def toggle_favorite_restaurant(self, restaurant_id: str) -> bool:
        """
        Flip a restaurant's favorite flag.

        Returns:
            True if the restaurant is now a favorite
        """
        is_favorite = self._locked(
            lambda doc: self._toggle(doc.favorite_restaurant_ids, restaurant_id), write=True
        )
        logger.info(f"Restaurant {restaurant_id} favorite={is_favorite}")
        return is_favorite

    def toggle_favorite_menu_item(self, menu_item_id: str) -> bool:
        is_favorite = self._locked(
            lambda doc: self._toggle(doc.favorite_menu_item_ids, menu_item_id), write=True
        )
        logger.info(f"Menu item {menu_item_id} favorite={is_favorite}")
        return is_favorite

    def clear_favorites(self) -> None:
        def clear(doc: PreferencesDocument) -> None:
            doc.favorite_restaurant_ids.clear()
            doc.favorite_menu_item_ids.clear()

        self._locked(clear, write=True)

    # ==========================================================================
    # RECENT SEARCHES
    # ==========================================================================

    def add_recent_search(self, query: str) -> List[str]:
        """
        Record a search at the front of the list.

        An earlier entry equal ignoring case is dropped. Blank queries are
        ignored.
        """
        query = query.strip()
        if not query:
            return self.recent_searches()

        def add(doc: PreferencesDocument) -> List[str]:
            lowered = query.lower()
            searches = [s for s in doc.recent_searches if s.lower() != lowered]
            searches.insert(0, query)
            doc.recent_searches = searches[: self.recent_limit]
            return list(doc.recent_searches)

        return self._locked(add, write=True)

    def remove_recent_search(self, query: str) -> List[str]:
        def remove(doc: PreferencesDocument) -> List[str]:
            doc.recent_searches = [s for s in doc.recent_searches if s != query]
            return list(doc.recent_searches)

        return self._locked(remove, write=True)

    def clear_recent_searches(self) -> None:
        def clear(doc: PreferencesDocument) -> None:
            doc.recent_searches = []

        self._locked(clear, write=True)
