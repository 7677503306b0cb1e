"""Roll number lookup against the records store."""
from __future__ import annotations

import logging
from typing import Optional

from rollbook.config import DEFAULT_PHOTO_URL_TEMPLATE
from rollbook.lookup.history import SearchHistory
from rollbook.normalize.schema import LookupResult
from rollbook.store.repository import RecordStore

LOGGER = logging.getLogger(__name__)


def photo_url(roll_number: str, template: str = DEFAULT_PHOTO_URL_TEMPLATE) -> str:
    """Portal photo location for ``roll_number`` (uppercased into ``template``)."""

    return template.format(roll_number=roll_number.strip().upper())


class LookupService:
    """Resolve roll numbers to stored profiles and photo URLs."""

    def __init__(
        self,
        store: RecordStore,
        *,
        photo_url_template: str = DEFAULT_PHOTO_URL_TEMPLATE,
        case_insensitive: bool = True,
    ) -> None:
        self._store = store
        self._template = photo_url_template
        self._case_insensitive = case_insensitive

    def find(self, roll_number: str, history: Optional[SearchHistory] = None) -> LookupResult:
        """Look ``roll_number`` up; a miss is a normal result, not an error."""

        key = roll_number.strip().upper()
        if not key:
            raise ValueError("Roll number must not be blank.")

        student = self._store.lookup(key, case_insensitive=self._case_insensitive)
        if student is None:
            LOGGER.info("No stored record for %s", key)
        if history is not None:
            history.add(key, found=student is not None)
        return LookupResult(
            roll_number=key,
            found=student is not None,
            student=student,
            photo_url=photo_url(key, self._template),
        )


__all__ = ["LookupService", "photo_url"]
