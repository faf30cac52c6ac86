"""
Autosaved form drafts.

All drafts share one storage entry (``form-drafts``), a mapping from
``form-draft-{form_id}`` to ``{data, timestamp, formId}``. A draft older
than the configured maximum age is never restored, though it stays stored
until cleared or overwritten.
"""

import logging
import time
from typing import Any, Dict, Optional

from app.schemas.drafts import FormDraft
from app.services.storage import LocalStorage
from app.utils.formatters import format_relative_time

logger = logging.getLogger(__name__)

DRAFTS_STORAGE_KEY = "form-drafts"


def _now_ms() -> int:
    return int(time.time() * 1000)


class FormDraftStore:
    """Per-form draft persistence on top of a LocalStorage."""

    def __init__(self, storage: LocalStorage, max_age_hours: float = 24):
        self.storage = storage
        self.max_age_hours = max_age_hours

    @staticmethod
    def draft_key(form_id: str) -> str:
        return f"form-draft-{form_id}"

    def _drafts(self) -> Dict[str, Any]:
        drafts = self.storage.get_json(DRAFTS_STORAGE_KEY, default={})
        return drafts if isinstance(drafts, dict) else {}

    def save(self, form_id: str, data: Dict[str, Any], now_ms: Optional[int] = None) -> FormDraft:
        drafts = self._drafts()
        entry = {"data": dict(data), "timestamp": now_ms or _now_ms(), "formId": form_id}
        drafts[self.draft_key(form_id)] = entry
        self.storage.set_json(DRAFTS_STORAGE_KEY, drafts)

        logger.debug(f"Saved draft for form {form_id}")
        return self._to_schema(entry)

    def restore(self, form_id: str, now_ms: Optional[int] = None) -> Optional[FormDraft]:
        """Return the draft if one exists and is younger than ``max_age_hours``."""
        entry = self._drafts().get(self.draft_key(form_id))
        if not isinstance(entry, dict) or not entry.get("data"):
            return None

        timestamp = entry.get("timestamp")
        if not isinstance(timestamp, (int, float)):
            return None

        age_hours = ((now_ms or _now_ms()) - timestamp) / (1000 * 60 * 60)
        if age_hours >= self.max_age_hours:
            logger.debug(f"Draft for form {form_id} is {age_hours:.1f}h old, not restoring")
            return None

        return self._to_schema({**entry, "formId": entry.get("formId") or form_id})

    def has_draft(self, form_id: str) -> bool:
        return self.draft_key(form_id) in self._drafts()

    def clear(self, form_id: str) -> None:
        drafts = self._drafts()
        if drafts.pop(self.draft_key(form_id), None) is not None:
            self.storage.set_json(DRAFTS_STORAGE_KEY, drafts)
            logger.debug(f"Cleared draft for form {form_id}")

    @staticmethod
    def _to_schema(entry: Dict[str, Any]) -> FormDraft:
        return FormDraft(
            form_id=entry["formId"],
            data=entry["data"],
            timestamp=int(entry["timestamp"]),
            last_saved=format_relative_time(int(entry["timestamp"])),
        )


__all__ = ["DRAFTS_STORAGE_KEY", "FormDraftStore"]
