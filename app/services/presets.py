"""
Saved filter presets.

Each list view keeps its presets under its own storage key
(``admin-complaints-filter``, ``admin-apologies-filter``, ...) as a JSON
array of ``{id, name, filters}``. Every operation re-reads the array, so a
write from another tab or worker is visible immediately; concurrent writes
follow last-write-wins.
"""

import logging
import time
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ResourceNotFoundError, ValidationError
from app.schemas.filters import FilterConfig, FilterPreset
from app.services.storage import LocalStorage

logger = logging.getLogger(__name__)

COMPLAINTS_PRESET_KEY = "admin-complaints-filter"
APOLOGIES_PRESET_KEY = "admin-apologies-filter"
DASHBOARD_PRESET_KEY = "admin-dashboard-filter"


class FilterPresetStore:
    """
    Preset persistence for one list view.

    Args:
        storage: Backing key-value store.
        storage_key: Key under which this view's presets live.
    """

    def __init__(self, storage: LocalStorage, storage_key: str):
        if not storage_key or not storage_key.strip():
            raise ValidationError(
                "Storage key is required",
                field_errors={"storage_key": ["Storage key is required"]},
            )
        self.storage = storage
        self.storage_key = storage_key

    def _read(self) -> List[FilterPreset]:
        raw = self.storage.get_json(self.storage_key, default=[])
        if not isinstance(raw, list):
            logger.warning(f"Presets under '{self.storage_key}' are not a list, ignoring")
            return []

        presets = []
        for entry in raw:
            try:
                presets.append(FilterPreset.model_validate(entry))
            except PydanticValidationError:
                logger.warning(f"Skipping malformed preset under '{self.storage_key}': {entry!r}")
        return presets

    def _write(self, presets: List[FilterPreset]) -> None:
        self.storage.set_json(self.storage_key, [preset.to_storage() for preset in presets])

    @staticmethod
    def _new_id(taken: set) -> str:
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def list(self) -> List[FilterPreset]:
        """All presets for this view, in save order."""
        return self._read()

    def save(self, name: str, filters: Optional[FilterConfig] = None) -> FilterPreset:
        """
        Store the given filter under a name.

        Raises:
            ValidationError: Name is empty after trimming.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError(
                "Preset name is required",
                field_errors={"name": ["Please enter a preset name"]},
            )

        presets = self._read()
        preset = FilterPreset(
            id=self._new_id({p.id for p in presets}),
            name=name,
            filters=filters or FilterConfig(),
        )
        presets.append(preset)
        self._write(presets)

        logger.info(f"Saved filter preset '{name}' under '{self.storage_key}'")
        return preset

    def get(self, preset_id: str) -> FilterPreset:
        for preset in self._read():
            if preset.id == preset_id:
                return preset
        raise ResourceNotFoundError("Filter preset", preset_id)

    def load(self, preset_id: str) -> FilterConfig:
        """
        Filter configuration of a saved preset.

        Raises:
            ResourceNotFoundError: No preset with this id under this key.
        """
        return self.get(preset_id).filters

    def delete(self, preset_id: str) -> None:
        """
        Remove a preset.

        Raises:
            ResourceNotFoundError: No preset with this id under this key.
        """
        presets = self._read()
        remaining = [preset for preset in presets if preset.id != preset_id]
        if len(remaining) == len(presets):
            raise ResourceNotFoundError("Filter preset", preset_id)

        self._write(remaining)
        logger.info(f"Deleted filter preset {preset_id} under '{self.storage_key}'")


__all__ = [
    "COMPLAINTS_PRESET_KEY",
    "APOLOGIES_PRESET_KEY",
    "DASHBOARD_PRESET_KEY",
    "FilterPresetStore",
]
