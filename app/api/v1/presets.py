"""
Saved filter presets, one list per storage key.
"""

from fastapi import APIRouter, Depends

from app.api import deps
from app.schemas.common import MessageResponse
from app.schemas.filters import FilterPreset, FilterPresetCreate, FilterPresetList
from app.services.presets import FilterPresetStore
from app.services.storage import LocalStorage

router = APIRouter(prefix="/presets", tags=["Filter Presets"])


@router.get("/{storage_key}", response_model=FilterPresetList)
async def list_presets(storage_key: str, storage: LocalStorage = Depends(deps.get_preset_storage)):
    store = FilterPresetStore(storage, storage_key)
    return FilterPresetList(storage_key=storage_key, presets=store.list())


@router.post("/{storage_key}", response_model=FilterPreset, status_code=201)
async def save_preset(
    storage_key: str,
    payload: FilterPresetCreate,
    storage: LocalStorage = Depends(deps.get_preset_storage),
):
    return FilterPresetStore(storage, storage_key).save(payload.name, payload.filters)


@router.get("/{storage_key}/{preset_id}", response_model=FilterPreset)
async def read_preset(
    storage_key: str,
    preset_id: str,
    storage: LocalStorage = Depends(deps.get_preset_storage),
):
    return FilterPresetStore(storage, storage_key).get(preset_id)


@router.delete("/{storage_key}/{preset_id}", response_model=MessageResponse)
async def delete_preset(
    storage_key: str,
    preset_id: str,
    storage: LocalStorage = Depends(deps.get_preset_storage),
):
    store = FilterPresetStore(storage, storage_key)
    name = store.get(preset_id).name
    store.delete(preset_id)
    return MessageResponse(message=f"Deleted preset: {name}")
