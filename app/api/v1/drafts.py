"""
Auto-saved form drafts of the current session.
"""

from fastapi import APIRouter, Depends, Response

from app.api import deps
from app.core.exceptions import ResourceNotFoundError
from app.schemas.drafts import FormDraft, FormDraftUpdate
from app.services.drafts import FormDraftStore

router = APIRouter(prefix="/drafts", tags=["Form Drafts"])


@router.get("/{form_id}", response_model=FormDraft)
async def restore_draft(form_id: str, store: FormDraftStore = Depends(deps.get_draft_store)):
    """Draft of a form, unless it is missing, empty or expired."""
    draft = store.restore(form_id)
    if draft is None:
        raise ResourceNotFoundError("Form draft", form_id)
    return draft


@router.put("/{form_id}", response_model=FormDraft)
async def save_draft(
    form_id: str,
    payload: FormDraftUpdate,
    store: FormDraftStore = Depends(deps.get_draft_store),
):
    return store.save(form_id, payload.data)


@router.delete("/{form_id}", status_code=204)
async def clear_draft(form_id: str, store: FormDraftStore = Depends(deps.get_draft_store)):
    store.clear(form_id)
    return Response(status_code=204)
