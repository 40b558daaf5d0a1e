"""Sticky note endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status

from sparkskool.core.notes import (
    Note,
    NoteValidationError,
    add_note,
    delete_note,
    list_notes,
    toggle_archive,
    toggle_pin,
    update_note,
)
from sparkskool.storage.local_store import LocalStore
from sparkskool.web.dependencies import get_store
from sparkskool.web.schemas import (
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)

router = APIRouter(prefix="/api/notes", tags=["notes"])


def _found(note: Note | None, note_id: str) -> NoteResponse:
    if note is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Note '{note_id}' not found",
        )
    return NoteResponse(**note.to_dict())


@router.get("", response_model=NoteListResponse)
async def list_all(
    view: Literal["all", "pinned", "archived"] = Query(default="all"),
    store: LocalStore = Depends(get_store),
) -> NoteListResponse:
    """List notes for a view, pinned notes first."""
    notes = [NoteResponse(**n.to_dict()) for n in list_notes(view, store=store)]
    return NoteListResponse(notes=notes, count=len(notes))


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create(request: NoteCreate, store: LocalStore = Depends(get_store)) -> NoteResponse:
    try:
        note = add_note(request.content, color=request.color, store=store)
    except NoteValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return NoteResponse(**note.to_dict())


@router.patch("/{note_id}", response_model=NoteResponse)
async def update(
    note_id: str,
    request: NoteUpdate,
    store: LocalStore = Depends(get_store),
) -> NoteResponse:
    try:
        note = update_note(
            note_id,
            content=request.content,
            color=request.color,
            pinned=request.pinned,
            archived=request.archived,
            store=store,
        )
    except NoteValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return _found(note, note_id)


@router.post("/{note_id}/pin", response_model=NoteResponse)
async def pin(note_id: str, store: LocalStore = Depends(get_store)) -> NoteResponse:
    """Toggle the pinned flag."""
    return _found(toggle_pin(note_id, store=store), note_id)


@router.post("/{note_id}/archive", response_model=NoteResponse)
async def archive(note_id: str, store: LocalStore = Depends(get_store)) -> NoteResponse:
    """Toggle the archived flag."""
    return _found(toggle_archive(note_id, store=store), note_id)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(note_id: str, store: LocalStore = Depends(get_store)) -> None:
    if not delete_note(note_id, store=store):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Note '{note_id}' not found",
        )
