"""Teaching material endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from sparkskool.core.materials import (
    MaterialValidationError,
    delete_material,
    list_materials,
    save_material,
)
from sparkskool.storage.local_store import LocalStore
from sparkskool.web.dependencies import get_store
from sparkskool.web.schemas import (
    MaterialCreate,
    MaterialListResponse,
    MaterialResponse,
)

router = APIRouter(prefix="/api/materials", tags=["materials"])


@router.get("", response_model=MaterialListResponse)
async def list_all(
    category: str | None = Query(default=None),
    store: LocalStore = Depends(get_store),
) -> MaterialListResponse:
    """List materials, newest first."""
    materials = [
        MaterialResponse(**m.to_dict()) for m in list_materials(category=category, store=store)
    ]
    return MaterialListResponse(materials=materials, count=len(materials))


@router.post("", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
async def create(
    request: MaterialCreate,
    store: LocalStore = Depends(get_store),
) -> MaterialResponse:
    try:
        material = save_material(
            request.content,
            title=request.title,
            category=request.category,
            file_type=request.file_type,
            store=store,
        )
    except MaterialValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return MaterialResponse(**material.to_dict())


@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(material_id: str, store: LocalStore = Depends(get_store)) -> None:
    if not delete_material(material_id, store=store):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Material '{material_id}' not found",
        )
