"""Slide deck endpoint."""

from fastapi import APIRouter, Depends

from sparkskool.core.slides import SlideGenerator
from sparkskool.web.dependencies import get_slide_generator
from sparkskool.web.schemas import SlideDeckResponse, SlidesRequest

router = APIRouter(prefix="/api", tags=["slides"])


@router.post("/slides", response_model=SlideDeckResponse)
def generate(
    request: SlidesRequest,
    generator: SlideGenerator = Depends(get_slide_generator),
) -> SlideDeckResponse:
    """Generate a deck; generation failures return the fallback deck."""
    deck = generator.generate(request.prompt, context=request.context, language=request.language)
    return SlideDeckResponse(**deck.to_dict())
