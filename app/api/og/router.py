from fastapi import APIRouter, Query, Response

from app.core.og_image import DEFAULT_SUBTITLE, DEFAULT_TITLE, render_og_image

router = APIRouter(prefix="/api/og", tags=["og"])


@router.get("", response_class=Response)
async def og_image(
    title: str = Query(DEFAULT_TITLE, max_length=200),
    subtitle: str = Query(DEFAULT_SUBTITLE, max_length=300),
) -> Response:
    """Public social preview image."""
    return Response(
        content=render_og_image(title, subtitle),
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=86400"},
    )
