from html import escape
from fastapi import APIRouter, Path, Query
from fastapi.responses import Response

router = APIRouter()

SVG_TEMPLATE = (
    '<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">'
    '<rect width="100%" height="100%" fill="#f3f4f6"/>'
    '<text x="50%" y="50%" font-family="Arial, sans-serif" font-size="16" '
    'fill="#9ca3af" text-anchor="middle" dy=".3em">{text}</text>'
    '</svg>'
)


@router.get("/{width}/{height}")
async def placeholder_image(
    width: int = Path(..., ge=1, le=2000),
    height: int = Path(..., ge=1, le=2000),
    text: str = Query(None, max_length=100)
):
    """
    SVG placeholder served for products without images.
    """
    svg = SVG_TEMPLATE.format(
        width=width,
        height=height,
        text=escape(text or f"{width}x{height}")
    )

    return Response(
        content=svg,
        media_type="image/svg+xml",
        headers={"Cache-Control": "public, max-age=31536000, immutable"}
    )
