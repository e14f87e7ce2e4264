import io

import pytest
from httpx import AsyncClient
from PIL import Image

from app.core.og_image import HEIGHT, WIDTH, render_og_image


def test_render_og_image_dimensions() -> None:
    image = Image.open(io.BytesIO(render_og_image("Class of 2010", "Reunion weekend")))
    assert image.format == "PNG"
    assert image.size == (WIDTH, HEIGHT) == (1200, 630)


def test_render_og_image_gradient_corners() -> None:
    image = Image.open(io.BytesIO(render_og_image())).convert("RGB")
    top_left = image.getpixel((0, 0))
    bottom_right = image.getpixel((WIDTH - 1, HEIGHT - 1))
    # Sky blue to green
    assert top_left[2] > top_left[1]
    assert bottom_right[1] > bottom_right[2]


def test_render_og_image_long_title() -> None:
    data = render_og_image("word " * 200, "")
    assert Image.open(io.BytesIO(data)).size == (1200, 630)


@pytest.mark.asyncio
async def test_og_endpoint_is_public(client: AsyncClient) -> None:
    response = await client.get("/api/og", params={"title": "Meet the alumni"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG\r\n\x1a\n")
