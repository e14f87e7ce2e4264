"""Social preview card (Open Graph image) rendered with Pillow."""

import io
from typing import List, Tuple

from PIL import Image, ImageDraw, ImageFont

WIDTH = 1200
HEIGHT = 630
PADDING = 64
START_COLOR = (14, 165, 233)  # #0ea5e9
END_COLOR = (34, 197, 94)  # #22c55e
DEFAULT_TITLE = "Alumni Directory"
DEFAULT_SUBTITLE = "Connect with your fellow alumni"
BRAND = "Alumni Directory"
MAX_TITLE_LINES = 3


def _font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont:
    name = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return ImageFont.load_default(size=size)


def _diagonal_gradient(size: Tuple[int, int], start: Tuple[int, int, int], end: Tuple[int, int, int]) -> Image.Image:
    # Mask is drawn at 1/10 scale and upsampled
    w, h = size[0] // 10, size[1] // 10
    mask = Image.new("L", (w, h))
    mask.putdata([int(255 * (x / (w - 1) + y / (h - 1)) / 2) for y in range(h) for x in range(w)])
    mask = mask.resize(size, Image.Resampling.BILINEAR)
    return Image.composite(Image.new("RGB", size, end), Image.new("RGB", size, start), mask)


def _wrap(draw: ImageDraw.ImageDraw, text: str, font, max_width: int, max_lines: int) -> List[str]:
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}".strip()
        if draw.textlength(candidate, font=font) <= max_width or not current:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    if len(lines) > max_lines:
        lines = lines[:max_lines]
        lines[-1] = lines[-1].rstrip(".") + "..."
    return lines


def render_og_image(title: str = DEFAULT_TITLE, subtitle: str = DEFAULT_SUBTITLE) -> bytes:
    """1200x630 PNG: gradient background, wrapped title, subtitle and brand mark."""
    title = (title or "").strip() or DEFAULT_TITLE
    subtitle = (subtitle or "").strip() or DEFAULT_SUBTITLE

    image = _diagonal_gradient((WIDTH, HEIGHT), START_COLOR, END_COLOR)
    draw = ImageDraw.Draw(image, "RGBA")
    title_font = _font(64, bold=True)
    subtitle_font = _font(28)
    brand_font = _font(22)

    title_lines = _wrap(draw, title, title_font, WIDTH - 2 * PADDING, MAX_TITLE_LINES)
    subtitle_lines = _wrap(draw, subtitle, subtitle_font, WIDTH - 2 * PADDING, 2)
    block_height = len(title_lines) * 72 + 16 + len(subtitle_lines) * 36 + 24 + 40
    y = max(PADDING, (HEIGHT - block_height) // 2)

    for line in title_lines:
        draw.text((PADDING, y), line, font=title_font, fill=(255, 255, 255))
        y += 72
    y += 16
    for line in subtitle_lines:
        draw.text((PADDING, y), line, font=subtitle_font, fill=(255, 255, 255, 242))
        y += 36
    y += 24
    draw.rounded_rectangle((PADDING, y, PADDING + 40, y + 40), radius=8, fill=(255, 255, 255, 51))
    draw.text((PADDING + 52, y + 8), BRAND, font=brand_font, fill=(255, 255, 255, 230))

    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()
