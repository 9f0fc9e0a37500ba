"""Helpers for configuring Unicode-capable fonts in ReportLab receipts."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

RECEIPT_FONT_NAME: str = "ReceiptUnicode"
FONT_CANDIDATES: tuple[str, ...] = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansArabic-Regular.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    r"C:\\Windows\\Fonts\\tahoma.ttf",
    r"C:\\Windows\\Fonts\\arial.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
)

_fallback_warned = False


def find_unicode_ttf() -> str | None:
    for candidate in FONT_CANDIDATES:
        if Path(candidate).exists():
            return candidate
    return None


def register_receipt_font() -> str:
    """Register a Unicode font once and return its name, or Helvetica as fallback."""
    global _fallback_warned

    font_path = find_unicode_ttf()
    if font_path:
        from reportlab.pdfbase import pdfmetrics
        from reportlab.pdfbase.ttfonts import TTFont

        if RECEIPT_FONT_NAME not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont(RECEIPT_FONT_NAME, font_path))
        return RECEIPT_FONT_NAME

    if not _fallback_warned:
        logger.warning("[PRINT] No Unicode TTF font found; item names may render incorrectly.")
        _fallback_warned = True
    return "Helvetica"
