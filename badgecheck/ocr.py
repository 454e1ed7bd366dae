"""OCR fallback for pages without a usable text layer."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional, Protocol

from badgecheck.errors import OcrUnavailable

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OcrResult:
    """Text recognized on one page image."""

    text: str
    confidence: float     # 0.0 – 1.0


class OcrEngine(Protocol):
    """Recognizes text on a rendered page image."""

    async def recognize(self, image: bytes) -> OcrResult:
        ...


class PageRenderer(Protocol):
    """Renders one page of a document to an image."""

    def render_page(self, data: bytes, number: int) -> bytes:
        ...


@dataclass
class OcrBackend:
    """A page renderer paired with an OCR engine."""

    renderer: PageRenderer
    engine: OcrEngine


@dataclass
class DocumentOcr:
    """OCR output for the pages of a document that needed it, by page number."""

    pages: dict[int, OcrResult] = field(default_factory=dict)

    @property
    def confidence(self) -> Optional[float]:
        if not self.pages:
            return None
        return sum(page.confidence for page in self.pages.values()) / len(self.pages)


async def recognize_pages(
    data: bytes,
    backend: Optional[OcrBackend],
    numbers: Sequence[int],
) -> DocumentOcr:
    """Run OCR on the given pages of a document.

    The pages are rendered and recognized one after another; if the
    awaiting task is cancelled, the pages recognized so far are dropped
    together with it.

    Args:
        data: Raw document bytes.
        backend: Renderer and engine, or None when OCR is not configured.
        numbers: 1-based page numbers to recognize.

    Returns:
        DocumentOcr with one result per requested page.

    Raises:
        OcrUnavailable: If no backend is configured or rendering/recognition fails.
    """
    if backend is None:
        raise OcrUnavailable("page without a text layer and no OCR backend is configured")

    result = DocumentOcr()
    for number in numbers:
        try:
            image = await asyncio.to_thread(backend.renderer.render_page, data, number)
        except Exception as exc:
            raise OcrUnavailable(f"rendering of page {number} failed: {exc}") from exc
        try:
            page = await backend.engine.recognize(image)
        except OcrUnavailable:
            raise
        except Exception as exc:
            raise OcrUnavailable(f"OCR failed on page {number}: {exc}") from exc
        log.debug("OCR page %d: %d chars, confidence %.2f", number, len(page.text), page.confidence)
        result.pages[number] = page
    return result
