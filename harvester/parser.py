import logging
import re
from typing import List, Optional
from selectolax.lexbor import LexborHTMLParser, SelectolaxError
from .images import resolve_image_source
from .models import ExtractedItem, ExtractionMode, ExtractionRequest, ExtractionResult

logger = logging.getLogger("harvester")

NOISE_TAGS = "script, style, noscript"
IMAGE_FALLBACK_NAME = "Image"
WHITESPACE = re.compile(r'\s+')

DEFAULT_SELECTORS = {
    ExtractionMode.LINKS: "a",
    ExtractionMode.IMAGES: "img",
}
BROAD_SELECTOR = "body *"


def default_selector(mode: ExtractionMode) -> str:
    """Selector used when the user leaves the selector blank."""
    return DEFAULT_SELECTORS.get(ExtractionMode(mode), BROAD_SELECTOR)


def find_first(node, tag: str):
    """Return the node itself if it is a `tag`, else its first `tag` descendant."""
    if node.tag == tag:
        return node
    return node.css_first(tag)


def is_balanced(selector: str) -> bool:
    """True when every [, ( and quote in the selector is closed.

    Lexbor silently closes an unterminated attribute selector such as
    "[foo", so these are rejected before the query engine sees them.
    """
    closers = {"[": "]", "(": ")"}
    stack = []
    quote = None
    escaped = False

    for ch in selector:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch in closers:
            stack.append(closers[ch])
        elif ch in "])":
            if not stack or stack.pop() != ch:
                return False

    return not stack and quote is None and not escaped


def clean_text(node) -> str:
    """Visible text of a node with script/style/noscript content removed.

    Works on a clone so the parsed document is left untouched. Whitespace runs
    collapse to single spaces.
    """
    clone = node.clone()
    root_id = clone.mem_id
    for noise in clone.css(NOISE_TAGS):
        if noise.mem_id != root_id:
            noise.decompose()
    text = clone.text(deep=True) or ''
    return WHITESPACE.sub(' ', text).strip()


class SelectorEngine:
    """Maps the elements a CSS selector matches to name/href/src records."""

    def extract(self, request: ExtractionRequest) -> ExtractionResult:
        """Run one extraction. Never raises for odd or broken markup."""
        if not request.html.strip():
            return self._empty(request, "No HTML supplied.")

        selector = request.selector.strip() or default_selector(request.mode)
        if not is_balanced(selector):
            logger.debug("Rejected unbalanced selector %r", selector)
            return self._empty(request, f"Invalid CSS selector: {selector}")

        tree = LexborHTMLParser(request.html)
        try:
            elements = tree.css(selector)
        except SelectolaxError as e:
            logger.debug("Rejected selector %r: %s", selector, e)
            return self._empty(request, f"Invalid CSS selector: {selector}")

        items: List[ExtractedItem] = []
        for element in elements:
            if len(items) >= request.limit:
                break
            item = self._extract_item(element, request, len(items) + 1)
            if item is not None:
                items.append(item)

        logger.debug(
            "Selector %r matched %d elements, emitted %d records",
            selector, len(elements), len(items)
        )

        if len(items) < request.limit:
            message = f"Found {len(items)} items, fewer than the requested {request.limit}."
        else:
            message = f"Successfully extracted {len(items)} items."

        return ExtractionResult(
            items=items,
            total_found=len(elements),
            requested=request.limit,
            message=message
        )

    def _extract_item(self, element, request: ExtractionRequest, item_id: int) -> Optional[ExtractedItem]:
        """Build the record for one matched element, or None to skip it."""
        mode = request.mode

        if mode == ExtractionMode.LINKS:
            anchor = find_first(element, "a")
            if anchor is None:
                return None
            return ExtractedItem(
                id=item_id,
                name=clean_text(anchor),
                href=anchor.attributes.get('href') or ''
            )

        if mode == ExtractionMode.IMAGES:
            img = find_first(element, "img")
            if img is None:
                return None
            alt = (img.attributes.get('alt') or '').strip()
            return ExtractedItem(
                id=item_id,
                name=alt or IMAGE_FALLBACK_NAME,
                src=self._image_source(img, request)
            )

        if mode == ExtractionMode.TEXT:
            return ExtractedItem(id=item_id, name=clean_text(element))

        anchor = find_first(element, "a")
        img = find_first(element, "img")
        text = clean_text(element)
        href = (anchor.attributes.get('href') or '') if anchor is not None else None
        src = self._image_source(img, request) if img is not None else None

        if not (text or href or src):
            return None
        return ExtractedItem(id=item_id, name=text, href=href, src=src)

    def _image_source(self, img, request: ExtractionRequest) -> str:
        if request.resolve_lazy_images:
            return resolve_image_source(img) or ''
        return img.attributes.get('src') or ''

    @staticmethod
    def _empty(request: ExtractionRequest, message: str) -> ExtractionResult:
        return ExtractionResult(
            items=[],
            total_found=0,
            requested=request.limit,
            message=message
        )


def extract(
    html: str,
    selector: str = "",
    mode: ExtractionMode = ExtractionMode.AUTO,
    limit: int = 10,
    resolve_lazy_images: bool = False
) -> ExtractionResult:
    """Convenience wrapper around SelectorEngine.extract."""
    request = ExtractionRequest(
        html=html,
        selector=selector,
        mode=mode,
        limit=limit,
        resolve_lazy_images=resolve_lazy_images
    )
    return SelectorEngine().extract(request)
