"""
Image class frequency scanner.
Counts the classes found on <img> tags and on their direct parents and ranks
them as candidate selectors for product image extraction.
"""

import logging
from typing import Dict, List, Optional
from selectolax.lexbor import LexborHTMLParser
from .images import resolve_image_source
from .models import CandidateSelector

logger = logging.getLogger("harvester")

DEFAULT_TOP = 20
# Tokens this short are usually layout utilities ("p", "m2", "xs").
MIN_CLASS_LENGTH = 3


def scan_image_classes(html: str, top: Optional[int] = DEFAULT_TOP) -> List[CandidateSelector]:
    """Rank candidate image selectors by how often they occur.

    Returns the `top` most frequent candidates, or all of them when `top` is None.
    """
    if not html.strip():
        return []

    tree = LexborHTMLParser(html)
    candidates: Dict[str, CandidateSelector] = {}

    images = tree.css('img')
    for img in images:
        example = resolve_image_source(img)

        for cls in _split_classes(img.attributes.get('class')):
            _upsert(candidates, f'img.{cls}', 'img', example)

        parent = img.parent
        if parent is not None and parent.is_element_node:
            for cls in _split_classes(parent.attributes.get('class')):
                _upsert(candidates, f'.{cls} img', 'parent', example)

    ranked = sorted(candidates.values(), key=lambda c: c.count, reverse=True)
    logger.debug("Scanned %d images, %d candidate selectors", len(images), len(ranked))

    if top is None:
        return ranked
    return ranked[:top]


def _split_classes(value: Optional[str]) -> List[str]:
    """Whitespace-split class attribute, without short utility tokens."""
    if not value:
        return []
    return [cls for cls in value.split() if len(cls) >= MIN_CLASS_LENGTH]


def _upsert(candidates: Dict[str, CandidateSelector], selector: str, kind: str, example: Optional[str]):
    candidate = candidates.get(selector)
    if candidate is None:
        candidate = CandidateSelector(selector=selector, type=kind, example=example or "")
        candidates[selector] = candidate
    elif not candidate.example and example:
        candidate.example = example
    candidate.count += 1
