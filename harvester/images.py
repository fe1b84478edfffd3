"""
Image source resolution for lazy-loaded and responsive images.
"""

from typing import List, Optional, Tuple

# Checked in order after ``src``.
LAZY_SOURCE_ATTRS = ["data-src", "data-lazy-src", "data-original", "data-lazy"]
SRCSET_ATTRS = ["srcset", "data-srcset"]


def parse_srcset(value: Optional[str]) -> List[Tuple[str, str]]:
    """Split a srcset value into (url, descriptor) pairs.

    The descriptor is an empty string when the entry has none.
    """
    if not value:
        return []

    # URLs may contain commas (CDN transforms like w_320,h_200), so a URL runs
    # to the next whitespace and only a trailing comma ends it early.
    candidates = []
    pos = 0
    length = len(value)
    while pos < length:
        while pos < length and (value[pos].isspace() or value[pos] == ','):
            pos += 1
        if pos >= length:
            break

        start = pos
        while pos < length and not value[pos].isspace():
            pos += 1
        url = value[start:pos]

        if url.endswith(','):
            candidates.append((url.rstrip(','), ''))
            continue

        start = pos
        while pos < length and value[pos] != ',':
            pos += 1
        candidates.append((url, value[start:pos].strip()))
    return candidates


def _best_srcset_candidate(candidates: List[Tuple[str, str]]) -> Optional[str]:
    """Widest 'w' candidate, otherwise the last listed one."""
    if not candidates:
        return None

    widths = []
    for url, descriptor in candidates:
        if descriptor.endswith('w'):
            try:
                widths.append((int(descriptor[:-1]), url))
            except ValueError:
                continue

    if widths:
        widths.sort(key=lambda x: x[0], reverse=True)
        return widths[0][1]
    return candidates[-1][0]


def _usable(value: Optional[str]) -> bool:
    return bool(value and value.strip() and not value.strip().startswith('data:'))


def resolve_image_source(img) -> Optional[str]:
    """Return the most likely real source URL of an <img> node.

    Placeholder ``data:`` URIs in ``src`` are skipped in favour of the lazy-load
    attributes; srcset is the last resort.
    """
    attrs = img.attributes

    for attr in ["src"] + LAZY_SOURCE_ATTRS:
        value = attrs.get(attr)
        if _usable(value):
            return value.strip()

    for attr in SRCSET_ATTRS:
        best = _best_srcset_candidate(parse_srcset(attrs.get(attr)))
        if _usable(best):
            return best

    return None
