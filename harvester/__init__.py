"""
CSS-selector driven extraction of links, images and text from messy HTML.
"""

from .models import (
    CandidateSelector,
    ExtractedItem,
    ExtractionMode,
    ExtractionRequest,
    ExtractionResult,
    Project,
)
from .parser import SelectorEngine, extract, default_selector, find_first, clean_text
from .class_scanner import scan_image_classes
from .images import resolve_image_source, parse_srcset
from .errors import HarvesterError, FetchError, SuggestionError, ProjectNotFoundError

__version__ = "1.0.0"

__all__ = [
    "CandidateSelector",
    "ExtractedItem",
    "ExtractionMode",
    "ExtractionRequest",
    "ExtractionResult",
    "Project",
    "SelectorEngine",
    "extract",
    "default_selector",
    "find_first",
    "clean_text",
    "scan_image_classes",
    "resolve_image_source",
    "parse_srcset",
    "HarvesterError",
    "FetchError",
    "SuggestionError",
    "ProjectNotFoundError",
]
