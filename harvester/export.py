"""Spreadsheet-friendly export of extracted records."""

import csv
import json
import re
from pathlib import Path
from typing import List, Sequence, Union
from .models import ExtractedItem

HEADERS = ["ID", "Name", "Link", "Image"]


def to_rows(items: Sequence[ExtractedItem]) -> List[List[str]]:
    """Header row followed by one row per item, blanks for missing values."""
    rows = [list(HEADERS)]
    for item in items:
        rows.append([str(item.id), item.name or '', item.href or '', item.src or ''])
    return rows


def to_tsv(items: Sequence[ExtractedItem]) -> str:
    """Tab-separated text that pastes straight into Google Sheets or Excel."""
    return '\n'.join('\t'.join(row) for row in to_rows(items))


def write_csv(items: Sequence[ExtractedItem], path: Union[str, Path]):
    with open(path, 'w', newline='', encoding='utf-8') as f:
        csv.writer(f).writerows(to_rows(items))


def write_json(items: Sequence[ExtractedItem], path: Union[str, Path]):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump([item.model_dump(exclude_none=True) for item in items], f, indent=2, ensure_ascii=False)


def export_filename(project_name: str, extension: str) -> str:
    clean = re.sub(r'[^a-z0-9]', '_', project_name, flags=re.IGNORECASE).lower()
    return f"{clean}_export.{extension}"
