"""
Unit tests for record export helpers.
"""

import csv
import json
from harvester.export import export_filename, to_rows, to_tsv, write_csv, write_json
from harvester.models import ExtractedItem


ITEMS = [
    ExtractedItem(id=1, name="Blue mug", href="/mug", src="mug.jpg"),
    ExtractedItem(id=2, name="Plate"),
]


class TestExport:

    def test_rows_fill_missing_values(self):
        rows = to_rows(ITEMS)

        assert rows[0] == ["ID", "Name", "Link", "Image"]
        assert rows[1] == ["1", "Blue mug", "/mug", "mug.jpg"]
        assert rows[2] == ["2", "Plate", "", ""]

    def test_tsv(self):
        assert to_tsv(ITEMS) == "ID\tName\tLink\tImage\n1\tBlue mug\t/mug\tmug.jpg\n2\tPlate\t\t"

    def test_tsv_does_not_mutate_items(self):
        before = [i.model_dump() for i in ITEMS]
        to_tsv(ITEMS)

        assert [i.model_dump() for i in ITEMS] == before

    def test_write_csv(self, tmp_path):
        path = tmp_path / "out.csv"
        write_csv(ITEMS, path)

        with open(path, newline='', encoding='utf-8') as f:
            assert list(csv.reader(f)) == to_rows(ITEMS)

    def test_write_json_omits_missing_fields(self, tmp_path):
        path = tmp_path / "out.json"
        write_json(ITEMS, path)

        assert json.loads(path.read_text()) == [
            {"id": 1, "name": "Blue mug", "href": "/mug", "src": "mug.jpg"},
            {"id": 2, "name": "Plate"},
        ]

    def test_export_filename(self):
        assert export_filename("Shop Crawl #2", "csv") == "shop_crawl__2_export.csv"
