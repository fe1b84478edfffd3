"""
Tests for the command line interface.
"""

import json
import pytest
from typer.testing import CliRunner
from harvester.main import app
from harvester.store import ProjectStore


runner = CliRunner()

PAGE = """
<div class="product-card"><a href="/p/1">Mug</a><img class="lazy" src="1.jpg" alt="Mug"></div>
<div class="product-card"><a href="/p/2">Plate</a><img class="lazy" src="2.jpg" alt="Plate"></div>
"""


@pytest.fixture
def page_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(PAGE, encoding="utf-8")
    return path


@pytest.fixture
def projects_file(tmp_path, monkeypatch):
    path = tmp_path / "projects.json"
    monkeypatch.setenv("HARVESTER_PROJECTS_FILE", str(path))
    return path


class TestCli:

    def test_extract_json(self, page_file):
        result = runner.invoke(app, [
            "extract", str(page_file), "--selector", ".product-card",
            "--mode", "links", "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["totalFound"] == 2
        assert data["requested"] == 10
        assert [i["href"] for i in data["items"]] == ["/p/1", "/p/2"]

    def test_extract_tsv(self, page_file):
        result = runner.invoke(app, [
            "extract", str(page_file), "-s", ".lazy", "-m", "IMAGES", "-f", "tsv",
        ])

        assert result.exit_code == 0, result.output
        lines = result.stdout.strip().splitlines()
        assert lines[0] == "ID\tName\tLink\tImage"
        assert lines[1] == "1\tMug\t\t1.jpg"

    def test_extract_missing_file(self, tmp_path):
        result = runner.invoke(app, ["extract", str(tmp_path / "missing.html")])

        assert result.exit_code == 1

    def test_scan(self, page_file):
        result = runner.invoke(app, ["scan", str(page_file)])

        assert result.exit_code == 0, result.output
        assert "img.lazy" in result.stdout
        assert ".product-card img" in result.stdout

    def test_project_round_trip(self, page_file, projects_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, [
            "extract", str(page_file), "-s", "a", "-m", "LINKS", "-f", "tsv", "--project", "Shop",
        ])
        assert result.exit_code == 0, result.output

        projects = ProjectStore(projects_file).list()
        assert len(projects) == 1
        project = projects[0]
        assert project.name == "Shop"
        assert project.last_result.total_found == 2

        result = runner.invoke(app, ["projects", "run", project.id, "-f", "json"])
        assert result.exit_code == 0, result.output
        saved = json.loads((tmp_path / "shop_export.json").read_text(encoding="utf-8"))
        assert [i["href"] for i in saved] == ["/p/1", "/p/2"]

        result = runner.invoke(app, ["projects", "delete", project.id])
        assert result.exit_code == 0, result.output
        assert ProjectStore(projects_file).list() == []

    def test_project_csv_defaults_to_export_filename(self, page_file, projects_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, [
            "extract", str(page_file), "-s", "a", "-m", "LINKS", "-f", "csv", "--project", "My Shop!",
        ])

        assert result.exit_code == 0, result.output
        lines = (tmp_path / "my_shop__export.csv").read_text(encoding="utf-8").splitlines()
        assert lines[0] == "ID,Name,Link,Image"
        assert lines[1] == "1,Mug,/p/1,"

    def test_csv_without_output_or_project(self, page_file):
        result = runner.invoke(app, ["extract", str(page_file), "-f", "csv"])

        assert result.exit_code == 1

    def test_unknown_project(self, projects_file):
        result = runner.invoke(app, ["projects", "show", "doesnotexist"])

        assert result.exit_code == 1
