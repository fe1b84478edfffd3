"""
Unit tests for the JSON project store.
"""

import pytest
from harvester.errors import ProjectNotFoundError
from harvester.models import ExtractionMode, ExtractionRequest, Project
from harvester.parser import SelectorEngine
from harvester.store import ProjectStore, generate_id


def _project(project_id, name="Shop"):
    request = ExtractionRequest(html='<a href="/x">X</a>', selector="a", mode=ExtractionMode.LINKS, limit=5)
    return Project(id=project_id, name=name, config=request)


class TestProjectStore:

    def setup_method(self):
        self.engine = SelectorEngine()

    def test_missing_file_is_empty(self, tmp_path):
        assert ProjectStore(tmp_path / "nope.json").list() == []

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "projects.json"
        path.write_text("{not json")

        assert ProjectStore(path).list() == []

    def test_new_projects_go_first(self, tmp_path):
        store = ProjectStore(tmp_path / "sub" / "projects.json")
        store.save(_project("aaa"))
        store.save(_project("bbb"))

        projects = store.list()
        assert [p.id for p in projects] == ["bbb", "aaa"]
        assert projects[0].created_at > 0
        assert projects[0].updated_at == projects[0].created_at

    def test_save_replaces_existing(self, tmp_path):
        store = ProjectStore(tmp_path / "projects.json")
        store.save(_project("aaa", name="Old"))
        original = store.get("aaa")

        result = self.engine.extract(original.config)
        store.save(original.model_copy(update={"name": "New", "last_result": result}))

        projects = store.list()
        assert len(projects) == 1
        assert projects[0].name == "New"
        assert projects[0].created_at == original.created_at
        assert projects[0].updated_at >= original.updated_at
        assert projects[0].last_result.total_found == 1
        assert projects[0].last_result.items[0].href == "/x"
        assert projects[0].config.mode == ExtractionMode.LINKS

    def test_delete(self, tmp_path):
        store = ProjectStore(tmp_path / "projects.json")
        store.save(_project("aaa"))
        store.save(_project("bbb"))

        remaining = store.delete("aaa")

        assert [p.id for p in remaining] == ["bbb"]
        with pytest.raises(ProjectNotFoundError):
            store.get("aaa")

    def test_generate_id(self):
        project_id = generate_id()

        assert len(project_id) == 9
        assert project_id.isalnum() and project_id == project_id.lower()
