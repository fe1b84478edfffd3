"""Exceptions raised by the collaborators around the extraction core."""


class HarvesterError(Exception):
    """Base class for harvester errors."""


class FetchError(HarvesterError):
    """Every attempt to download a page failed."""

    def __init__(self, url: str, failures: list):
        self.url = url
        self.failures = failures
        details = "; ".join(failures) if failures else "no attempts made"
        super().__init__(f"Could not fetch {url}: {details}")


class SuggestionError(HarvesterError):
    """The language model did not produce a usable selector."""


class ProjectNotFoundError(HarvesterError):
    """No saved project has the requested id."""

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")
