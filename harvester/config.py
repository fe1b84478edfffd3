"""Runtime settings, read from the environment (and a .env file if present)."""

import os
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_PROJECTS_FILE = Path.home() / ".harvester" / "projects.json"
MAX_SUGGESTION_HTML_CHARS = 15_000


class HarvesterConfig(BaseModel):
    """Settings shared by the CLI and the network collaborators."""
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    projects_file: Path = DEFAULT_PROJECTS_FILE
    proxies: List[str] = Field(default_factory=list)
    timeout: float = 30.0
    max_suggestion_chars: int = MAX_SUGGESTION_HTML_CHARS
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "HarvesterConfig":
        load_dotenv()
        proxies = [
            p.strip()
            for p in os.getenv("HARVESTER_PROXIES", "").split(",")
            if p.strip()
        ]
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            model=os.getenv("HARVESTER_MODEL", DEFAULT_MODEL),
            projects_file=Path(
                os.getenv("HARVESTER_PROJECTS_FILE", str(DEFAULT_PROJECTS_FILE))
            ).expanduser(),
            proxies=proxies,
            timeout=float(os.getenv("HARVESTER_TIMEOUT", "30")),
            log_level=os.getenv("HARVESTER_LOG_LEVEL", "WARNING").upper(),
        )
