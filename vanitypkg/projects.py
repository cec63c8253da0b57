"""
Project records and the loader for the JSON project files.

Each project file holds one JSON object mapping a sub-path (the part of the
request path after the mount point) to a project record:

    {
        "rx": {
            "Name": "rx",
            "Desc": "Rebase command for go dependencies",
            "Import": "kylelemons.net/go/rx",
            "VCS": "git",
            "Repo": "https://github.com/kylelemons/rx"
        }
    }

Keys inside a record are matched case-insensitively and also accept snake_case
names (description, import_path, repo_uri, ...). When several files match the
selector they are merged in sorted path order, later files winning.
"""

import json
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from vanitypkg.errors import NoFilesMatched, ParseError
from vanitypkg.freshness import Fingerprint, make_fingerprint, resolve_selector
from vanitypkg.logs import get_logger

logger = get_logger("projects")

# record key (lowercased) -> Project attribute
FIELD_ALIASES = {
    "name": "name",
    "desc": "description",
    "description": "description",
    "links": "links",
    "hidden": "hidden",
    "import": "import_path",
    "import_path": "import_path",
    "importpath": "import_path",
    "vcs": "vcs",
    "vcs_kind": "vcs",
    "vcskind": "vcs",
    "repo": "repo",
    "repo_uri": "repo",
    "repouri": "repo",
    "source": "source",
}

STRING_FIELDS = ("name", "description", "import_path", "vcs", "repo", "source")


@dataclass(frozen=True)
class Project:
    """One advertised package."""

    # Display
    name: str = ""
    description: str = ""
    links: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}), hash=False)
    hidden: bool = False  # not listed for humans, still resolvable by sub-path

    # Meta imports
    import_path: str = ""  # e.g. "kylelemons.net/go/rx"
    vcs: str = ""  # e.g. "git", "hg"
    repo: str = ""  # checkout URI
    source: str = ""  # value for the "go-source" meta tag

    @property
    def servable(self):
        return bool(self.import_path)

    @classmethod
    def from_json(cls, data):
        """Build a Project from a decoded JSON object.

        A null record decodes to an empty Project. Raises ValueError if data or
        one of its known fields has the wrong type.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"project must be an object, got {type(data).__name__}")

        kwargs = {}
        for key, value in data.items():
            attr = FIELD_ALIASES.get(key.lower())
            if attr is None:
                continue
            if value is None:
                continue
            if attr in STRING_FIELDS:
                if not isinstance(value, str):
                    raise ValueError(f"{key}: expected string, got {type(value).__name__}")
            elif attr == "hidden":
                if not isinstance(value, bool):
                    raise ValueError(f"{key}: expected bool, got {type(value).__name__}")
            elif attr == "links":
                if not isinstance(value, dict) or not all(
                    isinstance(v, str) for v in value.values()
                ):
                    raise ValueError(f"{key}: expected an object of strings")
                value = MappingProxyType(dict(value))
            kwargs[attr] = value
        return cls(**kwargs)


def _read_project_file(path):
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"top level must be an object, got {type(raw).__name__}")
    return {sub: Project.from_json(record) for sub, record in raw.items()}


def load_projects(selector: str) -> tuple[Mapping[str, Project], Fingerprint]:
    """Load and merge every project file matching selector.

    Returns the read-only catalog and its fingerprint. Any unreadable or
    malformed file fails the whole load with ParseError.
    """
    files = resolve_selector(selector)
    if not files:
        raise NoFilesMatched(selector)

    catalog = {}
    mtimes = {}
    for path in files:
        try:
            mtime = os.stat(path).st_mtime_ns
            projects = _read_project_file(path)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            raise ParseError(path, e, selector=selector) from e
        catalog.update(projects)
        mtimes[path] = mtime

    for sub, project in catalog.items():
        if not project.servable:
            logger.warning("project %r has no import path and will not redirect", sub)

    logger.info("loaded %d projects from %d files (%s)", len(catalog), len(files), selector)
    return MappingProxyType(catalog), make_fingerprint(mtimes)
