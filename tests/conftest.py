"""
Pytest configuration and shared fixtures for vanitypkg tests.
"""

import json
import logging
import os
from pathlib import Path

import pytest

from vanitypkg.config import Config
from vanitypkg.server import ConfigServer

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "vanitypkg"

# Renders a short, assertable summary of the context it gets
MAIN_TEMPLATE = (
    "{% if listing %}LIST:{% for sub in visible_projects %}{{ sub }},{% endfor %}"
    "{% elif redirect %}REDIRECT:{{ redirect_url }}"
    "{% else %}OTHER:{{ sub_path }}{% endif %}"
    "|ga={{ ga_id }}|action={{ ga_action }}|arg={{ ga_arg }}"
)

PROJECTS = {
    "rx": {
        "Name": "rx",
        "Desc": "Dependency management",
        "Import": "kylelemons.net/go/rx",
        "VCS": "git",
        "Repo": "https://github.com/kylelemons/rx",
    },
    "gofr": {
        "Name": "gofr",
        "Import": "kylelemons.net/go/gofr",
    },
    "secret": {
        "Name": "secret",
        "Import": "kylelemons.net/go/secret",
        "Hidden": True,
    },
}


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def write_text(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def touch(path, seconds=10):
    """Move a file's mtime strictly forward, independent of clock resolution."""
    mtime = os.stat(path).st_mtime_ns + seconds * 1_000_000_000
    os.utime(path, ns=(mtime, mtime))


@pytest.fixture(autouse=True)
def reset_vanity_logger():
    """configure_logging() detaches the vanitypkg logger; restore it for caplog."""
    yield
    logger = logging.getLogger("vanitypkg")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def site(tmp_path):
    """A template directory and a project file under tmp_path."""
    templates_dir = tmp_path / "templates"
    projects_dir = tmp_path / "projects"
    main = write_text(templates_dir / "main.tpl.html", MAIN_TEMPLATE)
    projects = write_json(projects_dir / "projects.json", PROJECTS)
    return {
        "root": tmp_path,
        "templates_dir": templates_dir,
        "projects_dir": projects_dir,
        "main": main,
        "projects": projects,
        "template_glob": str(templates_dir / "*.tpl.*"),
        "project_glob": str(projects_dir / "*.json"),
    }


@pytest.fixture
def config(site):
    return Config(
        log_file=None,
        template_glob=site["template_glob"],
        project_glob=site["project_glob"],
        analytics="UA-1350650-1",
    )


@pytest.fixture
def server(config):
    """A ConfigServer with both stores loaded."""
    server = ConfigServer(config)
    server.load()
    return server


def render(page):
    """Collect a PageResponse body into a string."""
    return "".join(page.body)
