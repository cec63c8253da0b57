"""
Process configuration for the vanity server.

Config is a frozen dataclass passed explicitly to the server and the Flask app;
nothing reads module-level settings at request time. Defaults point at the
sample template and project file shipped inside the package.
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from vanitypkg.errors import ConfigError

PACKAGE_DIR = Path(__file__).parent

DEFAULT_TEMPLATE_GLOB = str(PACKAGE_DIR / "data" / "templates" / "*.tpl.*")
DEFAULT_PROJECT_GLOB = str(PACKAGE_DIR / "data" / "projects.json")

# prefix applied to import paths to redirect to a documentation aggregator
GODOC = "http://godoc.org/"

ENV_PREFIX = "VANITY_"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


def parse_bool(name, value):
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ConfigError(f"{name}: expected a boolean, got {value!r}")


def parse_extra(name, value):
    """Decode a JSON object of extra template values."""
    if not value.strip():
        return {}
    try:
        extra = json.loads(value)
    except ValueError as e:
        raise ConfigError(f"{name}: invalid JSON: {e}") from e
    if not isinstance(extra, dict):
        raise ConfigError(f"{name}: expected a JSON object")
    return extra


@dataclass(frozen=True)
class Config:
    """Vanity server configuration. Immutable after creation."""

    # Logging
    log_file: Optional[str] = "vanitypkg.log"
    verbose: bool = False

    # Sources
    template_glob: str = DEFAULT_TEMPLATE_GLOB
    project_glob: str = DEFAULT_PROJECT_GLOB
    reload: bool = True  # reload templates/projects on request when stale

    # Serving
    http_addr: str = ":8002"
    mount_path: str = "/"

    # Rendering
    analytics: str = ""  # analytics property ID, passed to templates as ga_id
    doc_host: str = GODOC
    root_template: str = "main"
    refresh_delay: int = 3  # seconds before the browser follows the redirect
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # freeze caller-supplied extras so the config stays read-only
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))
        if not self.mount_path.startswith("/"):
            raise ConfigError(f"mount path must start with '/': {self.mount_path!r}")
        if self.refresh_delay < 0:
            raise ConfigError(f"refresh delay must be >= 0: {self.refresh_delay}")

    def host_port(self):
        """Split http_addr ("host:port" or ":port") for the Flask server."""
        host, sep, port = self.http_addr.rpartition(":")
        if not sep or not port.isdigit():
            raise ConfigError(f"invalid listen address {self.http_addr!r}")
        return host or "0.0.0.0", int(port)

    def with_overrides(self, **overrides):
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls, environ=None):
        """Build a Config from VANITY_* environment variables."""
        environ = os.environ if environ is None else environ

        def get(name):
            return environ.get(ENV_PREFIX + name)

        kwargs = {}
        if get("LOG") is not None:
            kwargs["log_file"] = get("LOG") or None
        if get("VERBOSE") is not None:
            kwargs["verbose"] = parse_bool(ENV_PREFIX + "VERBOSE", get("VERBOSE"))
        if get("TEMPLATES"):
            kwargs["template_glob"] = get("TEMPLATES")
        if get("PROJECTS"):
            kwargs["project_glob"] = get("PROJECTS")
        if get("RELOAD") is not None:
            kwargs["reload"] = parse_bool(ENV_PREFIX + "RELOAD", get("RELOAD"))
        if get("HTTP"):
            kwargs["http_addr"] = get("HTTP")
        if get("MOUNT"):
            kwargs["mount_path"] = get("MOUNT")
        if get("ANALYTICS") is not None:
            kwargs["analytics"] = get("ANALYTICS")
        if get("DOC_HOST"):
            kwargs["doc_host"] = get("DOC_HOST")
        if get("ROOT_TEMPLATE"):
            kwargs["root_template"] = get("ROOT_TEMPLATE")
        if get("REFRESH_DELAY"):
            try:
                kwargs["refresh_delay"] = int(get("REFRESH_DELAY"))
            except ValueError as e:
                raise ConfigError(f"{ENV_PREFIX}REFRESH_DELAY: {e}") from e
        if get("EXTRA") is not None:
            kwargs["extra"] = parse_extra(ENV_PREFIX + "EXTRA", get("EXTRA"))
        return cls(**kwargs)
