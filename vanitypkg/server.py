"""
The reloadable vanity page server.

ConfigServer owns one Snapshot: the template set and the project catalog, each
with the fingerprint and selector it was loaded from. A reload builds a whole
new store off to the side and publishes it with a single reference assignment,
so a request that reads the snapshot sees either the old or the new generation
and never a half-loaded one. Requests never take a lock; only installs do, so
that two reloads of different stores cannot overwrite each other's update.

The root template always has the following available:

    projects          every project in the catalog, keyed by sub-path
    visible_projects  the projects that are not hidden
    project           the project matching the request sub-path (if any)
    sub_path          the request path below the mount point
    listing           true for the root of the mount point
    redirect          true if the browser is being redirected
    redirect_url      the documentation URL being redirected to (if any)
    ga_id             analytics property ID (from the config)
    ga_action         the action being performed ("List" or "Documentation")
    ga_arg            the action argument (the sub-path for "Documentation")

Any key/value pairs in Config.extra are available as well, and override the
built-in keys so templates written against newer names keep working.
"""

import threading
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from jinja2 import TemplateError

from vanitypkg.errors import LoadError, RenderError
from vanitypkg.freshness import EMPTY_FINGERPRINT, Fingerprint, is_stale
from vanitypkg.logs import get_logger
from vanitypkg.projects import Project, load_projects
from vanitypkg.templates import TemplateSet, load_templates

logger = get_logger("server")

EMPTY_CATALOG: Mapping[str, Project] = MappingProxyType({})

ACTION_LIST = "List"
ACTION_DOCUMENTATION = "Documentation"

NO_TEMPLATES_BODY = "vanitypkg: no templates loaded\n"


@dataclass(frozen=True)
class Snapshot:
    """One generation of loaded configuration. Never mutated; replaced whole."""

    templates: Optional[TemplateSet] = None
    template_fingerprint: Fingerprint = field(default_factory=lambda: EMPTY_FINGERPRINT)
    template_selector: Optional[str] = None

    projects: Mapping[str, Project] = field(default_factory=lambda: EMPTY_CATALOG)
    project_fingerprint: Fingerprint = field(default_factory=lambda: EMPTY_FINGERPRINT)
    project_selector: Optional[str] = None


@dataclass(frozen=True)
class PageContext:
    """Values derived from the snapshot and the request for one render."""

    projects: Mapping[str, Project]
    sub_path: str = ""
    ga_id: str = ""
    listing: bool = False
    project: Optional[Project] = None
    redirect_url: str = ""
    refresh: str = ""
    ga_action: str = ""
    ga_arg: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def redirect(self):
        return bool(self.redirect_url)

    @property
    def visible_projects(self):
        return {sub: p for sub, p in sorted(self.projects.items()) if not p.hidden}

    def template_vars(self):
        data = {
            "projects": self.projects,
            "visible_projects": self.visible_projects,
            "project": self.project,
            "sub_path": self.sub_path,
            "listing": self.listing,
            "redirect": self.redirect,
            "redirect_url": self.redirect_url,
            "ga_id": self.ga_id,
            "ga_action": self.ga_action,
            "ga_arg": self.ga_arg,
        }
        data.update(self.extra)
        return data


@dataclass
class PageResponse:
    status: int
    headers: dict
    body: Iterable[str]
    mimetype: str = "text/html"
    context: Optional[PageContext] = None


class ConfigServer:
    """Serves vanity pages from a reloadable template set and project catalog."""

    def __init__(self, config):
        self.config = config
        self._snapshot = Snapshot()
        self._install_lock = threading.Lock()

    @property
    def snapshot(self):
        return self._snapshot

    def _install(self, **parts):
        with self._install_lock:
            self._snapshot = replace(self._snapshot, **parts)

    ###########################################################################
    # LOADING
    ###########################################################################

    def load_templates(self, selector=None):
        """Load templates from selector (default: the configured glob) and install
        them. Raises LoadError and leaves the snapshot untouched on failure."""
        selector = selector or self.config.template_glob
        templates, fingerprint = load_templates(selector)
        self._install(
            templates=templates,
            template_fingerprint=fingerprint,
            template_selector=selector,
        )
        return templates

    def load_projects(self, selector=None):
        """Load projects from selector (default: the configured glob) and install
        them. Raises LoadError and leaves the snapshot untouched on failure."""
        selector = selector or self.config.project_glob
        projects, fingerprint = load_projects(selector)
        self._install(
            projects=projects,
            project_fingerprint=fingerprint,
            project_selector=selector,
        )
        return projects

    def load(self):
        """Load both stores; used at startup where a failure is fatal."""
        self.load_templates()
        self.load_projects()
        return self._snapshot

    def reload_if_stale(self):
        """Reload each store whose files changed since it was loaded.

        Load failures are logged and the previous generation keeps serving. A
        failure in one store does not stop the other from reloading. Returns
        the names of the stores that were reloaded.
        """
        snapshot = self._snapshot
        stores = (
            (
                "templates",
                snapshot.template_selector or self.config.template_glob,
                snapshot.template_fingerprint,
                self.load_templates,
            ),
            (
                "projects",
                snapshot.project_selector or self.config.project_glob,
                snapshot.project_fingerprint,
                self.load_projects,
            ),
        )

        reloaded = set()
        for store, selector, fingerprint, load in stores:
            if not selector or not is_stale(selector, fingerprint):
                continue
            try:
                load(selector)
            except LoadError as e:
                logger.error("reload %s from %r failed, keeping previous: %s", store, selector, e)
                continue
            reloaded.add(store)
        return reloaded

    ###########################################################################
    # REQUESTS
    ###########################################################################

    def derive_context(self, sub_path, snapshot=None):
        """Build the render context for a request path below the mount point."""
        snapshot = snapshot or self._snapshot
        sub = sub_path.removeprefix("/")
        context = PageContext(
            projects=snapshot.projects,
            sub_path=sub,
            ga_id=self.config.analytics,
            extra=self.config.extra,
        )

        if sub == "":
            return replace(context, listing=True, ga_action=ACTION_LIST)

        project = snapshot.projects.get(sub)
        if project is None or not project.servable:
            return context

        redirect_url = self.config.doc_host + project.import_path
        return replace(
            context,
            project=project,
            redirect_url=redirect_url,
            refresh=f"{self.config.refresh_delay};url={redirect_url}",
            ga_action=ACTION_DOCUMENTATION,
            ga_arg=sub,
        )

    def handle(self, sub_path):
        """Run one request: reload if enabled and stale, derive, render."""
        if self.config.reload:
            self.reload_if_stale()

        snapshot = self._snapshot
        context = self.derive_context(sub_path, snapshot)

        if snapshot.templates is None:
            logger.error("no templates loaded, cannot render %r", context.sub_path)
            return PageResponse(
                status=500,
                headers={},
                body=[NO_TEMPLATES_BODY],
                mimetype="text/plain",
                context=context,
            )

        headers = {}
        if context.redirect:
            headers["Refresh"] = context.refresh
        return PageResponse(
            status=200,
            headers=headers,
            body=self.render(snapshot.templates, context),
            context=context,
        )

    def render(self, templates, context):
        """Stream the root template. Failures are logged, never raised; output
        produced before a failure stays in the response."""
        name = self.config.root_template
        try:
            template = templates.get(name)
        except TemplateError as e:
            logger.error("%s (sub-path %r)", RenderError(name, e), context.sub_path)
            return iter(())
        return self._stream(name, template, context)

    def _stream(self, name, template, context):
        try:
            yield from template.generate(context.template_vars())
        except Exception as e:
            logger.exception("%s (sub-path %r)", RenderError(name, e), context.sub_path)
