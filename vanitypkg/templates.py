"""
Jinja2 template sets loaded from files matched by a selector.

Every matched file is registered under its basename ("main.tpl.html") and its
stem ("main"), so the root template can be addressed without its extensions and
templates can extend or include each other by either name. All templates are
compiled during the load so syntax errors are reported against the file that
contains them.
"""

import os
from dataclasses import dataclass

from jinja2 import DictLoader, Environment, TemplateError

from vanitypkg.errors import NoFilesMatched, ParseError
from vanitypkg.freshness import Fingerprint, make_fingerprint, resolve_selector
from vanitypkg.logs import get_logger

logger = get_logger("templates")


def template_names(path):
    """Names under which the template at path is registered."""
    base = os.path.basename(path)
    stem = base.split(".", 1)[0]
    return (base, stem) if stem and stem != base else (base,)


@dataclass(frozen=True)
class TemplateSet:
    """A compiled set of named templates sharing one Jinja2 environment."""

    env: Environment
    names: tuple[str, ...]

    def __contains__(self, name):
        return name in self.names

    def __len__(self):
        return len(self.names)

    def get(self, name):
        """Return the compiled template; raises jinja2.TemplateNotFound."""
        return self.env.get_template(name)


def _environment(sources):
    return Environment(
        loader=DictLoader(sources),
        autoescape=True,
        auto_reload=False,
        keep_trailing_newline=True,
    )


def load_templates(selector: str) -> tuple[TemplateSet, Fingerprint]:
    """Read and compile every template file matching selector.

    Returns the new template set and its fingerprint. An unreadable file or a
    template syntax error fails the whole load with ParseError.
    """
    files = resolve_selector(selector)
    if not files:
        raise NoFilesMatched(selector)

    sources = {}
    owners = {}
    mtimes = {}
    for path in files:
        try:
            mtime = os.stat(path).st_mtime_ns
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, ValueError) as e:
            raise ParseError(path, e, selector=selector) from e
        for name in template_names(path):
            sources[name] = text
            owners[name] = path
        mtimes[path] = mtime

    env = _environment(sources)
    for name in sources:
        try:
            env.get_template(name)
        except TemplateError as e:
            raise ParseError(owners[name], e, selector=selector) from e

    names = tuple(sorted(sources))
    logger.info("loaded %d templates from %d files (%s)", len(names), len(files), selector)
    return TemplateSet(env=env, names=names), make_fingerprint(mtimes)
