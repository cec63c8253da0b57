"""
Error types for vanitypkg.

Load errors are raised by the template and project stores and are logged (never
raised) while serving requests. Render errors are only ever logged.
"""


class VanityError(Exception):
    """Base class for all vanitypkg errors."""


class ConfigError(VanityError):
    """Raised when the process configuration is malformed."""


class LoadError(VanityError):
    """A template or project load failed; the installed snapshot is unchanged."""

    def __init__(self, message, selector=None, path=None, cause=None):
        super().__init__(message)
        self.selector = selector
        self.path = path
        self.cause = cause


class InvalidSelector(LoadError):
    """The selector pattern could not be resolved to a file list."""

    def __init__(self, selector, cause=None):
        detail = f": {cause}" if cause else ""
        super().__init__(
            f"invalid selector {selector!r}{detail}", selector=selector, cause=cause
        )


class NoFilesMatched(LoadError):
    """The selector pattern is valid but matched no files."""

    def __init__(self, selector):
        super().__init__(f"no files match {selector!r}", selector=selector)


class ParseError(LoadError):
    """A matched file could not be read or parsed."""

    def __init__(self, path, cause, selector=None):
        super().__init__(
            f"parse {path}: {cause}", selector=selector, path=path, cause=cause
        )


class RenderError(VanityError):
    """The root template could not be executed."""

    def __init__(self, template, cause):
        super().__init__(f"execute {template}: {cause}")
        self.template = template
        self.cause = cause
