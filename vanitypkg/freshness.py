"""
Change detection for the files behind a store.

A fingerprint maps the absolute path of every file matched by a selector to the
modification time (in nanoseconds) observed when the store was loaded. A store
is stale when the selector now resolves to a different number of files, or when
any matched file is newer than its recorded time (files with no entry are
always newer). Errors while checking count as stale, so a broken selector or a
vanished file leads to a reload attempt instead of silently serving old data.
"""

import glob
import os
from types import MappingProxyType
from typing import Mapping

from vanitypkg.errors import InvalidSelector
from vanitypkg.logs import get_logger

logger = get_logger("freshness")

Fingerprint = Mapping[str, int]

EMPTY_FINGERPRINT: Fingerprint = MappingProxyType({})


def make_fingerprint(mtimes) -> Fingerprint:
    """Freeze a {path: mtime_ns} dict into a read-only fingerprint."""
    return MappingProxyType(dict(mtimes))


def _has_unclosed_class(pattern):
    # fnmatch quietly treats an unclosed "[" as a literal; reject it instead
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c != "[":
            continue
        j = i
        if j < n and pattern[j] == "!":
            j += 1
        if j < n and pattern[j] == "]":
            j += 1
        while j < n and pattern[j] != "]":
            j += 1
        if j >= n:
            return True
        i = j + 1
    return False


def resolve_selector(selector: str) -> list[str]:
    """Return the sorted absolute paths of regular files matching selector.

    Raises InvalidSelector if the pattern itself is malformed.
    """
    if not selector:
        raise InvalidSelector(selector, "empty pattern")
    if "\x00" in selector:
        raise InvalidSelector(selector, "NUL byte in pattern")
    if _has_unclosed_class(selector):
        raise InvalidSelector(selector, "unterminated character class")
    try:
        matches = glob.glob(os.path.expanduser(selector))
    except (OSError, ValueError) as e:
        raise InvalidSelector(selector, e) from e
    return sorted(os.path.abspath(m) for m in matches if os.path.isfile(m))


def is_stale(selector: str, fingerprint: Fingerprint) -> bool:
    """Report whether the files matched by selector changed since fingerprint."""
    try:
        files = resolve_selector(selector)
    except InvalidSelector as e:
        logger.warning("stale check %r: %s", selector, e)
        return True

    if len(files) != len(fingerprint):
        logger.info(
            "file list for %r is stale (%d files, %d loaded)",
            selector,
            len(files),
            len(fingerprint),
        )
        return True

    for path in files:
        try:
            mtime = os.stat(path).st_mtime_ns
        except OSError as e:
            logger.warning("stale check stat %s: %s", path, e)
            return True
        recorded = fingerprint.get(path)
        if recorded is None or mtime > recorded:
            logger.info("file is stale: %s", path)
            return True
    return False
