"""
Run the vanity package server with Flask's threaded server.

Usage:
    python -m vanitypkg --templates 'templates/*.tpl.*' --projects projects.json
    python -m vanitypkg --http :8002 --analytics UA-12345678-1
    python -m vanitypkg --check      # load templates and projects, then exit

Unset flags fall back to the VANITY_* environment variables (see config.py).
For production use gunicorn with gunicorn.conf.py instead.
"""

import argparse
import sys

from vanitypkg.app import create_app
from vanitypkg.config import Config
from vanitypkg.errors import VanityError
from vanitypkg.logs import configure_logging, get_logger

logger = get_logger()


def build_parser():
    parser = argparse.ArgumentParser(prog="vanitypkg", description="Vanity package page server")
    parser.add_argument("--log", dest="log_file", help="Log file (empty string disables it)")
    parser.add_argument("--templates", dest="template_glob", help="Template glob (e.g. 'templates/*.tpl.*')")
    parser.add_argument("--projects", dest="project_glob", help="JSON project file glob")
    parser.add_argument("--http", dest="http_addr", help="Address on which to listen for http connections")
    parser.add_argument("--mount", dest="mount_path", help="Path prefix the pages are served under")
    parser.add_argument("--analytics", help="Analytics property ID passed to templates")
    parser.add_argument("--doc-host", dest="doc_host", help="Documentation URL prefix for redirects")
    parser.add_argument(
        "--no-reload",
        dest="reload",
        action="store_false",
        default=None,
        help="Do not reload templates and projects when they change",
    )
    parser.add_argument("--verbose", action="store_true", default=None, help="Debug logging")
    parser.add_argument("--check", action="store_true", help="Load the configuration and exit")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env().with_overrides(
            log_file=args.log_file,
            template_glob=args.template_glob,
            project_glob=args.project_glob,
            http_addr=args.http_addr,
            mount_path=args.mount_path,
            analytics=args.analytics,
            doc_host=args.doc_host,
            reload=args.reload,
            verbose=args.verbose,
        )
    except VanityError as e:
        configure_logging(None)
        logger.error("config: %s", e)
        return 1

    try:
        configure_logging(config.log_file, config.verbose)
    except OSError as e:
        configure_logging(None)
        logger.error("open log: %s", e)
        return 1

    try:
        host, port = config.host_port()
        app = create_app(config)
    except VanityError as e:
        logger.error("startup: %s", e)
        return 1

    if args.check:
        logger.info("configuration OK")
        return 0

    logger.info("Listening on %s:%d...", host, port)
    app.run(host=host, port=port, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
