from flask import Blueprint, Flask, Response

from vanitypkg.config import Config
from vanitypkg.logs import get_logger
from vanitypkg.server import ConfigServer

logger = get_logger("app")


###############################################################################
# DATA
###############################################################################


def log_stats(server):
    snapshot = server.snapshot
    hidden = sum(1 for p in snapshot.projects.values() if p.hidden)
    logger.info("***********************************************")
    logger.info("                    STATS")
    logger.info("- %d templates (%s)", len(snapshot.templates or ()), snapshot.template_selector)
    logger.info("- %d projects, %d hidden (%s)", len(snapshot.projects), hidden, snapshot.project_selector)
    logger.info("- reload on request: %s", server.config.reload)
    logger.info("***********************************************")


###############################################################################
# ROUTES
###############################################################################


# requests are served the same whatever their method
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def vanity_blueprint(server):
    """Every path under the mount point is served by the same handler."""
    bp = Blueprint("vanity", __name__)

    @bp.route("/", defaults={"sub_path": ""}, methods=ALL_METHODS)
    @bp.route("/<path:sub_path>", methods=ALL_METHODS)
    def page(sub_path):
        result = server.handle(sub_path)
        return Response(
            result.body,
            status=result.status,
            headers=result.headers,
            mimetype=result.mimetype,
        )

    return bp


def create_app(config=None, server=None):
    """Build the Flask app.

    Without an explicit server the configured templates and projects are
    loaded eagerly, and a LoadError propagates: there is nothing to serve
    without an initial snapshot.
    """
    config = config or Config()
    if server is None:
        server = ConfigServer(config)
        server.load()
        log_stats(server)

    app = Flask(__name__)
    app.extensions["vanity"] = server

    mount = config.mount_path.rstrip("/")
    app.register_blueprint(vanity_blueprint(server), url_prefix=mount or None)
    return app
