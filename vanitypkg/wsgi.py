"""WSGI entry point for gunicorn: `gunicorn -c gunicorn.conf.py vanitypkg.wsgi:app`."""

from vanitypkg.app import create_app
from vanitypkg.config import Config
from vanitypkg.logs import configure_logging

config = Config.from_env()
configure_logging(config.log_file, config.verbose)
app = create_app(config)
