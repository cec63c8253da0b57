"""Gunicorn config for production: `gunicorn -c gunicorn.conf.py`."""

import os

wsgi_app = "vanitypkg.wsgi:app"

# VANITY_HTTP uses the ":8002" form; gunicorn wants "host:port"
_addr = os.environ.get("VANITY_HTTP", ":8002")
bind = _addr if not _addr.startswith(":") else "0.0.0.0" + _addr

# Each worker holds its own snapshot and reloads it on request when stale,
# so threads (not gunicorn's reload) pick up template and project changes
worker_class = "gthread"
workers = 2
threads = 8
