"""Gunicorn config for local development only. Not auto-discovered."""

wsgi_app = "vanitypkg.wsgi:app"
bind = "127.0.0.1:8002"
worker_class = "gthread"
workers = 1
threads = 4
reload = True
