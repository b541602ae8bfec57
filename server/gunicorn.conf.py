"""Gunicorn configuration for the back-office API.

Values come from the same ``Settings`` the app reads, so HOST, PORT, WORKERS
and LOG_LEVEL mean one thing everywhere.

The response cache and rate-limit counters live in process memory. Each
worker holds its own copy, so with N workers a client can get up to N times
its configured quota and reads may be served stale by a worker that missed
an invalidation. WORKERS therefore defaults to 1.

Usage:
    gunicorn main:app -c gunicorn.conf.py
"""
import os

from core.config import Settings

settings = Settings()

bind = f"{settings.host}:{settings.port}"
workers = settings.workers
worker_class = "uvicorn.workers.UvicornWorker"

timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))

# No max_requests: a worker restart would wipe the cache and reset every
# client's window mid-stream.

accesslog = None if settings.debug else "-"
errorlog = "-"
loglevel = settings.log_level.lower()

proc_name = "backoffice-api"

# The lifespan starts the sweepers per worker, so preloading is safe.
preload_app = not settings.debug
