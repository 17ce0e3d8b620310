"""Gunicorn configuration file.

Each request runs synchronously on its own worker thread (gthread). Store
and provisioning calls block that thread for at most their configured
timeouts, so ``timeout`` only needs to cover the slowest request.

The MongoDB client is created in each worker after fork (pymongo clients
are not fork-safe), once per process.
"""
import os

wsgi_app = "app.flask_app:create_app()"

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8080")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", "8"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))
preload_app = False
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("GUNICORN_LOG_LEVEL", "info")


def post_fork(server, worker):
    """
    Called just after a worker has been forked.
    
    Routes application loggers through gunicorn's error log so module
    loggers (app.core.*, app.api.*) share one format and level.
    """
    import logging
    
    app_logger = logging.getLogger("app")
    app_logger.handlers = worker.log.error_log.handlers
    app_logger.setLevel(worker.log.error_log.level)
    app_logger.propagate = False
    
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"
    if demo_mode:
        worker.log.warning("DEMO_MODE=true - in-memory store is per worker, data is not shared")
    worker.log.info(f"Worker {worker.pid} ready | threads={threads}")
