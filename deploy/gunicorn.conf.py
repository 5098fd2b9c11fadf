"""
Gunicorn configuration for the Lecture Reporting API.

    gunicorn lecture_reporting.main:app -c deploy/gunicorn.conf.py
"""
import os
import multiprocessing

# Server socket
bind = os.environ.get("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
# SQLite serializes writers; keep the default small unless DATABASE_URL points elsewhere
default_workers = 2 if "sqlite" in os.environ.get("DATABASE_URL", "sqlite") else multiprocessing.cpu_count() * 2 + 1
workers = int(os.environ.get("WEB_CONCURRENCY", default_workers))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 60
keepalive = 5

# Logging to stdout/stderr
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)sus'

proc_name = "lecture-reporting"

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def when_ready(server):
    server.log.info("✓ Lecture Reporting API ready on %s with %s workers", bind, workers)


def worker_int(worker):
    worker.log.info("Worker %s interrupted", worker.pid)
