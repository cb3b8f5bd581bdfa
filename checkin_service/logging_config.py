import logging
import sys
import time

from flask import g, request

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

request_logger = logging.getLogger("checkin_service.requests")


def configure_logging(level="INFO"):
    """Attach one stdout handler to the package logger."""
    logger = logging.getLogger("checkin_service")
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    if not any(getattr(h, "_checkin_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._checkin_handler = True
        logger.addHandler(handler)
    return logger


def register_request_logging(app):
    """Log method, path, status and time taken for every request."""

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.pop("request_started", None)
        elapsed = time.perf_counter() - started if started is not None else 0.0
        request_logger.info(
            "IP=%s | %s %s | Status=%s | Time=%.4fs",
            request.remote_addr, request.method, request.path, response.status_code, elapsed,
        )
        response.headers["X-Process-Time"] = str(round(elapsed, 4))
        return response

    return app
