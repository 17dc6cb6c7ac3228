#!/usr/bin/env python3
import logging
import os

import uvicorn

from student_insights.core.config import settings
from student_insights.core.logging import setup_logging


setup_logging()
logger = logging.getLogger("run_server")


def get_ssl_params() -> dict:
    key = settings.SSL_KEYFILE
    cert = settings.SSL_CERTFILE
    if not (key and cert and os.path.exists(key) and os.path.exists(cert)):
        logger.warning("Starting over HTTP (no SSL certificates found).")
        return {}
    logger.info("Using SSL certificates for HTTPS.")
    return {"ssl_keyfile": key, "ssl_certfile": cert}


def main() -> None:
    params = get_ssl_params()
    scheme = "https" if params else "http"
    logger.info(f"Serving on {scheme}://{settings.HOST}:{settings.PORT}")

    uvicorn.run(
        "student_insights.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
        **params,
    )


if __name__ == "__main__":
    main()
