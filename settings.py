"""
Runtime configuration read from environment variables, and logging setup.
"""

import logging
import os

CACHE_DIR = os.getenv("EMBEDDER_CACHE_DIR", "./model_cache")
MODEL = os.getenv("EMBEDDER_MODEL", "0")  # catalog index or label
REFERENCE_MODEL = os.getenv("EMBEDDER_REFERENCE_MODEL", "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2")
LOG_LEVEL = os.getenv("EMBEDDER_LOG_LEVEL", "INFO").upper()
DOWNLOAD_TIMEOUT_SEC = int(os.getenv("EMBEDDER_DOWNLOAD_TIMEOUT", "60"))

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are too chatty at INFO.
QUIET_LOGGERS = ("urllib3", "httpx", "sentence_transformers", "huggingface_hub")


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Installs a single stream handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
