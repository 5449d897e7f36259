"""
Module for downloading and caching model and tokenizer files.
"""

import logging
import os

import requests

import settings
from errors import DownloadError
from model_catalog import (
    TOKENIZER_FILES,
    TOKENIZER_REPO,
    ModelOption,
    cache_path,
    format_file_size,
    resolve_url,
)
from vocabulary import VocabularyStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1 << 20


class ModelStore:
    """
    A local file cache keyed by Hugging Face resolve URLs.

    A file is downloaded only when it is not already in the cache directory.
    """

    def __init__(self, cache_dir: str = None, timeout: int = None) -> None:
        """
        Args:
            cache_dir: Local directory for downloaded files.
            timeout: Per-request timeout in seconds.
        """
        self.cache_dir: str = cache_dir or settings.CACHE_DIR
        self.timeout: int = timeout or settings.DOWNLOAD_TIMEOUT_SEC

    @staticmethod
    def _discard(partial: str) -> None:
        if os.path.exists(partial):
            os.remove(partial)

    def is_cached(self, repo: str, file_name: str) -> bool:
        return os.path.exists(cache_path(self.cache_dir, repo, file_name))

    def fetch(self, repo: str, file_name: str) -> str:
        """
        Returns the local path of a repo file, downloading it first if needed.

        Raises:
            DownloadError: If the server answers with anything but HTTP 200.
        """
        path = cache_path(self.cache_dir, repo, file_name)
        if os.path.exists(path):
            logger.info(f"Using cached {file_name} ({format_file_size(os.path.getsize(path))})")
            return path

        os.makedirs(os.path.dirname(path), exist_ok=True)
        url = resolve_url(repo, file_name)
        logger.info(f"Downloading {url}")

        partial = path + ".part"
        try:
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                if response.status_code != 200:
                    raise DownloadError(url, response.status_code)
                with open(partial, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
        except requests.RequestException as e:
            self._discard(partial)
            raise DownloadError(url, reason=str(e)) from e
        except Exception:
            self._discard(partial)
            raise
        os.replace(partial, path)

        logger.info(f"Downloaded {file_name} ({format_file_size(os.path.getsize(path))})")
        return path

    def fetch_tokenizer(self, repo: str = TOKENIZER_REPO) -> VocabularyStore:
        """Fetches the tokenizer files and builds the vocabulary from them."""
        paths = {name: self.fetch(repo, name) for name in TOKENIZER_FILES}
        return VocabularyStore.from_files(paths["tokenizer_config.json"], paths["tokenizer.json"])

    def fetch_model(self, option: ModelOption) -> str:
        return self.fetch(option.repo, option.file_name)
