"""
Exception hierarchy shared by the tokenizer, extractor and model loading code.
"""


class EmbedderError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(EmbedderError):
    """Raised when tokenizer configuration or model selection is unusable."""


class MissingOutputError(EmbedderError):
    """Raised when an inference result carries no usable output tensor."""


class UnsupportedOutputShapeError(EmbedderError):
    """Raised when an output tensor is neither [1, hidden] nor [1, seq, hidden]."""

    def __init__(self, shape) -> None:
        self.shape = tuple(shape)
        super().__init__(f"Unsupported output shape {list(self.shape)}: expected rank 2 or 3")


class DownloadError(EmbedderError):
    """Raised when a model or tokenizer file cannot be downloaded."""

    def __init__(self, url: str, status: int = None, reason: str = None) -> None:
        self.url = url
        self.status = status
        if status is not None:
            message = f"Failed to download {url}: HTTP status {status}"
        else:
            message = f"Failed to download {url}: {reason or 'connection error'}"
        super().__init__(message)
