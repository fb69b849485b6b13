class ConfigurationError(Exception):
    """Required configuration is missing."""


class EmptyGenerationError(Exception):
    """The model answered successfully but without usable text."""


class PublishError(Exception):
    """Writing to the collaboration platform failed."""

    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status
