class MintingError(Exception):
    """Raised when the minting service fails or returns something unusable.

    Attributes:
        status_code: HTTP status code from the minting service, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MintingNotConfiguredError(MintingError):
    """Raised when no minting service is configured."""
