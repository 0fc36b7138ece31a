class FilingIndexError(Exception):
    """Base class for every error raised by the filing index."""


class RemoteFetchFailure(FilingIndexError):
    pass


class HashMismatch(FilingIndexError):

    def __init__(self, source_locator: str, expected_hash: str, actual_hash: str):
        self.source_locator = source_locator
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Expected hash of {source_locator} to be {expected_hash}, but got {actual_hash}"
        )


class NotFound(FilingIndexError, KeyError):

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return str(self.args[0]) if self.args else ""


class DuplicateLocator(FilingIndexError):
    pass


class MalformedDocument(FilingIndexError):
    pass


class InvalidKey(FilingIndexError, ValueError):
    pass


class StorageFailure(FilingIndexError):
    pass


class InvalidFiling(FilingIndexError, ValueError):
    pass
