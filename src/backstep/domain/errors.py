"""Errors raised by the retry loop and interval policies."""


class BackoffError(Exception):
    """Base class for backstep errors."""

    pass


class AllTriesFailed(BackoffError):
    """Every permitted call of the operation reported failure."""

    def __init__(self, tries: int):
        super().__init__("all tries failed")
        self.tries = tries


class BackoffContextTimeoutExceeded(BackoffError):
    """The cancellation context was done before the operation succeeded."""

    def __init__(self) -> None:
        super().__init__("backoff context timeout exceeded")


class SeedError(BackoffError):
    """The secure random source could not produce a seed."""

    pass
