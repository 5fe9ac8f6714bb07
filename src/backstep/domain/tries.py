"""Try budget and iteration counter bounds."""

# Largest value the iteration counter may hold. Used as the try budget it
# means "keep trying until the operation succeeds or the context is done".
INFINITE_TRIES = 127
MAX_ITERATION = INFINITE_TRIES


def next_iteration(i: int) -> int:
    """Increment the iteration counter, saturating at MAX_ITERATION."""
    if i < MAX_ITERATION:
        return i + 1
    return i


def validate_tries(tries: int) -> None:
    """Validate a try budget

    Args:
        tries: Maximum number of calls, or INFINITE_TRIES

    Raises:
        ValueError: If tries is not an integer in [1, INFINITE_TRIES]
    """
    if isinstance(tries, bool) or not isinstance(tries, int):
        raise ValueError(f"tries must be an integer, got {tries!r}")
    if tries < 1 or tries > INFINITE_TRIES:
        raise ValueError(f"tries must be between 1 and {INFINITE_TRIES}, got {tries}")


def validate_iteration(i: int) -> None:
    if isinstance(i, bool) or not isinstance(i, int) or i < 0 or i > MAX_ITERATION:
        raise ValueError(f"iteration must be between 0 and {MAX_ITERATION}, got {i!r}")
