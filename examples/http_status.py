"""Poll an httpbin endpoint until it returns a successful status.

The endpoint randomly answers 200, 400 or 429. Each failed request is retried
with the default binary exponential backoff, for at most 5 calls and 10
seconds overall.

Example output:

    2026-10-18 15:31:57 - __main__ - INFO - got: 429
    2026-10-18 15:31:58 - __main__ - INFO - got: 400
    2026-10-18 15:32:00 - __main__ - INFO - got: 200
    2026-10-18 15:32:00 - __main__ - INFO - succeeded: 200

Requires the `examples` extra (requests).
"""

import logging
import sys

import requests

from backstep import Backoff, BackoffError, Context, default_binary_exponential

logger = logging.getLogger(__name__)

URL = "https://httpbin.org/status/200%2C400%2C429"
TIMEOUT = 10.0
TRIES = 5


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    state = {"response": None, "error": None}

    def fetch(ctx: Context) -> bool:
        remaining = ctx.remaining()
        if ctx.done() or remaining == 0:
            return False
        try:
            resp = requests.get(URL, timeout=remaining)
        except requests.exceptions.RequestException as e:
            # keep the last request error for inspection if all tries fail
            state["error"] = e
            logger.info(f"error: {e}")
            return False
        state["response"], state["error"] = resp, None
        logger.info(f"got: {resp.status_code}")
        return 200 <= resp.status_code < 400

    backoff = Backoff(default_binary_exponential())
    with Context.with_timeout(TIMEOUT) as ctx:
        try:
            backoff.retry(ctx, TRIES, fetch)
        except BackoffError as e:
            logger.error(f"failed: {e}")
            if state["error"] is not None:
                logger.error(f"last request error: {state['error']}")
            return 1

    logger.info(f"succeeded: {state['response'].status_code}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
