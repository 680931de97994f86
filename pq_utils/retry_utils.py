from pymongo.errors import DuplicateKeyError, PyMongoError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from .logger_utils import logger


def on_retry_callback(retry_state):
    """Callback function to log retry attempts."""
    logger.warning(
        f"Retrying function {retry_state.fn.__name__}, "
        f"attempt {retry_state.attempt_number} after {retry_state.seconds_since_start:.2f}s..."
    )


# Store bootstrap: keep trying while MongoDB comes up
store_retry = retry(
    wait=wait_exponential(multiplier=1, min=2, max=60),
    stop=stop_after_attempt(5),
    retry=retry_if_exception_type(PyMongoError),
    before_sleep=on_retry_callback,
    reraise=True,
)

# Concurrent upserts on a unique key: the loser retries and matches the winner's row
upsert_retry = retry(
    stop=stop_after_attempt(3),
    retry=retry_if_exception_type(DuplicateKeyError),
    before_sleep=on_retry_callback,
    reraise=True,
)
