import time
from typing import Dict, Optional

import requests


RETRY_STATUSES = (429, 500, 502, 503, 504)
# A 5xx on a write may mean it was applied; only a rate-limit rejection is safe to resend
NON_IDEMPOTENT_RETRY_STATUSES = (429,)
DEFAULT_TIMEOUT = 30
DEFAULT_MAX_RETRIES = 3


def build_session(headers: Dict[str, str]) -> requests.Session:
    session = requests.Session()
    session.headers.update(headers)
    return session


def call_with_backoff(
    session,
    method: str,
    url: str,
    params: Optional[Dict] = None,
    json: Optional[Dict] = None,
    data: Optional[Dict] = None,
    timeout: int = DEFAULT_TIMEOUT,
    max_retries: int = DEFAULT_MAX_RETRIES,
    idempotent: bool = True,
    sleep=time.sleep,
) -> requests.Response:
    """Send a request, retrying transient failures with exponential backoff.

    Non-transient HTTP errors are raised straight away via raise_for_status().
    With ``idempotent=False`` only 429 responses and connect timeouts (the
    request never reached the server) are retried.
    """
    if idempotent:
        retry_statuses = RETRY_STATUSES
        retry_errors = (requests.ConnectionError, requests.Timeout)
    else:
        retry_statuses = NON_IDEMPOTENT_RETRY_STATUSES
        retry_errors = (requests.ConnectTimeout,)

    backoff = 1
    for attempt in range(max_retries + 1):
        try:
            r = session.request(method, url, params=params, json=json, data=data, timeout=timeout)
        except retry_errors as e:
            if attempt == max_retries:
                raise
            print(f"  🔄 {method} {url} failed ({e}), retrying in {backoff}s")
        else:
            if r.status_code not in retry_statuses or attempt == max_retries:
                r.raise_for_status()
                return r
            print(f"  🔄 {method} {url} returned {r.status_code}, retrying in {backoff}s")
        sleep(backoff)
        backoff = min(backoff * 2, 16)
