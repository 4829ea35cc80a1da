"""
HTTP and web helpers shared by the views, the tasks, and the GitHub port.
"""

import hashlib
import hmac
import os
from functools import wraps
from time import sleep as retry_sleep   # so that we can patch it for tests.

import arrow
import requests
import sentry_sdk
from flask import jsonify, request, Response, url_for
from urlobject import URLObject

from pr_lifecycle_labels import logger

# The webhook signature headers GitHub sends, best first.
SIGNATURE_HEADERS = [
    ("X-Hub-Signature-256", "sha256", hashlib.sha256),
    ("X-Hub-Signature", "sha1", hashlib.sha1),
]


def _credentials_match(username, password):
    expected_user = os.environ.get('HTTP_BASIC_AUTH_USERNAME')
    expected_password = os.environ.get('HTTP_BASIC_AUTH_PASSWORD')
    if not expected_user or not expected_password:
        return False
    return (
        hmac.compare_digest(username or "", expected_user) and
        hmac.compare_digest(password or "", expected_password)
    )


def requires_auth(f):
    """
    Protect a view with HTTP basic auth, checked against the
    HTTP_BASIC_AUTH_USERNAME and HTTP_BASIC_AUTH_PASSWORD environment variables.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        auth = request.authorization
        if auth is None or not _credentials_match(auth.username, auth.password):
            return Response(
                "Credentials needed for this URL.\n", 401,
                {"WWW-Authenticate": 'Basic realm="pr-lifecycle-labels"'},
            )
        return f(*args, **kwargs)
    return decorated


class RequestFailed(Exception):
    """An HTTP request to GitHub returned an error status."""
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def log_check_response(response, raise_for_status=True):
    """
    Log a request and its response at debug level, and raise RequestFailed
    if it didn't succeed.

    Arguments:
        response (requests.Response)
        raise_for_status (bool): if False, only log.
    """
    req = response.request
    logger.debug(f"Request: {req.method} {req.url}: {req.body!r}")
    logger.debug(f"Response: {response.status_code} {response.reason!r} for {response.url}: {response.content!r}")
    if raise_for_status and not response.ok:
        raise RequestFailed(
            f"HTTP request failed: {req.method} {req.url}. Response body: {response.content}",
            status_code=response.status_code,
        )


def log_rate_limit(session):
    """Ask GitHub how much of the rate limit is left, and log it."""
    rate = session.get("/rate_limit").json()["rate"]
    reset = arrow.get(rate["reset"])
    logger.info(
        f"Rate limit: used {rate['used']} of {rate['limit']}, {rate['remaining']} left, "
        f"resets {reset.humanize()} ({reset.format('YYYY-MM-DD HH:mm:ss')} UTC)"
    )


def signature_for(secret: str, payload: bytes, algorithm: str = "sha256") -> str:
    """The signature GitHub would send for `payload`, like "sha256=abc123..."."""
    digestmod = {name: mod for _, name, mod in SIGNATURE_HEADERS}[algorithm]
    return f"{algorithm}=" + hmac.new(secret.encode(), msg=payload, digestmod=digestmod).hexdigest()


def is_valid_signature(secret: str, signature: str, payload: bytes) -> bool:
    """
    Does `signature` (a "sha256=..." or "sha1=..." string from GitHub) match
    `payload` signed with the shared `secret`?
    """
    algorithm, _, _ = signature.partition("=")
    if not secret or algorithm not in {name for _, name, _ in SIGNATURE_HEADERS}:
        return False
    expected = signature_for(secret, payload, algorithm)
    return hmac.compare_digest(expected.encode(), signature.encode())


def request_signature(headers) -> str:
    """The best webhook signature in the request headers, or ""."""
    for header, _, _ in SIGNATURE_HEADERS:
        if headers.get(header):
            return headers[header]
    return ""


def text_summary(text, length=40):
    """
    Shorten `text` to at most `length` characters, eliding the middle.
    """
    if len(text) <= length:
        return text
    head = (length - 3) // 2
    tail = length - 3 - head
    return f"{text[:head]}...{text[-tail:]}"


def retry_get(session, url, tries=5, pause=.5, **kwargs):
    """
    GET a URL, trying again if it's a 404.

    GitHub sometimes sends an event about a pull request and then says the
    pull request (or its reviews) don't exist for a moment.  The last
    response is returned whatever it was.
    """
    for attempt in range(tries):
        resp = session.get(url, **kwargs)
        if resp.status_code != 404 or attempt == tries - 1:
            break
        logger.debug(f"404 for {url}, trying again")
        retry_sleep(pause)
    return resp


def paginated_get(url, session=None, limit=None, per_page=100, callback=None, **kwargs):
    """
    Yield every object from a GitHub-style paginated list, following the
    "next" links in the Link header.

    No more than `limit` objects are yielded, and no pages are fetched past
    the one that reaches it.
    """
    session = session or requests.Session()
    next_url = URLObject(url).set_query_param("per_page", str(per_page))
    returned = 0
    while next_url:
        resp = retry_get(session, next_url, **kwargs)
        log_check_response(resp)
        if callable(callback):
            callback(resp)
        for item in resp.json():
            yield item
            returned += 1
            if limit is not None and returned >= limit:
                return
        next_url = resp.links.get("next", {}).get("url")


def sentry_extra_context(data_dict):
    """Attach the keys and values from data_dict to Sentry events as extra data."""
    for key, value in data_dict.items():
        sentry_sdk.set_extra(key, value)


def queue_task(task, *args, **kwargs):
    """
    Start a Celery task, and make the 202 response for the view that started it.
    """
    result = task.delay(*args, **kwargs)
    status_url = url_for("tasks.status", task_id=result.id, _external=True)
    logger.info(f"Queued {task.name} as {result.id}: {status_url}")
    resp = jsonify({"message": "queued", "status_url": status_url})
    resp.status_code = 202
    resp.headers["Location"] = status_url
    return resp
