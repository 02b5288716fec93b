"""Shared JSON-over-HTTP helper for the bundled clients."""

from typing import Any, Mapping, Optional

import requests

from pyqt_recordlink.protocols import ServiceError


def request_json(method: str, url: str, headers: Optional[Mapping[str, str]] = None,
                 json_body: Any = None, timeout: float = 10.0) -> Any:
    """
    Send a request and return the decoded JSON body.

    Raises ServiceError for transport failures, non-2xx statuses and bodies
    that are not JSON.
    """
    resp = None
    try:
        resp = requests.request(method, url, headers=dict(headers or {}), json=json_body,
                                timeout=timeout)

        if resp.status_code >= 500:
            raise ServiceError(url, resp.status_code, resp.reason)
        elif resp.status_code >= 400:
            raise ServiceError(url, resp.status_code, resp.reason,
                               message=f"{url}: request rejected: {resp.status_code} {resp.reason}")
        elif resp.status_code < 200 or resp.status_code >= 300:
            raise ServiceError(url, resp.status_code, resp.reason,
                               message="Unexpected response from server: {0} {1}"
                               .format(resp.status_code, resp.reason))

        return resp.json()

    except ValueError as ex:
        if resp is not None and resp.text and ("<body" in resp.text or "<BODY" in resp.text):
            raise ServiceError(url, message="HTML returned where JSON expected (is service URL correct?)",
                               cause=ex)
        raise ServiceError(url, message="Unable to parse response as JSON (is service URL correct?)",
                           cause=ex)
    except requests.RequestException as ex:
        raise ServiceError(url, cause=ex)
