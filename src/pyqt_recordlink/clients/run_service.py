"""
Credential issuer backed by the project's run service.

The run service exposes two routes:

    GET  <base>/algoliaAppId      -> {"success": bool, "appId": str, "message": str}
    POST <base>/algoliaSearchKey  {"params": [collection]} -> {"key": str}
"""

import logging
from typing import Optional

from pyqt_recordlink.clients._http import request_json
from pyqt_recordlink.protocols import AppIdentifierResult, SearchSecretResult

logger = logging.getLogger(__name__)


class RunServiceCredentialIssuer:
    """Issues search credentials through the run service's REST routes."""

    APP_ID_EP = "/algoliaAppId"
    SEARCH_KEY_EP = "/algoliaSearchKey"

    def __init__(self, baseurl: str, auth_token: Optional[str] = None, timeout: float = 10.0):
        """
        initialize the client
        :param str   baseurl:  the base URL of the run service
        :param str auth_token: bearer token sent with every request, if required
        :param float timeout:  seconds to wait for each response
        """
        self.baseurl = baseurl.rstrip('/')
        self.timeout = timeout
        self._authhdr = {"Authorization": f"Bearer {auth_token}"} if auth_token else {}

    def issue_app_identifier(self) -> AppIdentifierResult:
        data = request_json("GET", self.baseurl + self.APP_ID_EP, headers=self._authhdr,
                            timeout=self.timeout)
        result = AppIdentifierResult(success=bool(data.get("success")),
                                     app_id=data.get("appId"),
                                     message=data.get("message") or "")
        if not result.success:
            logger.warning(f"Run service refused app ID: {result.message}")
        return result

    def issue_search_secret(self, collection: str) -> SearchSecretResult:
        data = request_json("POST", self.baseurl + self.SEARCH_KEY_EP, headers=self._authhdr,
                            json_body={"params": [collection]}, timeout=self.timeout)
        return SearchSecretResult(secret=data.get("key"))
