"""Search backend speaking the Algolia REST query API."""

import logging
from typing import Optional
from urllib.parse import quote

from pyqt_recordlink.clients._http import request_json
from pyqt_recordlink.protocols import SearchBackendError, SearchResponse

logger = logging.getLogger(__name__)


class AlgoliaSearchBackend:
    """
    Queries one index per collection with a secured search key.

    The secured key already restricts what can be read; the rendered row
    filter is sent as the ``filters`` parameter on top of it.
    """

    QUERY_URL = "https://{app_id}-dsn.algolia.net/1/indexes/{index}/query"

    def __init__(self, app_id: Optional[str] = None, hits_per_page: Optional[int] = None,
                 timeout: float = 10.0):
        self.app_id = app_id
        self.hits_per_page = hits_per_page
        self.timeout = timeout

    def query(self, collection: str, filters: str, secret: str, text: str,
              app_id: Optional[str] = None) -> SearchResponse:
        app_id = app_id or self.app_id
        if not app_id:
            raise SearchBackendError("No search application ID available")

        url = self.QUERY_URL.format(app_id=app_id.lower(), index=quote(collection, safe=""))
        body = {"query": text or ""}
        if filters:
            body["filters"] = filters
        if self.hits_per_page:
            body["hitsPerPage"] = self.hits_per_page

        headers = {
            "X-Algolia-Application-Id": app_id,
            "X-Algolia-API-Key": secret,
        }
        data = request_json("POST", url, headers=headers, json_body=body, timeout=self.timeout)
        hits = data.get("hits") or []
        logger.debug(f"{collection}: {len(hits)} of {data.get('nbHits')} hits for {text!r}")
        return SearchResponse(hits=hits, total_count=data.get("nbHits", len(hits)), loading=False)
