"""
odata_client.core.response - Response wrapper
==============================================
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Union

from odata_client.constants import UNABLE_TO_PARSE_RESPONSE
from odata_client.core.exceptions import ResponseParseError

if TYPE_CHECKING:
    from odata_client.core.request import ODataRequest

_MISSING = object()

# Orders(42) or People('russell') at the end of an entity id URL
_KEY_SEGMENT_RE = re.compile(r"\(([^()]*)\)/?$")


class ODataResponse:
    """
    Response of an executed ODataRequest.

    The body is decoded lazily; structured access to a body that is not
    valid JSON raises ResponseParseError. Collections are read from
    ``value`` (v4) or ``d.results`` (v2).

    Parameters
    ----------
    request : ODataRequest
        The request that produced this response
    body : bytes or str
        Raw response body
    status : int
        HTTP status code
    headers : dict, optional
        Response headers
    """

    def __init__(
        self,
        request: Optional["ODataRequest"],
        body: Union[bytes, str, None],
        status: int,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.request = request
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        self.raw_body: str = body or ""
        self.status = int(status)
        self.headers: Dict[str, str] = dict(headers or {})
        self._decoded: Any = _MISSING

    def __repr__(self) -> str:
        return f"<ODataResponse status={self.status} bytes={len(self.raw_body)}>"

    # ---------------- body ----------------

    @property
    def body(self) -> Any:
        """Decoded JSON body (None for an empty body)."""
        if self._decoded is _MISSING:
            if not self.raw_body.strip():
                self._decoded = None
            else:
                try:
                    self._decoded = json.loads(self.raw_body)
                except ValueError as e:
                    raise ResponseParseError(UNABLE_TO_PARSE_RESPONSE) from e
        return self._decoded

    def get_raw_body(self) -> str:
        return self.raw_body

    def get_status(self) -> int:
        return self.status

    def is_empty(self) -> bool:
        return not self.raw_body.strip()

    # ---------------- entities ----------------

    def entities(self) -> List[Dict[str, Any]]:
        """The entities in the body: a collection, a single entity, or []."""
        body = self.body
        if body is None:
            return []
        if isinstance(body, list):
            return body
        if not isinstance(body, dict):
            raise ResponseParseError(UNABLE_TO_PARSE_RESPONSE)
        if isinstance(body.get("value"), list):
            return body["value"]
        d = body.get("d")
        if isinstance(d, dict):
            if isinstance(d.get("results"), list):
                return d["results"]
            return [d]
        return [body]

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.entities())

    def __len__(self) -> int:
        return len(self.entities())

    def first(self) -> Optional[Dict[str, Any]]:
        items = self.entities()
        return items[0] if items else None

    @property
    def next_link(self) -> Optional[str]:
        body = self.body
        if not isinstance(body, dict):
            return None
        d = body.get("d")
        if isinstance(d, dict) and d.get("__next"):
            return d["__next"]
        return body.get("@odata.nextLink")

    @property
    def total_count(self) -> Optional[int]:
        """Inline count from ``@odata.count`` (v4) or ``d.__count`` (v2)."""
        body = self.body
        if not isinstance(body, dict):
            return None
        count = body.get("@odata.count")
        if count is None and isinstance(body.get("d"), dict):
            count = body["d"].get("__count")
        return int(count) if count is not None else None

    def get_id(self) -> Any:
        """
        Identifier of a created entity.

        Read from the body's ``id``/``Id``/``ID`` property, falling back to
        the key segment of the ``OData-EntityId`` or ``Location`` header.
        """
        body = self.body if not self.is_empty() else None
        if isinstance(body, dict):
            for key in ("id", "Id", "ID"):
                if key in body:
                    return body[key]

        headers = {k.lower(): v for k, v in self.headers.items()}
        entity_id = headers.get("odata-entityid") or headers.get("location")
        if not entity_id:
            return None
        m = _KEY_SEGMENT_RE.search(entity_id)
        if not m:
            return entity_id
        key = m.group(1)
        if key.startswith("'") and key.endswith("'"):
            return key[1:-1].replace("''", "'")
        return int(key) if key.isdigit() else key
