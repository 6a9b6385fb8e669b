"""
Request construction.

RequestBuilder turns a Route (or a GraphQL document, or a continuation URL)
plus the client identity into a PreparedRequest ready for the transport.
Construction failures are raised here, before any network access.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from pydantic_core import PydanticSerializationError, to_jsonable_python

from ..config.models import ClientIdentity
from ..exceptions import InvalidInputError, InvalidPaginationURLError
from ..models.http import PreparedRequest
from ..models.route import HTTPMethod, Route
from .url import URLValidator, flatten_params

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def encode_json(value: Any) -> bytes:
    """
    Encode a value as a strict JSON document.

    Raises:
        InvalidInputError: If the value has no JSON representation
    """
    try:
        return json.dumps(
            to_jsonable_python(value), allow_nan=False, separators=(",", ":")
        ).encode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise InvalidInputError(
            f"Value cannot be serialized to JSON: {e}", original_error=e
        ) from e


class RequestBuilder:
    """Builds protocol-correct requests for REST, GraphQL and pagination calls."""

    def headers(self, identity: ClientIdentity, requires_auth: bool = True) -> Dict[str, str]:
        """
        Headers sent with every request.

        The Authorization header is present only when the identity carries a
        token and the call requires authentication.
        """
        headers = {
            "Accept": JSON_CONTENT_TYPE,
            "Accept-Language": identity.language,
            "User-Agent": identity.user_agent,
            "X-App-Build": identity.build_version,
            "X-App-Id": identity.app_id,
            "X-Currency": identity.currency,
        }
        if requires_auth and identity.oauth_token is not None:
            headers["Authorization"] = f"Bearer {identity.oauth_token}"
        return headers

    def build(self, route: Route, identity: ClientIdentity) -> PreparedRequest:
        """
        Build the request for a REST route.

        Args:
            route: Route descriptor
            identity: Client identity supplying endpoints and headers

        Returns:
            PreparedRequest

        Raises:
            InvalidURLError: If the route path does not compose with the API base URL
            InvalidInputError: If a JSON body cannot be encoded
        """
        base_url = str(identity.server_config.api_base_url)
        url = URLValidator.join(base_url, route.path)
        headers = self.headers(identity, route.requires_auth)

        if route.upload is not None:
            # Content-Type with the multipart boundary is set by aiohttp
            request = PreparedRequest(
                method=route.method,
                url=url,
                headers=headers,
                upload=route.upload,
                form_fields=tuple(flatten_params(route.query)),
            )
        elif route.method.sends_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
            request = PreparedRequest(
                method=route.method,
                url=url,
                headers=headers,
                body=encode_json(dict(route.query)),
            )
        else:
            request = PreparedRequest(
                method=route.method,
                url=URLValidator.with_query(url, route.query),
                headers=headers,
            )

        logger.debug("Built request %s", request.describe())
        return request

    def build_graph(
        self,
        identity: ClientIdentity,
        document: str,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> PreparedRequest:
        """Build the POST request for a GraphQL document."""
        headers = self.headers(identity, requires_auth=True)
        headers["Content-Type"] = JSON_CONTENT_TYPE
        payload = {"query": document, "variables": dict(variables or {})}

        return PreparedRequest(
            method=HTTPMethod.POST,
            url=str(identity.server_config.graphql_endpoint),
            headers=headers,
            body=encode_json(payload),
        )

    def build_for_url(self, url: str, identity: ClientIdentity) -> PreparedRequest:
        """
        Build a GET for an absolute continuation URL, used verbatim.

        Raises:
            InvalidPaginationURLError: If ``url`` is not a valid absolute URL
        """
        if not URLValidator.is_valid_url(url):
            raise InvalidPaginationURLError(f"Invalid pagination URL: {url!r}", url=url)

        return PreparedRequest(
            method=HTTPMethod.GET,
            url=url,
            headers=self.headers(identity, requires_auth=True),
        )
