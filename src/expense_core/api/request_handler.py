"""
Single-shot HTTP gateway calls with a wall-clock deadline.

`requests` applies its timeout to the connect and to each socket read, so a
server that trickles its body can hold a call open indefinitely. The body is
therefore streamed and read against a deadline covering the whole call.
"""

import logging
import json
import time
import uuid
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

# Small reads so the deadline is checked while a slow body is arriving
READ_CHUNK_SIZE = 1


class RequestHandler:
    """
    Issues one request per call against a base URL.

    Every call carries its own `X-Correlation-ID` so gateway logs and ours
    can be matched. Retrying or falling back is left to the caller.
    """

    def __init__(self,
                 session: requests.Session,
                 base_url: str,
                 timeout: float):
        """
        Args:
            session: Session already carrying the auth and default headers
            base_url: Root the endpoints are joined to
            timeout: Seconds allowed for a whole call, body included
        """
        self.session = session
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _get_correlation_id(self) -> str:
        return str(uuid.uuid4())

    def _read_body(self, response: requests.Response, deadline: float, timeout: float) -> None:
        """Load the streamed body into the response, or raise Timeout past the deadline"""
        chunks = []
        try:
            for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise requests.Timeout(f"Response body not received within {timeout:g}s")
        except requests.ConnectionError as e:
            if time.monotonic() > deadline:
                raise requests.Timeout(f"Response body not received within {timeout:g}s") from e
            raise
        finally:
            response.close()
        response._content = b''.join(chunks)

    def make_request(self,
                     method: str,
                     endpoint: str,
                     data: Optional[Dict[str, Any]] = None,
                     headers: Optional[Dict[str, Any]] = None,
                     timeout: Optional[float] = None) -> requests.Response:
        """
        Send one request and hand back the response with its body loaded.

        Any status code is returned as is; deciding what a 429 or a 500
        means belongs to the caller.

        Args:
            method: HTTP verb
            endpoint: Path relative to the base URL
            data: JSON-serializable body
            headers: Per-call headers on top of the session's
            timeout: Deadline in seconds for this call only

        Returns:
            requests.Response: The response, `.json()` and `.text` usable

        Raises:
            requests.Timeout: The deadline passed before the body arrived
            requests.RequestException: Connection or protocol failures
        """
        correlation_id = self._get_correlation_id()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        request_timeout = timeout or self.timeout
        deadline = time.monotonic() + request_timeout
        request_headers = {'X-Correlation-ID': correlation_id}
        if headers:
            request_headers.update(headers)

        body = json.dumps(data) if data is not None else None

        logger.debug(f"{method} {url} [{correlation_id}]")

        response = self.session.request(
            method=method,
            url=url,
            data=body,
            headers=request_headers,
            timeout=request_timeout,
            stream=True
        )
        self._read_body(response, deadline, request_timeout)

        logger.debug(f"{response.status_code} from {url} [{correlation_id}]")
        return response
