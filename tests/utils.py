"""
Utility functions for testing.
"""

import json
import threading
import time
from typing import Any, Dict, List, Optional, Union

import requests


def make_response(
    url: str,
    json_body: Any = None,
    status: int = 200,
    headers: Optional[Dict[str, str]] = None,
    body: Optional[Union[str, bytes]] = None,
) -> requests.Response:
    """
    Build a real ``requests.Response`` without touching the network.

    Args:
        url: URL the response pretends to come from
        json_body: Body to serialize as JSON
        status: HTTP status code
        headers: Response headers (e.g. ``Link``)
        body: Raw body, used when ``json_body`` is None

    Returns:
        Response object
    """
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.encoding = 'utf-8'
    if json_body is not None:
        response._content = json.dumps(json_body).encode('utf-8')
        response.headers['Content-Type'] = 'application/json'
    elif isinstance(body, str):
        response._content = body.encode('utf-8')
    else:
        response._content = body or b''
    response.headers.update(headers or {})
    return response


class FakeSession:
    """
    Stand-in for ``requests.Session`` serving canned responses by URL.

    Unknown URLs answer 404. A route may also be an exception (raised) or a
    list of responses (served in turn, the last one repeating).
    """

    def __init__(self, delay: float = 0.0):
        self.routes: Dict[str, Any] = {}
        self.headers: Dict[str, str] = {}
        self.calls: List[str] = []
        self.delay = delay
        self._lock = threading.Lock()

    def add(self, url: str, **kwargs) -> None:
        """Register a response for ``url`` (see ``make_response``)."""
        self.routes[url] = make_response(url, **kwargs)

    def add_sequence(self, url: str, responses: List[Any]) -> None:
        """Register responses (or exceptions) served one per call."""
        self.routes[url] = list(responses)

    def get(self, url, timeout=None, verify=None):
        with self._lock:
            self.calls.append(url)
            route = self.routes.get(url)
            if isinstance(route, list):
                route = route.pop(0) if len(route) > 1 else route[0]

        if self.delay:
            time.sleep(self.delay)

        if route is None:
            return make_response(url, json_body={'message': 'Not Found'}, status=404)
        if isinstance(route, Exception):
            raise route
        return route

    def calls_to(self, url: str) -> int:
        return self.calls.count(url)

    def close(self):
        pass


def branch_record(name: str, sha: str) -> Dict[str, Any]:
    """GitHub-shaped branch or tag record."""
    return {'name': name, 'commit': {'sha': sha, 'url': f"https://api.github.com/commits/{sha}"}}
