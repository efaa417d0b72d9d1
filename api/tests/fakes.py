"""In-memory upstream API used by the tests."""

import json
from typing import Any, Dict, List, Optional, Set

import httpx


BASE_URL = "https://upstream.test/api"


def url(resource: str, item_id: int) -> str:
    return f"{BASE_URL}/{resource}/{item_id}"


def _without_query(request_url: httpx.URL) -> str:
    return f"{request_url.scheme}://{request_url.host}{request_url.path}"


def build_dataset() -> Dict[str, List[Dict[str, Any]]]:
    """Small linked dataset shaped like the upstream API."""
    characters = [
        {
            "url": url("characters", 1), "name": "Eddard Stark",
            "father": "", "mother": "", "spouse": url("characters", 2),
            "allegiances": [url("houses", 1)], "books": [url("books", 1)], "povBooks": []
        },
        {
            "url": url("characters", 2), "name": "Catelyn Stark",
            "father": "", "mother": "", "spouse": url("characters", 1),
            "allegiances": [url("houses", 1), url("houses", 2)], "books": [url("books", 1), url("books", 2)],
            "povBooks": [url("books", 1)]
        },
        {
            "url": url("characters", 3), "name": "Robb Stark",
            "father": url("characters", 1), "mother": url("characters", 2), "spouse": "",
            "allegiances": [url("houses", 1)], "books": [url("books", 1)], "povBooks": []
        },
        {
            "url": url("characters", 4), "name": "Sansa Stark",
            "father": url("characters", 1), "mother": url("characters", 2), "spouse": "",
            "allegiances": [url("houses", 1)], "books": [url("books", 1), url("books", 3)],
            "povBooks": [url("books", 2)]
        },
        {
            "url": url("characters", 5), "name": "Arya Stark",
            "father": url("characters", 1), "mother": url("characters", 2), "spouse": "",
            "allegiances": [url("houses", 1)], "books": [url("books", 1)], "povBooks": [url("books", 1)]
        },
    ]
    books = [
        {
            "url": url("books", i), "name": name,
            "characters": [url("characters", c) for c in range(1, 6)],
            "povCharacters": [url("characters", 2), url("characters", 5)]
        }
        for i, name in enumerate(["A Game of Thrones", "A Clash of Kings", "A Storm of Swords"], start=1)
    ]
    houses = [
        {
            "url": url("houses", 1), "name": "House Stark of Winterfell",
            "currentLord": url("characters", 3), "heir": "", "overlord": "", "founder": "",
            "cadetBranches": [], "swornMembers": [url("characters", c) for c in range(1, 6)]
        },
        {
            "url": url("houses", 2), "name": "House Tully of Riverrun",
            "currentLord": "", "heir": "", "overlord": "", "founder": "",
            "cadetBranches": [], "swornMembers": [url("characters", 2)]
        },
    ]
    return {"characters": characters, "books": books, "houses": houses}


class FakeUpstream:
    """In-memory upstream API served through httpx.MockTransport.

    Lists are served as one based ``page``/``pageSize`` pages with a ``Link``
    header; single items by URL. Every request URL is recorded.
    """

    def __init__(self, data: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.data = data if data is not None else build_dataset()
        self.requests: List[httpx.URL] = []
        self.failing_paths: Set[str] = set()

    def item_requests(self) -> List[str]:
        """URLs of single item fetches, in request order."""
        return [
            _without_query(request_url)
            for request_url in self.requests
            if len(request_url.path.strip("/").split("/")) == 3
        ]

    def page_requests(self) -> List[str]:
        return [
            str(request_url)
            for request_url in self.requests
            if len(request_url.path.strip("/").split("/")) == 2
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request.url)
        path = request.url.path

        if path in self.failing_paths:
            return httpx.Response(500, json={"error": "upstream failure"})

        parts = path.strip("/").split("/")
        if len(parts) == 1:
            return httpx.Response(200, json={resource: f"{BASE_URL}/{resource}" for resource in self.data})

        resource = parts[1]
        if resource not in self.data:
            return httpx.Response(404, json={})

        items = self.data[resource]
        if len(parts) == 2:
            page = int(request.url.params.get("page", "1"))
            size = int(request.url.params.get("pageSize", "10"))
            chunk = items[(page - 1) * size:page * size]
            links = [f'<{BASE_URL}/{resource}?page=1&pageSize={size}>; rel="first"']
            if page * size < len(items):
                links.insert(0, f'<{BASE_URL}/{resource}?page={page + 1}&pageSize={size}>; rel="next"')
            return httpx.Response(200, json=chunk, headers={"Link": ", ".join(links)})

        target = _without_query(request.url)
        for item in items:
            if item["url"] == target:
                return httpx.Response(200, content=json.dumps(item).encode("utf-8"))
        return httpx.Response(404, json={})


