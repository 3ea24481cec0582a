from __future__ import annotations

from collections import defaultdict

from sunvoy_client.application.ports.http_client_port import HttpResponse
from sunvoy_client.domain.errors import StorageError
from sunvoy_client.domain.model import CookieRecord, Session

BASE = "https://web.example.test"
API = "https://api.example.test"

LOGIN_PAGE = """
<html><body>
  <form method="post" action="/login">
    <input type="hidden" name="nonce" value="n0nc3-123">
    <input name="username"><input name="password" type="password">
  </form>
</body></html>
"""

SESSION_COOKIE = CookieRecord(domain="web.example.test", path="/", name="JSESSIONID", value="abc")


class FakeHttp:
    """Scripted transport: responses queued per (method, url); the last one repeats."""

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], list] = defaultdict(list)
        self.calls: list[tuple[str, str, dict]] = []
        self._cookies: dict[tuple[str, str, str], CookieRecord] = {}

    def add(self, method, url, status=200, text="", *, headers=None, set_cookies=(), raises=None):
        resp = HttpResponse(status, text, url, headers or {})
        self._routes[(method, url)].append((resp, tuple(set_cookies), raises))
        return self

    def _handle(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        queue = self._routes.get((method, url))
        if not queue:
            return HttpResponse(404, "not found", url, {})
        resp, cookies, raises = queue.pop(0) if len(queue) > 1 else queue[0]
        if raises is not None:
            raise raises
        self.set_cookies(cookies)
        return resp

    def get(self, url, *, headers=None, allow_redirects=True):
        return self._handle("GET", url, headers=headers, allow_redirects=allow_redirects)

    def post(self, url, *, data=None, content=None, headers=None, allow_redirects=True):
        return self._handle(
            "POST", url, data=data, content=content, headers=headers, allow_redirects=allow_redirects
        )

    def set_cookies(self, cookies):
        for c in cookies:
            self._cookies[c.key] = c

    def dump_cookies(self):
        return list(self._cookies.values())

    def clear_cookies(self):
        self._cookies.clear()

    def urls(self, method=None):
        return [url for m, url, _ in self.calls if method is None or m == method]


def scripted_login(http: FakeHttp, *, login_status=302) -> FakeHttp:
    http.add("GET", f"{BASE}/login", 200, LOGIN_PAGE)
    http.add(
        "POST",
        f"{BASE}/login",
        login_status,
        "" if login_status == 302 else "Invalid credentials",
        headers={"location": "/list"} if login_status == 302 else {},
        set_cookies=[SESSION_COOKIE] if login_status == 302 else [],
    )
    return http


class FailingStore:
    def __init__(self) -> None:
        self.saved = 0

    def load(self):
        return None

    def save(self, session: Session):
        self.saved += 1
        raise StorageError("disk full")

    def clear(self):
        pass
