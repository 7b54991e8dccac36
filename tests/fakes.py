"""
Scripted fakes for tests
========================
No network, no browser, no database:
- FakeSession / FakeResponse   stand-ins for requests.Session
- FakeAI                       scripted complete() answers
- FakeBrowserSession           scripted page states and tab clicks
- FakeConn                     psycopg2-like connection recording SQL
"""

import json
from contextlib import contextmanager

import requests
from requests.structures import CaseInsensitiveDict

from core.errors import BrowserDeadlineExceeded, BrowserRenderFailed


PUBLIC_IP = "93.184.216.34"


def public_resolver(host):
    return [PUBLIC_IP]


# ==============================================================================
# HTTP
# ==============================================================================

class FakeResponse:
    REDIRECT_STATI = (301, 302, 303, 307, 308)

    def __init__(self, status_code=200, body=b"", headers=None, encoding=None):
        self.status_code = status_code
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.headers = CaseInsensitiveDict(headers or {})
        self.encoding = encoding
        self.closed = False

    @property
    def is_redirect(self):
        return "location" in self.headers and self.status_code in self.REDIRECT_STATI

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.body), chunk_size):
            yield self.body[i:i + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """
    routes: {(method, url): FakeResponse | Exception}
    A ("*", url) key matches any method. Unknown routes answer 404.
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    def request(self, method, url, headers=None, timeout=None, allow_redirects=True, stream=False):
        self.calls.append({"method": method, "url": url, "headers": headers or {},
                           "allow_redirects": allow_redirects, "timeout": timeout})
        route = self.routes.get((method, url), self.routes.get(("*", url)))
        if route is None:
            return FakeResponse(404, b"not found")
        if isinstance(route, Exception):
            raise route
        return route


def html_response(html, status=200):
    return FakeResponse(status, html, headers={"content-type": "text/html; charset=utf-8"}, encoding="utf-8")


def connection_error(msg="connection refused"):
    return requests.ConnectionError(msg)


# ==============================================================================
# AI
# ==============================================================================

class FakeAI:
    """Returns scripted answers in order (last one repeats)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def complete(self, system, user, max_tokens=None, step="extract"):
        self.calls.append({"system": system, "user": user, "max_tokens": max_tokens})
        if not self.responses:
            return None
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    def get_run_cost(self):
        return 0.001 * len(self.calls)


def plans_json(*plans, warnings=None, fenced=False):
    text = json.dumps({
        "plans": list(plans),
        "detected_billing_options": sorted({p.get("billing_period", "unknown") for p in plans}),
        "warnings": warnings or [],
    })
    return f"```json\n{text}\n```" if fenced else text


def plan_dict(name, amount, period, price_string="", billing_evidence="", **extra):
    d = {
        "name": name,
        "price_amount": amount,
        "price_string": price_string or f"${amount}",
        "currency": "USD",
        "price_frequency": "per_year" if period == "yearly" else "per_month",
        "billing_period": period,
        "monthly_equivalent_amount": None,
        "annual_billed_amount": None,
        "included_units": [],
        "features": [],
        "evidence": {
            "name_snippet": name,
            "price_snippet": price_string or f"${amount}",
            "units_snippet": "",
            "billing_evidence": billing_evidence,
        },
    }
    d.update(extra)
    return d


# ==============================================================================
# BROWSER
# ==============================================================================

class FakeBrowserSession:
    """
    Scripted page.

    states: {"default": (html, text), "monthly": (html, text), "yearly": (html, text)}
    tabs:   raw discovery result (list of dicts), selectors map to a state name
            through `tab_states`
    noop_selectors: clicks that do not change anything
    """

    def __init__(self, states, tabs=None, tab_states=None, noop_selectors=(),
                 failing_selectors=(), url="https://example.com/pricing",
                 aria_result=False, fail_navigate=False, deadline_on_click=False):
        self.states = states
        self.tabs = tabs or []
        self.tab_states = tab_states or {}
        self.noop_selectors = set(noop_selectors)
        self.failing_selectors = set(failing_selectors)
        self.url = url
        self.aria_result = aria_result
        self.fail_navigate = fail_navigate
        self.deadline_on_click = deadline_on_click
        self.current = "default"
        self.clicks = []
        self.evaluations = []
        self.sleeps = []
        self.closed = False

    def navigate(self, url):
        if self.fail_navigate:
            raise BrowserRenderFailed("navigate failed: net::ERR_NAME_NOT_RESOLVED")
        self.url = url

    def wait_visible(self, selector):
        pass

    def sleep(self, seconds):
        self.sleeps.append(seconds)

    def evaluate_js(self, script, arg=None):
        self.evaluations.append((script, arg))
        if arg is None:
            return json.dumps(self.tabs)
        return self.aria_result

    def get_inner_html(self, selector):
        return self.states[self.current][0]

    def get_text(self, selector):
        return self.states[self.current][1]

    def click(self, selector):
        self.clicks.append(selector)
        if self.deadline_on_click:
            raise BrowserDeadlineExceeded("browser deadline of 60s exceeded before click")
        if selector in self.failing_selectors:
            raise BrowserRenderFailed(f"click failed: {selector} not visible")
        if selector in self.noop_selectors:
            return
        self.current = self.tab_states.get(selector, self.current)

    def current_url(self):
        return self.url


def session_factory_for(session):
    """session_factory yielding a prepared FakeBrowserSession."""

    @contextmanager
    def factory(conf):
        try:
            yield session
        finally:
            session.closed = True

    return factory


# ==============================================================================
# DATABASE
# ==============================================================================

class FakeCursor:
    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.conn.executed.append((" ".join(sql.split()), params))

    def executemany(self, sql, rows):
        rows = list(rows)
        self.conn.executed.append((" ".join(sql.split()), rows))

    def fetchall(self):
        return list(self.conn.rows)


class FakeConn:
    def __init__(self, rows=None):
        self.rows = rows or []
        self.executed = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.commits += 1
        else:
            self.rollbacks += 1
        return False

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.closed = True
