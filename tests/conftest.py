import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text="", headers=None):
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.headers = headers or {}

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Stands in for requests.Session: answers from a URL map or a queue."""

    def __init__(self, responses=None, queue=None):
        self.responses = responses or {}
        self.queue = list(queue or [])
        self.calls = []

    def _answer(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        if self.queue:
            answer = self.queue.pop(0)
        else:
            answer = self.responses[url]
        if isinstance(answer, Exception):
            raise answer
        return answer

    def get(self, url, **kwargs):
        return self._answer("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._answer("POST", url, kwargs)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def no_sleep(monkeypatch):
    """Make retry back-off instant in client modules."""
    import theme_gallery.infrastructure.github_client as github_client

    sleeps = []
    monkeypatch.setattr(github_client.time, "sleep", sleeps.append)
    return sleeps
