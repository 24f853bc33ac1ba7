import pytest
import requests

from theme_gallery.domain.theme import RepoStats
from theme_gallery.infrastructure.github_client import GitHubAPIError, RateLimitExceeded
from theme_gallery.infrastructure.rest_client import ContentFile, GitHubRestClient


LISTING_URL = "https://api.example.com/contents"
REPO_URL = "https://api.github.com/repos/acme/theme-x"


def _client(session, token="t"):
    return GitHubRestClient(token=token, contents_url=LISTING_URL, session=session)


def test_listing_keeps_markdown_files_in_order(fake_session, fake_response):
    listing = [
        {"name": "2020-1-1-b.md", "download_url": "https://raw.example.com/b.md"},
        {"name": "README.txt", "download_url": "https://raw.example.com/README.txt"},
        {"name": "2019-1-1-a.md", "download_url": "https://raw.example.com/a.md"},
        {"name": "dir.md", "download_url": None},
    ]
    session = fake_session({LISTING_URL: fake_response(200, listing)})

    files = _client(session).list_descriptor_files()

    assert files == [
        ContentFile("2020-1-1-b.md", "https://raw.example.com/b.md"),
        ContentFile("2019-1-1-a.md", "https://raw.example.com/a.md"),
    ]
    headers = session.calls[0][2]["headers"]
    assert headers["Authorization"] == "token t"
    assert headers["Accept"] == "application/vnd.github.v3+json"


def test_listing_without_token_sends_no_authorization(fake_session, fake_response, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    session = fake_session({LISTING_URL: fake_response(200, [])})

    GitHubRestClient(contents_url=LISTING_URL, session=session).list_descriptor_files()

    assert "Authorization" not in session.calls[0][2]["headers"]


def test_non_list_payload_is_a_listing_failure(fake_session, fake_response):
    session = fake_session({LISTING_URL: fake_response(200, {"message": "Not Found"})})
    with pytest.raises(GitHubAPIError):
        _client(session).list_descriptor_files()


@pytest.mark.parametrize("status", [403, 429])
def test_listing_rate_limit_is_typed(fake_session, fake_response, status):
    session = fake_session({LISTING_URL: fake_response(status)})
    with pytest.raises(RateLimitExceeded) as excinfo:
        _client(session).list_descriptor_files()
    assert excinfo.value.status_code == status


def test_listing_other_failure_is_generic(fake_session, fake_response):
    session = fake_session({LISTING_URL: fake_response(500)})
    with pytest.raises(GitHubAPIError) as excinfo:
        _client(session).list_descriptor_files()
    assert not isinstance(excinfo.value, RateLimitExceeded)
    assert excinfo.value.status_code == 500


def test_fetch_text_returns_raw_body(fake_session, fake_response):
    url = "https://raw.example.com/a.md"
    session = fake_session({url: fake_response(200, text="---\ntitle: A\n---\n")})
    assert _client(session).fetch_text(url) == "---\ntitle: A\n---\n"


def test_repository_stats_success(fake_session, fake_response):
    payload = {
        "stargazers_count": 7,
        "pushed_at": None,
        "updated_at": "2023-01-01T00:00:00Z",
        "license": {"spdx_id": "NOASSERTION", "name": "Other"},
        "open_issues_count": 2,
        "description": "Dark theme",
    }
    session = fake_session({REPO_URL: fake_response(200, payload)})

    stats = _client(session).get_repository_stats("acme", "theme-x")

    assert stats == RepoStats(
        stars=7,
        last_commit_at="2023-01-01T00:00:00Z",
        license="NOASSERTION",
        open_issues=2,
        description="Dark theme",
    )


@pytest.mark.parametrize("status, expected", [
    (403, RepoStats.rate_limited()),
    (429, RepoStats.rate_limited()),
    (404, RepoStats.not_found()),
    (500, RepoStats.failed()),
])
def test_repository_stats_classifies_statuses(fake_session, fake_response, status, expected):
    session = fake_session({REPO_URL: fake_response(status)})
    assert _client(session).get_repository_stats("acme", "theme-x") == expected


def test_repository_stats_never_raises_on_network_errors(fake_session):
    session = fake_session({REPO_URL: requests.Timeout("slow")})
    assert _client(session).get_repository_stats("acme", "theme-x") == RepoStats.failed()


def test_repository_stats_bad_json_is_a_failure(fake_session, fake_response):
    session = fake_session({REPO_URL: fake_response(200, None)})
    assert _client(session).get_repository_stats("acme", "theme-x") == RepoStats.failed()


def test_repository_stats_non_object_body_is_a_failure(fake_session, fake_response):
    session = fake_session({REPO_URL: fake_response(200, ["not", "a", "repo"])})
    assert _client(session).get_repository_stats("acme", "theme-x") == RepoStats.failed()
