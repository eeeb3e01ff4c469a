import pytest
import responses

from aletheia import updater
from aletheia.updater import Release, UpdateError, check


def _release(tag):
    return {"body": "Notes", "tag_name": tag, "html_url": "https://releases.example.com/" + tag}


def test_newer_release_is_returned():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, updater.RELEASES_URL, json=[_release("99.0.0"), _release("1.0.0")])
        release = check()
    assert release == Release(body="Notes", tag_name="99.0.0",
                              url="https://releases.example.com/99.0.0")


def test_current_release_is_up_to_date():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, updater.RELEASES_URL, json=[_release(updater.CURRENT_VERSION)])
        assert check() is None


def test_older_release_is_up_to_date():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, updater.RELEASES_URL, json=[_release("0.0.1")])
        assert check() is None


def test_no_releases_is_up_to_date():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, updater.RELEASES_URL, json=[])
        assert check() is None


def test_user_agent_is_sent():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, updater.RELEASES_URL, json=[])
        result = check()
        assert result is None
        assert len(rsps.calls) == 1
        assert rsps.calls[0].request.headers["User-Agent"] == f"aletheia/{updater.CURRENT_VERSION}"


def test_http_error_raises():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, updater.RELEASES_URL, status=500)
        with pytest.raises(UpdateError):
            check()


def test_malformed_payload_raises():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, updater.RELEASES_URL, json={"message": "nope"})
        with pytest.raises(UpdateError):
            check()


def test_invalid_version_tag_raises():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, updater.RELEASES_URL, json=[_release("not-a-version")])
        with pytest.raises(ValueError):
            check()