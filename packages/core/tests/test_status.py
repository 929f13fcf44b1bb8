"""Tests for commit statuses, merging, links and unsupported capabilities."""

import json

import pytest

from fake_bitbucket import API, CALLBACK_URL, PULL, PULL_URL, REPO
from prgate_core.bitbucket.client import BitbucketClient, to_bitbucket_state, truncate_status_key
from prgate_core.hosts.base import Capability, Unsupported
from prgate_core.models import CommitStatus, PullRequestOptions

STATUS_URL = f"{API}/2.0/repositories/acme/infra/commit/{PULL.head_commit}/statuses/build"


@pytest.fixture
def status_route(bitbucket):
    bitbucket.add("POST", STATUS_URL, status=201, json={"state": "SUCCESSFUL"})


def _sent(bitbucket) -> dict:
    [request] = bitbucket.calls("POST", STATUS_URL)
    return json.loads(request.content)


class TestTruncateStatusKey:
    def test_long_key_truncated_to_forty(self):
        key = "atlantis/plan: " + "x" * 30
        assert len(key) == 45
        result = truncate_status_key(key)
        assert result == key[:37] + "..."
        assert len(result) == 40

    @pytest.mark.parametrize("length", [0, 1, 39, 40])
    def test_short_key_unchanged(self, length):
        key = "k" * length
        assert truncate_status_key(key) == key

    def test_counts_characters_not_bytes(self):
        key = "é" * 40
        assert truncate_status_key(key) == key


class TestStateMapping:
    @pytest.mark.parametrize(
        "status, state",
        [
            (CommitStatus.PENDING, "INPROGRESS"),
            (CommitStatus.SUCCESS, "SUCCESSFUL"),
            (CommitStatus.FAILED, "FAILED"),
        ],
    )
    def test_known_statuses(self, status, state):
        assert to_bitbucket_state(status) == state

    def test_unknown_status_fails_closed(self):
        assert to_bitbucket_state(None) == "FAILED"


class TestUpdateStatus:
    def test_posts_status_body(self, bitbucket, client, status_route):
        client.update_status(REPO, PULL, CommitStatus.SUCCESS, "atlantis/plan", "Plan succeeded", "https://ci/1")
        assert _sent(bitbucket) == {
            "key": "atlantis/plan",
            "url": "https://ci/1",
            "state": "SUCCESSFUL",
            "description": "Plan succeeded",
        }

    def test_defaults_url_to_callback(self, bitbucket, client, status_route):
        client.update_status(REPO, PULL, CommitStatus.PENDING, "atlantis/plan", "Planning...")
        assert _sent(bitbucket)["url"] == CALLBACK_URL
        assert _sent(bitbucket)["state"] == "INPROGRESS"

    def test_truncates_key_in_request(self, bitbucket, client, status_route):
        client.update_status(REPO, PULL, CommitStatus.FAILED, "atlantis/plan: " + "very/long/project/path" * 2, "")
        assert len(_sent(bitbucket)["key"]) == 40
        assert _sent(bitbucket)["key"].endswith("...")

    def test_logs_state_change(self, client, status_route, caplog):
        with caplog.at_level("INFO", logger="prgate_core.bitbucket.client"):
            client.update_status(REPO, PULL, CommitStatus.SUCCESS, "atlantis/apply", "")
        assert "'atlantis/apply' to 'SUCCESSFUL'" in caplog.text


class TestMergeAndLink:
    def test_merge_posts_without_body(self, bitbucket, client):
        bitbucket.add("POST", f"{PULL_URL}/merge", json={"state": "MERGED"})
        client.merge_pull(PULL, PullRequestOptions())
        [request] = bitbucket.calls("POST")
        assert request.content == b""
        assert "Content-Type" not in request.headers

    def test_merge_can_close_source_branch(self, bitbucket, client):
        bitbucket.add("POST", f"{PULL_URL}/merge", json={"state": "MERGED"})
        client.merge_pull(PULL, PullRequestOptions(delete_source_branch_on_merge=True))
        [request] = bitbucket.calls("POST")
        assert json.loads(request.content) == {"close_source_branch": True}

    def test_markdown_link(self, client):
        assert client.markdown_pull_link(PULL) == "#7"


class TestCapabilities:
    @pytest.mark.parametrize(
        "call, capability",
        [
            (lambda c: c.get_team_names_for_user(REPO, "{user}"), Capability.TEAM_MEMBERSHIP),
            (lambda c: c.get_file_content(PULL, "atlantis.yaml"), Capability.SINGLE_FILE_DOWNLOAD),
            (lambda c: c.get_clone_url("acme/infra"), Capability.CLONE_URL),
            (lambda c: c.get_pull_labels(REPO, PULL), Capability.PULL_LABELS),
            (lambda c: c.discard_reviews(REPO, PULL), Capability.DISCARD_REVIEWS),
            (lambda c: c.edit_comment(REPO, 7, 1, "x"), Capability.EDIT_COMMENT),
        ],
    )
    def test_stub_returns_unsupported_without_request(self, bitbucket, client, call, capability):
        result = call(client)
        assert isinstance(result, Unsupported)
        assert result.capability is capability
        assert result.host == BitbucketClient.HOST
        assert not client.supports(capability)
        assert bitbucket.requests == []

    def test_unsupported_describes_itself(self, client):
        assert str(client.get_pull_labels(REPO, PULL)) == "pull_labels is not supported by bitbucket cloud"

    def test_react_to_comment_is_benign_noop(self, bitbucket, client):
        assert client.react_to_comment(REPO, 7, 1, "eyes") is None
        assert bitbucket.requests == []

    def test_no_single_file_download(self, client):
        assert client.supports_single_file_download(REPO) is False
