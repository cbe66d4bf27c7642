"""Tests for the quay-tags CLI."""

import json
import os
from unittest.mock import patch

import pytest
import requests
import responses
from click.testing import CliRunner

from quay_tags.cli import main
from quay_tags.registry.cache import shared_cache

TAGS_URL = "https://quay.io/api/v1/repository/myorg/myrepo/tag/"
REPO_URL = "https://quay.io/api/v1/repository/myorg/myrepo"

TAG_BODY = {
    "tags": [
        {"name": "v1", "start_ts": 1000},
        {"name": "v2", "start_ts": 2000},
    ]
}


@pytest.fixture(autouse=True)
def clean_env():
    shared_cache.clear()
    with patch.dict(os.environ, {}, clear=True):
        yield
    shared_cache.clear()


@pytest.fixture
def runner():
    return CliRunner()


class TestTagsCommand:
    """Test the ``tags`` command."""

    @responses.activate
    def test_lists_names(self, runner):
        responses.add(responses.GET, TAGS_URL, json=TAG_BODY, status=200)

        result = runner.invoke(main, ["tags", "myorg", "myrepo"])

        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["v2", "v1"]

    @responses.activate
    def test_json_output(self, runner):
        responses.add(responses.GET, TAGS_URL, json=TAG_BODY, status=200)

        result = runner.invoke(main, ["tags", "myorg", "myrepo", "--json", "--no-pretty"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [t["name"] for t in data] == ["v2", "v1"]
        assert data[0]["start_ts"] == 2000

    @responses.activate
    def test_limit_and_token(self, runner):
        responses.add(responses.GET, TAGS_URL, json=TAG_BODY, status=200)

        result = runner.invoke(main, ["tags", "myorg", "myrepo", "-n", "3", "--token", "robot-secret"])

        assert result.exit_code == 0
        request = responses.calls[0].request
        assert "limit=3" in request.url
        assert request.headers["Authorization"] == "Bearer robot-secret"

    @responses.activate
    def test_token_from_env(self, runner):
        responses.add(responses.GET, TAGS_URL, json=TAG_BODY, status=200)

        with patch.dict(os.environ, {"QUAY_TAGS_TOKEN": "env-secret"}):
            result = runner.invoke(main, ["tags", "myorg", "myrepo"])

        assert result.exit_code == 0
        assert responses.calls[0].request.headers["Authorization"] == "Bearer env-secret"

    @responses.activate
    def test_api_url_from_env(self, runner):
        responses.add(
            responses.GET,
            "https://quay.example.com/api/v1/repository/myorg/myrepo/tag/",
            json=TAG_BODY,
            status=200,
        )

        with patch.dict(os.environ, {"QUAY_TAGS_API_URL": "https://quay.example.com/api/v1"}):
            result = runner.invoke(main, ["tags", "myorg", "myrepo"])

        assert result.exit_code == 0

    def test_invalid_limit(self, runner):
        result = runner.invoke(main, ["tags", "myorg", "myrepo", "--limit", "0"])
        assert result.exit_code == 2

    def test_invalid_organization(self, runner):
        result = runner.invoke(main, ["tags", "my;org", "myrepo"])
        assert result.exit_code == 1
        assert "organization contains invalid characters" in result.output

    @responses.activate
    def test_not_found(self, runner):
        responses.add(responses.GET, TAGS_URL, status=404)

        result = runner.invoke(main, ["tags", "myorg", "myrepo"])

        assert result.exit_code == 1
        assert "Repository myorg/myrepo not found" in result.output


class TestImageCommand:
    """Test the ``image`` command."""

    @responses.activate
    def test_most_recent_tag(self, runner):
        responses.add(responses.GET, TAGS_URL, json=TAG_BODY, status=200)

        result = runner.invoke(main, ["image", "myorg", "myrepo"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "quay.io/myorg/myrepo:v2"

    @responses.activate
    def test_explicit_tag(self, runner):
        result = runner.invoke(main, ["image", "myorg", "myrepo", "--tag", "v1.0.0"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "quay.io/myorg/myrepo:v1.0.0"
        assert len(responses.calls) == 0

    @responses.activate
    def test_empty_repository(self, runner):
        responses.add(responses.GET, TAGS_URL, json={"tags": []}, status=200)

        result = runner.invoke(main, ["image", "myorg", "myrepo"])

        assert result.exit_code == 1
        assert "No tags found in repository myorg/myrepo" in result.output


class TestCheckCommand:
    """Test the ``check`` command."""

    @responses.activate
    def test_success(self, runner):
        responses.add(responses.GET, REPO_URL, json={}, status=200)
        responses.add(responses.GET, TAGS_URL, json=TAG_BODY, status=200)

        result = runner.invoke(main, ["check", "myorg", "myrepo"])

        assert result.exit_code == 0
        assert "Success! Found 2 tags." in result.stdout

    @responses.activate
    def test_rate_limited(self, runner):
        responses.add(responses.GET, REPO_URL, status=429)
        responses.add(responses.GET, TAGS_URL, status=429)

        result = runner.invoke(main, ["check", "myorg", "myrepo"])

        assert result.exit_code == 1
        assert "Connection failed: Rate limit exceeded" in result.output

    @responses.activate
    def test_network_failure(self, runner):
        responses.add(
            responses.GET,
            REPO_URL,
            body=requests.exceptions.ConnectionError("Connection refused"),
        )
        responses.add(
            responses.GET,
            TAGS_URL,
            body=requests.exceptions.ConnectionError("Connection refused"),
        )

        result = runner.invoke(main, ["check", "myorg", "myrepo"])

        assert result.exit_code == 1
        assert "Connection failed: Network error" in result.output
