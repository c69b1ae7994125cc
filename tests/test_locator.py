"""Tests for repository URL parsing."""

import pytest

from repomirror.domain.locator import RepositoryLocator, parse_locator
from repomirror.errors import InvalidLocator
from repomirror import exit_codes


class TestParseLocator:
    """Tests for parse_locator()."""

    @pytest.mark.parametrize("url", [
        "https://github.com/octo/hello",
        "https://github.com/octo/hello.git",
        "https://github.com/octo/hello/",
        "https://github.com/octo/hello/tree/main/src",
        "http://github.com/octo/hello",
        "github.com/octo/hello",
        "https://GitHub.com/octo/hello",
        "https://user@github.com/octo/hello",
        "https://github.com:443/octo/hello",
        "https://github.com/octo/hello?tab=readme#top",
        "git@github.com:octo/hello.git",
        "  https://github.com/octo/hello  ",
    ])
    def test_accepts_common_forms(self, url):
        """Test that every usual way of writing a repo URL parses to owner/name."""
        locator = parse_locator(url)
        assert locator.owner == "octo"
        assert locator.name == "hello"
        assert locator.host == "github.com"

    def test_keeps_dots_and_dashes(self):
        """Test names with dots, dashes and underscores."""
        locator = parse_locator("https://github.com/my-org/repo.name_v2.git")
        assert locator.owner == "my-org"
        assert locator.name == "repo.name_v2"

    @pytest.mark.parametrize("url", [
        "",
        "   ",
        "https://github.com",
        "https://github.com/",
        "https://github.com/octo",
        "https://gitlab.com/octo/hello",
        "https://example.com/github.com/octo/hello",
        "not a url",
        "https://github.com/octo/he llo",
        "https://github.com/../hello",
        "https://github.com/octo/.git",
    ])
    def test_rejects_malformed(self, url):
        """Test that malformed URLs raise InvalidLocator."""
        with pytest.raises(InvalidLocator):
            parse_locator(url)

    def test_invalid_locator_is_usage_error(self):
        """Test exit code of InvalidLocator."""
        with pytest.raises(InvalidLocator) as exc_info:
            parse_locator("https://github.com/octo")
        assert exc_info.value.exit_code == exit_codes.USAGE_ERROR

    def test_custom_host(self):
        """Test parsing against a GitHub Enterprise host."""
        locator = parse_locator("https://git.example.com/team/app", host="git.example.com")
        assert locator.full_name == "team/app"
        assert locator.host == "git.example.com"

        with pytest.raises(InvalidLocator):
            parse_locator("https://github.com/team/app", host="git.example.com")


class TestRepositoryLocator:
    """Tests for RepositoryLocator."""

    def test_properties(self):
        """Test derived names and paths."""
        locator = RepositoryLocator(owner="octo", name="hello")
        assert locator.full_name == "octo/hello"
        assert locator.url == "https://github.com/octo/hello"
        assert locator.api_path == "/repos/octo/hello"
        assert str(locator) == "octo/hello"

    def test_equality_and_hash(self):
        """Test locators are value objects."""
        a = parse_locator("https://github.com/octo/hello")
        b = parse_locator("git@github.com:octo/hello.git")
        assert a == b
        assert len({a, b}) == 1
