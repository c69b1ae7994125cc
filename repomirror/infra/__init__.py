"""
Infrastructure layer for repomirror.

Contains abstractions for external systems:
- GitHubClient: GitHub git-object REST API access

These provide clean interfaces that can be mocked for testing.
"""

from .github_client import GitHubClient, RateLimitStatus, DEFAULT_API_URL

__all__ = [
    'GitHubClient',
    'RateLimitStatus',
    'DEFAULT_API_URL',
]
