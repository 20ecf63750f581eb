from .client import GitHubClient
from .git import GitRepo

__all__ = ["GitHubClient", "GitRepo"]
