"""Resolution of the remote data location from a git repository.

The remote side of a sync lives next to the repository's ``origin``. The
origin must be reachable as a filesystem path (a local path, a path on a
shared mount, or a ``file://`` URL). For an origin of
``/mnt/share/project.git`` and the folder name ``data`` the remote data
folder is ``/mnt/share/project/data``.
"""

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union
from urllib.parse import unquote, urlparse

from .exceptions import RemoteResolutionError

logger = logging.getLogger(__name__)

# user@host:path, the scp-like syntax git accepts for ssh remotes
_SCP_LIKE_RE = re.compile(r"^(?:[^@/:]+@)?[^/:]+:(?!/)")
# scheme://..., but not a Windows drive letter
_URL_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]+://")


@dataclass(frozen=True)
class ResolvedPaths:
    """Local and remote data folders for one repository."""

    repository: Path
    """Root of the git working copy"""

    local_data: Path
    """Data folder inside the working copy"""

    remote_data: Path
    """Data folder at the remote location"""

    origin_url: str
    """Origin URL as configured in git"""


class RemoteResolver:
    """Derives the remote data folder from a repository's origin URL."""

    def __init__(
        self,
        git_executable: str = "git",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """Initialize resolver.

        Args:
            git_executable: git command to run
            runner: subprocess.run compatible callable (replaced in tests)
        """
        self.git_executable = git_executable
        self.runner = runner

    def _git(self, repository: Path, *args: str) -> subprocess.CompletedProcess:
        command = [self.git_executable, "-C", str(repository), *args]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            return self.runner(
                command,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise RemoteResolutionError(
                f"git executable not found: {self.git_executable}"
            ) from e

    def find_repository_root(self, path: Union[str, Path]) -> Path:
        """Find the top-level directory of the working copy containing path.

        Args:
            path: Any directory inside the working copy

        Returns:
            Absolute repository root

        Raises:
            RemoteResolutionError: If path is not inside a git repository
        """
        path = Path(path).resolve()
        if not path.is_dir():
            raise RemoteResolutionError(f"Repository path is not a directory: {path}")
        result = self._git(path, "rev-parse", "--show-toplevel")
        if result.returncode != 0:
            raise RemoteResolutionError(
                f"Not a git repository: {path} ({result.stderr.strip()})"
            )
        return Path(result.stdout.strip())

    def get_origin_url(self, repository: Union[str, Path]) -> str:
        """Read the origin URL of a repository.

        Args:
            repository: Repository root

        Returns:
            Configured origin URL

        Raises:
            RemoteResolutionError: If no origin remote is configured
        """
        result = self._git(Path(repository), "config", "--get", "remote.origin.url")
        url = result.stdout.strip() if result.returncode == 0 else ""
        if not url:
            raise RemoteResolutionError(
                f"No 'origin' remote configured for repository {repository}"
            )
        return url

    @staticmethod
    def origin_to_path(url: str, repository: Union[str, Path]) -> Path:
        """Convert an origin URL to a filesystem path.

        Args:
            url: Origin URL (path, relative path or file:// URL)
            repository: Repository root that relative paths are resolved against

        Returns:
            Absolute path of the origin repository

        Raises:
            RemoteResolutionError: If the origin is a network URL

        Examples:
            >>> RemoteResolver.origin_to_path("file:///srv/git/proj.git", "/repo")
            PosixPath('/srv/git/proj.git')
            >>> RemoteResolver.origin_to_path("../proj.git", "/work/repo")
            PosixPath('/work/proj.git')
        """
        if _URL_SCHEME_RE.match(url):
            parsed = urlparse(url)
            if parsed.scheme != "file":
                raise RemoteResolutionError(
                    f"Origin {url} is not a filesystem path "
                    f"(unsupported scheme '{parsed.scheme}')"
                )
            path = Path(unquote(parsed.path))
        elif _SCP_LIKE_RE.match(url) and not Path(url).is_absolute():
            raise RemoteResolutionError(
                f"Origin {url} is an ssh remote, not a filesystem path"
            )
        else:
            path = Path(url).expanduser()

        if not path.is_absolute():
            path = Path(repository) / path
        # Collapse ".." lexically without touching the filesystem
        return Path(os.path.normpath(path))

    def resolve(
        self, repository: Union[str, Path], folder_name: str
    ) -> ResolvedPaths:
        """Resolve local and remote data folders.

        Args:
            repository: Any directory inside the working copy
            folder_name: Name of the data folder

        Returns:
            ResolvedPaths for the repository

        Raises:
            RemoteResolutionError: If there is no usable origin or it is
                unreachable
        """
        root = self.find_repository_root(repository)
        url = self.get_origin_url(root)
        origin = self.origin_to_path(url, root)
        if not origin.exists():
            raise RemoteResolutionError(f"Origin {origin} is not reachable")

        base = origin
        if base.name.endswith(".git") and len(base.name) > len(".git"):
            base = base.with_name(base.name[: -len(".git")])

        paths = ResolvedPaths(
            repository=root,
            local_data=root / folder_name,
            remote_data=base / folder_name,
            origin_url=url,
        )
        logger.debug(
            f"Resolved {paths.local_data} <-> {paths.remote_data} (origin {url})"
        )
        return paths

