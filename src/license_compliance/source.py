"""
Public source locations for components.

A ``RemoteSource`` turns a path inside a component into a browsable URL on its
hosting service, pinned to the component's version. Repository URLs come from
the component's own metadata or, failing that, from the PyPI JSON API.
"""

import logging
import re
from typing import Optional
from urllib.parse import quote, urlparse

import requests

from .errors import ResolutionTimeoutError, SourceLookupError

logger = logging.getLogger(__name__)

PYPI_JSON_URL = "https://pypi.org/pypi/{name}/json"
DEFAULT_TIMEOUT = 20.0
DEFAULT_REF = "HEAD"
DEFAULT_TAG_FORMAT = "v{version}"

# project_urls labels worth trying, most specific first
_PROJECT_URL_LABELS = ("source", "source code", "repository", "code", "github", "gitlab", "homepage", "home")

_BLOB_TEMPLATES = {
    "github.com": "https://github.com/{owner}/{repo}/blob/{ref}/{path}",
    "gitlab.com": "https://gitlab.com/{owner}/{repo}/-/blob/{ref}/{path}",
    "bitbucket.org": "https://bitbucket.org/{owner}/{repo}/src/{ref}/{path}",
}

_SCP_LIKE = re.compile(r"^[\w.-]+@(?P<host>[\w.-]+):(?P<path>.+)$")


class RemoteSource:
    """A repository on a hosting service, at a fixed ref."""

    def __init__(self, repository: str, ref: str = DEFAULT_REF):
        self.repository = repository
        self.ref = ref
        self.host, self.owner, self.repo = _split_repository(repository)

    def file_url(self, path: str) -> str:
        """URL of ``path`` at this ref, or "" when the host is not supported."""
        template = _BLOB_TEMPLATES.get(self.host)
        if template is None or not self.owner or not self.repo:
            return ""
        return template.format(
            owner=self.owner,
            repo=self.repo,
            ref=quote(self.ref, safe=""),
            path=quote(path.lstrip("/")),
        )

    def __repr__(self):
        return f"RemoteSource({self.repository!r}, ref={self.ref!r})"


def _split_repository(repository: str):
    url = repository.strip()
    match = _SCP_LIKE.match(url)
    if match:
        host, path = match.group("host"), match.group("path")
    else:
        if url.startswith("git+"):
            url = url[len("git+"):]
        parsed = urlparse(url)
        host, path = parsed.hostname or "", parsed.path
    host = host.lower()
    if host.startswith("www."):
        host = host[len("www."):]
    parts = [p for p in path.split("/") if p]
    if len(parts) < 2:
        return host, "", ""
    repo = parts[1]
    if repo.endswith(".git"):
        repo = repo[:-len(".git")]
    return host, parts[0], repo


_RAW_REWRITES = (
    (re.compile(r"^https://github\.com/([^/]+)/([^/]+)/blob/(.+)$"), r"https://raw.githubusercontent.com/\1/\2/\3"),
    (re.compile(r"^https://gitlab\.com/([^/]+)/([^/]+)/-/blob/(.+)$"), r"https://gitlab.com/\1/\2/-/raw/\3"),
    (re.compile(r"^https://bitbucket\.org/([^/]+)/([^/]+)/src/(.+)$"), r"https://bitbucket.org/\1/\2/raw/\3"),
)


def raw_url(url: str) -> str:
    """Rewrite a browsable file URL into one that serves the raw file content."""
    for pattern, replacement in _RAW_REWRITES:
        if pattern.match(url):
            return pattern.sub(replacement, url)
    return url


def is_supported_repository(url: str) -> bool:
    host, owner, repo = _split_repository(url)
    return host in _BLOB_TEMPLATES and bool(owner and repo)


class SourceLocator:
    """Resolves where a component's files can be viewed publicly."""

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 default_ref: str = DEFAULT_REF,
                 tag_format: str = DEFAULT_TAG_FORMAT,
                 offline: bool = False):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.default_ref = default_ref
        self.tag_format = tag_format
        self.offline = offline

    def ref_for(self, name: str, version: str) -> str:
        if not version:
            logger.warning(
                "%s has an empty version, defaulting to %s. The license URL may be incorrect, please verify!",
                name, self.default_ref,
            )
            return self.default_ref
        return self.tag_format.format(version=version)

    def locate(self, name: str, version: str, repository: str = "") -> RemoteSource:
        """Find the public repository of a component.

        Raises:
            SourceLookupError: no usable repository URL could be found.
            ResolutionTimeoutError: the remote lookup timed out.
        """
        ref = self.ref_for(name, version)
        if not repository:
            if self.offline:
                raise SourceLookupError("no repository URL and remote lookups are disabled", component=name)
            repository = self._lookup_pypi(name)
        if not repository:
            raise SourceLookupError("no repository URL found", component=name)
        return RemoteSource(repository, ref)

    def _lookup_pypi(self, name: str) -> str:
        url = PYPI_JSON_URL.format(name=quote(name, safe=""))
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise ResolutionTimeoutError(f"timed out after {self.timeout}s querying {url}", component=name) from e
        except requests.exceptions.RequestException as e:
            raise SourceLookupError(f"querying {url}: {e}", component=name) from e
        except ValueError as e:
            raise SourceLookupError(f"invalid JSON from {url}: {e}", component=name) from e

        info = data.get("info") or {}
        project_urls = {
            str(label).strip().lower(): value
            for label, value in (info.get("project_urls") or {}).items()
            if value
        }
        if info.get("home_page"):
            project_urls.setdefault("homepage", info["home_page"])

        for label in _PROJECT_URL_LABELS:
            candidate = project_urls.get(label)
            if candidate and is_supported_repository(candidate):
                return candidate
        for candidate in project_urls.values():
            if is_supported_repository(candidate):
                return candidate
        return ""
