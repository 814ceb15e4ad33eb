"""Parsing of git remote references.

A remote reference is anything ``git clone`` accepts as a source: URLs with
one of the supported schemes, the scp-like SSH shorthand
(``user@host:owner/repo.git``) and local paths. :py:func:`parse` turns any of
them into a :py:class:`GitUrl`.

.. module:: giturl
    :synopsis: Parse git remote references into structured descriptors.
"""
import dataclasses
import enum
import re
from typing import Any, Dict, List, Optional, Tuple

from _gitrepo import exception


class Scheme(enum.Enum):
    """Supported remote schemes."""

    FILE = "file"
    FTP = "ftp"
    FTPS = "ftps"
    GIT = "git"
    GIT_SSH = "git-ssh"
    HTTP = "http"
    HTTPS = "https"
    SSH = "ssh"
    UNSPECIFIED = "unspecified"

    @classmethod
    def from_prefix(cls, token: str) -> "Scheme":
        """Get the scheme that a URL prefix token (the part before ``://``)
        denotes. Matching is case sensitive.

        Args:
            token: A scheme token, e.g. ``git+ssh``.
        Returns:
            The corresponding scheme.
        """
        try:
            return _PREFIX_TO_SCHEME[token]
        except KeyError:
            raise exception.ParseError(
                f"unsupported scheme: {token}", url=token
            ) from None

    @property
    def prefix(self) -> Optional[str]:
        """The URL prefix token of this scheme, or ``None`` for
        :py:attr:`Scheme.UNSPECIFIED`.
        """
        return _SCHEME_TO_PREFIX.get(self)


_SCHEME_TO_PREFIX = {
    Scheme.FILE: "file",
    Scheme.FTP: "ftp",
    Scheme.FTPS: "ftps",
    Scheme.GIT: "git",
    Scheme.GIT_SSH: "git+ssh",
    Scheme.HTTP: "http",
    Scheme.HTTPS: "https",
    Scheme.SSH: "ssh",
}
_PREFIX_TO_SCHEME = {
    prefix: scheme for scheme, prefix in _SCHEME_TO_PREFIX.items()
}

# schemes that git itself knows how to fetch from
GIT_TRANSPORT_SCHEMES = frozenset(_SCHEME_TO_PREFIX)

_PREFIXED_URL = re.compile(
    r"^(?P<prefix>[a-zA-Z][a-zA-Z0-9+.-]*)://(?P<rest>.*)$"
)
_AUTHORITY = re.compile(
    r"^(?:(?P<userinfo>[^@]*)@)?"
    r"(?P<host>\[[^\]]*\]|[^:]*)"
    r"(?::(?P<port>[^:]*))?$"
)
_SSH_SHORTHAND = re.compile(
    r"^(?:(?P<user>[^@/:]+)@)?(?P<host>[^@/:]+):(?P<path>.+)$"
)
_LOCAL_PATH_PREFIXES = ("/", "./", "../", "~")
_GIT_SUFFIX = ".git"
_MAX_PORT = 65535


@dataclasses.dataclass(frozen=True)
class GitUrl:
    """Structured form of a remote reference.

    Attributes:
        host: Host name, ``None`` for local paths.
        name: Name of the repository, without any ``.git`` suffix.
        owner: The user or group owning the repository, if any.
        organization: The organization above the owner, if any.
        fullname: Organization, owner and name joined with ``/``.
        scheme: The resolved scheme.
        user: User name embedded in the reference.
        token: Password or token embedded in the reference.
        port: Port explicitly given in the reference.
        path: The path component, verbatim.
        git_suffix: Whether the name was suffixed by ``.git``.
        scheme_prefix: Whether the reference started with ``<scheme>://``.
    """

    host: Optional[str]
    name: str
    owner: Optional[str]
    organization: Optional[str]
    fullname: str
    scheme: Scheme
    user: Optional[str]
    token: Optional[str]
    port: Optional[int]
    path: str
    git_suffix: bool
    scheme_prefix: bool

    def to_url(self, include_token: bool = True) -> str:
        """Render this descriptor as a remote reference.

        Args:
            include_token: If False, any embedded token is left out.
        Returns:
            A remote reference that git understands.
        """
        if self.scheme_prefix:
            userinfo = ""
            if self.user:
                userinfo = self.user
                if self.token and include_token:
                    userinfo += f":{self.token}"
                userinfo += "@"
            port = f":{self.port}" if self.port is not None else ""
            netloc = f"{userinfo}{self.host or ''}{port}"
            return f"{self.scheme.prefix}://{netloc}{self.path}"
        elif self.scheme == Scheme.GIT_SSH:
            user = f"{self.user}@" if self.user else ""
            return f"{user}{self.host}:{self.path}"
        return self.path

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable mapping of this descriptor."""
        asdict = dataclasses.asdict(self)
        asdict["scheme"] = self.scheme.value
        return asdict

    def __str__(self):
        return self.to_url(include_token=False)


def parse(raw: str) -> GitUrl:
    """Parse a remote reference.

    Args:
        raw: A URL, SSH shorthand or local path to a repository.
    Returns:
        The parsed descriptor.
    Raises:
        :py:class:`exception.ParseError` if no repository name can be
        extracted from the reference.
    """
    if not raw or not raw.strip():
        raise exception.ParseError("empty remote reference", url=raw)
    if any(c.isspace() for c in raw):
        raise exception.ParseError(
            f"remote reference contains whitespace: '{raw}'", url=raw
        )

    prefixed = _PREFIXED_URL.match(raw)
    shorthand = _SSH_SHORTHAND.match(raw)
    user = token = host = None
    port = None
    if prefixed:
        try:
            scheme = Scheme.from_prefix(prefixed.group("prefix"))
        except exception.ParseError as exc:
            raise exception.ParseError(f"{exc} in '{raw}'", url=raw) from exc
        user, token, host, port, path = _split_authority(
            prefixed.group("rest"), raw
        )
        scheme_prefix = True
    elif shorthand and _is_ssh_host(shorthand):
        scheme = Scheme.GIT_SSH
        user = shorthand.group("user")
        host = shorthand.group("host")
        path = shorthand.group("path")
        scheme_prefix = False
    elif raw.startswith(_LOCAL_PATH_PREFIXES):
        scheme = Scheme.FILE
        path = raw
        scheme_prefix = False
    elif "/" in raw:
        scheme = Scheme.UNSPECIFIED
        path = raw
        scheme_prefix = False
    else:
        raise exception.ParseError(
            f"remote reference has no path: '{raw}'", url=raw
        )

    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        raise exception.ParseError(
            f"remote reference has no repository name: '{raw}'", url=raw
        )

    name = segments[-1]
    git_suffix = name.endswith(_GIT_SUFFIX)
    if git_suffix:
        name = name[: -len(_GIT_SUFFIX)]
    if not name:
        raise exception.ParseError(
            f"remote reference has no repository name: '{raw}'", url=raw
        )
    if name in (".", ".."):
        raise exception.ParseError(
            f"repository name can't be '{name}': '{raw}'", url=raw
        )

    if scheme == Scheme.FILE:
        organization, owner = None, None
    else:
        organization, owner = _organization_and_owner(segments[:-1], host)

    return GitUrl(
        host=host,
        name=name,
        owner=owner,
        organization=organization,
        fullname="/".join(
            part for part in (organization, owner, name) if part
        ),
        scheme=scheme,
        user=user,
        token=token,
        port=port,
        path=path,
        git_suffix=git_suffix,
        scheme_prefix=scheme_prefix,
    )


def extract_repo_name(repo_url: str) -> str:
    """Extract the name of the repo from its url.

    Args:
        repo_url: A url to a repo.
    Returns:
        The name of the repo, without any ``.git`` suffix.
    """
    return parse(repo_url).name


def _split_authority(
    rest: str, raw: str
) -> Tuple[
    Optional[str], Optional[str], Optional[str], Optional[int], str
]:
    """Split everything after ``<scheme>://`` into user, token, host, port
    and path.
    """
    slash = rest.find("/")
    if slash == -1:
        authority, path = rest, ""
    else:
        authority, path = rest[:slash], rest[slash:]

    match = _AUTHORITY.match(authority)
    if not match:
        raise exception.ParseError(
            f"malformed authority '{authority}' in '{raw}'", url=raw
        )

    user = token = None
    userinfo = match.group("userinfo")
    if userinfo:
        user, _, token = userinfo.partition(":")
        user = user or None
        token = token or None

    port = None
    port_str = match.group("port")
    if port_str:
        if not port_str.isdigit() or int(port_str) > _MAX_PORT:
            raise exception.ParseError(
                f"invalid port '{port_str}' in '{raw}'", url=raw
            )
        port = int(port_str)

    return user, token, match.group("host") or None, port, path


def _is_ssh_host(shorthand: "re.Match") -> bool:
    # a single letter before the colon is a drive letter, e.g. C:/repo
    return bool(shorthand.group("user")) or len(shorthand.group("host")) > 1


def _organization_and_owner(
    parents: List[str], host: Optional[str]
) -> Tuple[Optional[str], Optional[str]]:
    """Pick organization and owner out of the path segments preceding the
    repository name.
    """
    if len(parents) >= 3 and parents[-1] == "_git":
        # https://dev.azure.com/org/project/_git/repo
        return parents[-3], parents[-2]
    if (
        host
        and host.endswith("dev.azure.com")
        and len(parents) >= 3
        and parents[0] == "v3"
    ):
        # git@ssh.dev.azure.com:v3/org/project/repo
        return parents[1], parents[2]

    owner = parents[-1] if parents else None
    organization = parents[-2] if len(parents) >= 2 else None
    return organization, owner
