from typing import Optional
from urllib.parse import quote, urlparse

from pydantic import BaseModel


class JoinTarget(BaseModel):
    room_name: str
    url: str

    @property
    def path(self) -> str:
        return meeting_path(self.room_name, self.url)


class UnresolvableRoom(ValueError):
    pass


def meeting_path(room_name: str, url: str) -> str:
    return f"/meeting/{quote(room_name, safe='')}?url={quote(url, safe='')}"


def _daily_base(domain: str) -> str:
    value = domain.strip()
    if not value.startswith(("http://", "https://")):
        value = f"https://{value}"
    parsed = urlparse(value)
    host = parsed.netloc or parsed.path
    return f"{parsed.scheme or 'https'}://{host}".rstrip("/")


def resolve_join_link(link: str, daily_domain: Optional[str]) -> JoinTarget:
    """Turn a pasted meeting link or bare room name into a join target.

    A full Daily.co link keeps its URL and uses its last path segment as the
    room name. A bare name only resolves against a configured tenant domain;
    there is no safe default subdomain to guess.
    """
    value = link.strip()
    if not value:
        raise UnresolvableRoom("Meeting link is required")

    if "/" in value:
        parsed = urlparse(value if "://" in value else f"https://{value}")
        host = (parsed.hostname or "").lower()
        if parsed.scheme not in ("http", "https") or not (host == "daily.co" or host.endswith(".daily.co")):
            raise UnresolvableRoom(f"Not a Daily.co meeting link: {value}")
        room_name = parsed.path.rstrip("/").split("/")[-1]
        if not room_name:
            raise UnresolvableRoom("Meeting link has no room name")
        return JoinTarget(room_name=room_name, url=value)

    if not daily_domain:
        raise UnresolvableRoom(
            "DAILY_DOMAIN is not set; paste the full meeting link instead of a room name"
        )
    return JoinTarget(room_name=value, url=f"{_daily_base(daily_domain)}/{value}")
