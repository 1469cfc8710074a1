"""
Release data model.

Mirrors the subset of the GitLab releases API payload the installer uses:

    {
        "tag_name": "v1.2.0",
        "released_at": "2024-05-01T10:00:00.000Z",
        "assets": {"links": [{"name": "...", "url": "..."}]}
    }
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from relinstall.core.exceptions import ReleaseFetchError


@dataclass(frozen=True)
class AssetLink:
    """A named, downloadable file attached to a release."""

    name: str
    url: str


@dataclass(frozen=True)
class Release:
    """One published release of the project."""

    tag_name: str
    released_at: datetime
    assets: Tuple[AssetLink, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Release":
        """
        Build a Release from one entry of the releases API response.

        Raises:
            ReleaseFetchError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ReleaseFetchError(f"Unexpected release entry: {data!r}")

        try:
            tag_name = str(data["tag_name"])
            released_at = parse_timestamp(data["released_at"])
        except KeyError as e:
            raise ReleaseFetchError(f"Release entry is missing field {e}") from None

        assets_data = data.get("assets") or {}
        if not isinstance(assets_data, dict):
            raise ReleaseFetchError(
                f"Release {tag_name} has malformed assets: expected a mapping"
            )
        links = assets_data.get("links") or []
        if not isinstance(links, list):
            raise ReleaseFetchError(
                f"Release {tag_name} has malformed asset links: expected a list"
            )

        assets = tuple(
            AssetLink(name=str(link["name"]), url=str(link["url"]))
            for link in links
            if isinstance(link, dict) and "name" in link and "url" in link
        )
        return cls(tag_name=tag_name, released_at=released_at, assets=assets)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ISO 8601 timestamp as returned by the API.

    Naive values are treated as UTC so that all timestamps compare.

    Raises:
        ReleaseFetchError: If the value is not a valid timestamp
    """
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ReleaseFetchError(f"Invalid released_at timestamp: {value!r}") from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
