"""URL query filter — selects a single comparison by URL from a location's query string.

Filter state is never cached: each call reads ``location.search`` afresh, so
the filter follows the location as it changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, unquote

FILTER_PARAM = "filter"
# Left unescaped alongside quote()'s defaults, as in JavaScript's encodeURIComponent
_UNRESERVED_MARKS = "!'()*"


@dataclass
class Location:
    """Minimal stand-in for a browser location."""
    search: str = ""


def _split_params(search: str) -> list[str]:
    query = search[1:] if search.startswith("?") else search
    return [part for part in query.split("&") if part]


def _param_name(part: str) -> str:
    return part.split("=", 1)[0]


def _param_value(part: str) -> str:
    _, _, value = part.partition("=")
    return value


class UrlQueryFilter:
    """Reads and builds ``filter=<url>`` query strings for a report UI."""

    def __init__(self, location):
        self.location = location

    def _other_params(self) -> list[str]:
        return [p for p in _split_params(self.location.search) if _param_name(p) != FILTER_PARAM]

    def _filter_value(self) -> str | None:
        values = [_param_value(p) for p in _split_params(self.location.search)
                  if _param_name(p) == FILTER_PARAM]
        if not values:
            return None
        # Last occurrence wins
        return unquote(values[-1])

    def filter_url_for(self, url: str) -> str:
        """Query string selecting only ``url``, keeping all other parameters."""
        params = self._other_params()
        params.append(f"{FILTER_PARAM}={quote(url, safe=_UNRESERVED_MARKS)}")
        return "?" + "&".join(params)

    def clear_filter_url(self) -> str:
        """Query string with every filter parameter removed."""
        return "?" + "&".join(self._other_params())

    def is_comparison_selected(self, comparison) -> bool:
        value = self._filter_value()
        if not value:
            return True
        return value == comparison.test_case.url
