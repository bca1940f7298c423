from __future__ import annotations

import re

_LINK_RE = re.compile(r"\b(?:https?://|www\.)[^\s<>\"']+", re.IGNORECASE)
_TRAILING = ".,;:!?)"


def _trim_trailing(link: str) -> str:
    while link and link[-1] in _TRAILING:
        # A closing paren that pairs with one inside the URL belongs to it.
        if link[-1] == ")" and link.count("(") >= link.count(")"):
            break
        link = link[:-1]
    return link


def extract_links(text: str) -> list[str]:
    """Return URLs found in `text`, in order, duplicates kept.

    Bare ``www.`` matches are normalized to ``https://www.``.
    """

    links: list[str] = []
    for match in _LINK_RE.finditer(text or ""):
        link = _trim_trailing(match.group(0))
        if link.lower().startswith("www."):
            link = "https://" + link
        links.append(link)
    return links
