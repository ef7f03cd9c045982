"""
Atom feed parsing for modulehub.

Parses forge tag feeds such as https://github.com/ORG/REPO/tags.atom:

    <feed xmlns="http://www.w3.org/2005/Atom">
      <id>tag:github.com,2008:https://github.com/ORG/REPO/releases</id>
      <link type="text/html" rel="alternate" href="https://github.com/ORG/REPO/releases"/>
      <title>Tags from REPO</title>
      <updated>2023-01-03T20:28:34Z</updated>
      <entry>
        <id>tag:github.com,2008:Repository/584868941/0.0.2</id>
        <updated>2023-01-03T20:28:34Z</updated>
        <link rel="alternate" type="text/html" href="https://github.com/ORG/REPO/releases/tag/0.0.2"/>
        <title>0.0.2</title>
      </entry>
    </feed>

Repeated elements (entry, link) always come back as tuples, whether the
document holds zero, one or many of them. Any structural problem raises
FeedParseError instead of dropping data.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple, Union

from ..errors import FeedParseError

logger = logging.getLogger(__name__)

ATOM_NAMESPACE = 'http://www.w3.org/2005/Atom'


@dataclass(frozen=True)
class AtomLink:
    """A feed or entry link."""
    href: str
    rel: Optional[str] = None
    type: Optional[str] = None


@dataclass(frozen=True)
class AtomEntry:
    """A single feed entry; for tag feeds the title is the tag name."""
    id: str
    title: str
    updated: datetime
    links: Tuple[AtomLink, ...] = ()


@dataclass(frozen=True)
class AtomFeed:
    """A parsed Atom feed."""
    id: str
    title: str
    updated: datetime
    links: Tuple[AtomLink, ...] = ()
    entries: Tuple[AtomEntry, ...] = ()


def _local_name(tag: str) -> str:
    """Strip the namespace from an element tag: '{ns}entry' -> 'entry'."""
    return tag.rsplit('}', 1)[-1]


def _children(element: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _required_text(element: ET.Element, name: str, context: str) -> str:
    found = _children(element, name)
    if not found or found[0].text is None or not found[0].text.strip():
        raise FeedParseError(f"Missing required <{name}> in {context}")
    return found[0].text.strip()


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp as used in Atom feeds.

    Args:
        value: Timestamp string (e.g., "2023-01-03T20:28:34Z")

    Returns:
        datetime (timezone-aware when the string carries an offset)

    Raises:
        FeedParseError: If the string is not ISO-8601
    """
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise FeedParseError(f"Invalid timestamp {value!r}") from e


def _parse_links(element: ET.Element, context: str) -> Tuple[AtomLink, ...]:
    links = []
    for link in _children(element, 'link'):
        href = link.get('href')
        if not href:
            raise FeedParseError(f"<link> without href in {context}")
        links.append(AtomLink(href=href, rel=link.get('rel'), type=link.get('type')))
    return tuple(links)


def _parse_entry(element: ET.Element, index: int) -> AtomEntry:
    context = f"entry #{index + 1}"
    return AtomEntry(
        id=_required_text(element, 'id', context),
        title=_required_text(element, 'title', context),
        updated=parse_timestamp(_required_text(element, 'updated', context)),
        links=_parse_links(element, context),
    )


def parse_atom_feed(xml: Union[bytes, str]) -> AtomFeed:
    """
    Parse an Atom feed document.

    Args:
        xml: Raw feed body

    Returns:
        AtomFeed with entries in document order

    Raises:
        FeedParseError: On malformed XML, a non-feed root element,
            missing required fields or unparsable dates
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise FeedParseError(f"Malformed feed XML: {e}") from e

    if _local_name(root.tag) != 'feed':
        raise FeedParseError(f"Expected <feed> root element, got <{_local_name(root.tag)}>")

    entries = tuple(
        _parse_entry(element, i)
        for i, element in enumerate(_children(root, 'entry'))
    )

    feed = AtomFeed(
        id=_required_text(root, 'id', 'feed'),
        title=_required_text(root, 'title', 'feed'),
        updated=parse_timestamp(_required_text(root, 'updated', 'feed')),
        links=_parse_links(root, 'feed'),
        entries=entries,
    )
    logger.debug(f"Parsed feed {feed.id!r} with {len(entries)} entries")
    return feed
