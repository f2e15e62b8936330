"""RSS 2.0 document building and serialization."""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime

from .models import FeedEntry
from .render import format_pub_date

XML_HEADER = (
    "<?xml version='1.0' encoding='utf-8'?>\n"
    '<?xml-stylesheet type="text/xml"?>\n'
)
ITEM_FIELDS = ("title", "description", "link", "guid", "pubDate", "contentType")

# Anything outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(
    r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def xml_safe(text: str) -> str:
    """Drop characters that may not appear in an XML 1.0 document."""
    return _INVALID_XML_CHARS.sub("", text)


@dataclass(frozen=True)
class FeedDocument:
    """A complete feed: channel metadata plus its entries, in order."""

    title: str
    description: str
    built_at: datetime
    entries: tuple[FeedEntry, ...]

    @property
    def item_count(self) -> int:
        return len(self.entries)

    def to_element(self) -> ET.Element:
        rss = ET.Element("rss", {"version": "2.0"})
        channel = ET.SubElement(rss, "channel")
        ET.SubElement(channel, "title").text = xml_safe(self.title)
        ET.SubElement(channel, "description").text = xml_safe(self.description)
        ET.SubElement(channel, "lastBuildDate").text = format_pub_date(self.built_at)

        for entry in self.entries:
            item = ET.SubElement(channel, "item")
            ET.SubElement(item, "title").text = xml_safe(entry.title)
            ET.SubElement(item, "description").text = xml_safe(entry.description)
            ET.SubElement(item, "link").text = xml_safe(entry.link)
            guid = ET.SubElement(item, "guid", {"isPermaLink": "false"})
            guid.text = xml_safe(entry.guid)
            ET.SubElement(item, "pubDate").text = xml_safe(entry.pub_date)
            ET.SubElement(item, "contentType").text = xml_safe(entry.content_type)
            for tag, text in entry.extra_tags:
                ET.SubElement(item, tag).text = xml_safe(text)
        return rss

    def to_xml(self) -> bytes:
        """Serialize to UTF-8 bytes, including the XML declaration."""
        body = ET.tostring(self.to_element(), encoding="unicode")
        return (XML_HEADER + body).encode("utf-8")


def build(
    entries: list[FeedEntry],
    built_at: datetime,
    title: str = "Joe's digital journal",
    description: str = "A curated stream of my discoveries, thoughts, and activities",
) -> FeedDocument:
    """Wrap entries in a channel envelope, dropping blank entries."""
    kept = tuple(entry for entry in entries if not entry.is_blank())
    return FeedDocument(
        title=title, description=description, built_at=built_at, entries=kept
    )


def parse_items(document: bytes) -> list[FeedEntry]:
    """Read the items of a serialized document back into FeedEntry objects."""
    root = ET.fromstring(document)
    entries = []
    for item in root.iterfind("./channel/item"):
        fields = {field: item.findtext(field, default="") for field in ITEM_FIELDS}
        extra = tuple(
            (child.tag, child.text or "")
            for child in item
            if child.tag not in ITEM_FIELDS
        )
        entries.append(
            FeedEntry(
                title=fields["title"],
                description=fields["description"],
                link=fields["link"],
                guid=fields["guid"],
                pub_date=fields["pubDate"],
                content_type=fields["contentType"],
                extra_tags=extra,
            )
        )
    return entries
