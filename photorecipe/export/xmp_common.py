"""
Shared XMP building blocks.

Namespace table, element helpers, number formatting, and the packet
wrapper used by both the preset and the camera-profile generators.
"""

import math
import uuid
import logging
from typing import Iterable, Optional
import xml.etree.ElementTree as ET
from xml.dom import minidom

from ..recipe.ranges import clean_text

logger = logging.getLogger(__name__)

# XMP namespaces
XMP_NAMESPACES = {
    'x': 'adobe:ns:meta/',
    'rdf': 'http://www.w3.org/1999/02/22-rdf-syntax-ns#',
    'crs': 'http://ns.adobe.com/camera-raw-settings/1.0/',
}
XML_LANG = '{http://www.w3.org/XML/1998/namespace}lang'

XPACKET_HEADER = '<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>\n'
XPACKET_FOOTER = '\n<?xpacket end="w"?>'

for _prefix, _uri in XMP_NAMESPACES.items():
    ET.register_namespace(_prefix, _uri)


def rdf(local: str) -> str:
    return f"{{{XMP_NAMESPACES['rdf']}}}{local}"


def crs(local: str) -> str:
    return f"{{{XMP_NAMESPACES['crs']}}}{local}"


def round_half_up(value: float) -> int:
    """Round .5 away from the floor, as editors do (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def format_int(value: float) -> str:
    return str(round_half_up(value))


def format_fixed(value: float, digits: int) -> str:
    """Fixed-point text without a '-0.00' result."""
    rounded = round(value, digits) + 0.0
    text = f"{rounded:.{digits}f}"
    if float(text) == 0.0:
        text = f"{0.0:.{digits}f}"
    return text


def format_bool(value: bool) -> str:
    return 'true' if value else 'false'


def new_sync_id() -> str:
    """32 hex character id used by Lightroom for corrections and masks."""
    return uuid.uuid4().hex.upper()


def create_packet() -> ET.Element:
    """Create x:xmpmeta / rdf:RDF / rdf:Description and return the root."""
    root = ET.Element(f"{{{XMP_NAMESPACES['x']}}}xmpmeta")
    rdf_root = ET.SubElement(root, rdf('RDF'))
    description = ET.SubElement(rdf_root, rdf('Description'))
    description.set(rdf('about'), '')
    return root


def settings_description(root: ET.Element) -> ET.Element:
    return root.find(f"{rdf('RDF')}/{rdf('Description')}")


def add_text(parent: ET.Element, name: str, value: Optional[str]) -> Optional[ET.Element]:
    """Add <crs:name>value</crs:name> when value is not None."""
    if value is None:
        return None
    elem = ET.SubElement(parent, crs(name))
    elem.text = clean_text(value)
    return elem


def add_alt(parent: ET.Element, name: str, text: str) -> ET.Element:
    """Add a language-alternative block with a single x-default entry."""
    elem = ET.SubElement(parent, crs(name))
    alt = ET.SubElement(elem, rdf('Alt'))
    li = ET.SubElement(alt, rdf('li'))
    li.set(XML_LANG, 'x-default')
    li.text = clean_text(text)
    return elem


def add_seq(parent: ET.Element, name: str, items: Iterable[str]) -> ET.Element:
    """Add an ordered rdf:Seq of text items."""
    elem = ET.SubElement(parent, crs(name))
    seq = ET.SubElement(elem, rdf('Seq'))
    for item in items:
        li = ET.SubElement(seq, rdf('li'))
        li.text = clean_text(item)
    return elem


def prettify_xml(elem: ET.Element) -> str:
    """Return a pretty-printed XMP packet string."""
    rough_string = ET.tostring(elem, encoding='unicode')
    reparsed = minidom.parseString(rough_string)

    pretty_xml = reparsed.toprettyxml(indent=' ', encoding=None)
    # Drop the XML declaration and blank lines
    lines = [line for line in pretty_xml.split('\n')
             if line.strip() and not line.startswith('<?xml')]

    return XPACKET_HEADER + '\n'.join(lines) + XPACKET_FOOTER
