"""Parse flexform XML (values and data structures) into nested dicts."""

import re
from typing import Any
from xml.etree import ElementTree

from content_tree.exceptions import StoredDataParseError

_NUMERIC_TAG = re.compile(r"n(\d+)")


def _element_key(element: ElementTree.Element) -> str:
    if "index" in element.attrib:
        return element.attrib["index"]
    match = _NUMERIC_TAG.fullmatch(element.tag)
    if match:
        return match.group(1)
    return element.tag


def _element_value(element: ElementTree.Element) -> Any:
    value_type = element.get("type")
    if len(element) or value_type == "array":
        return _children_to_dict(element)

    text = element.text or ""
    if value_type == "integer":
        return int(text or 0)
    if value_type == "double":
        return float(text or 0)
    if value_type == "boolean":
        # PHP bool cast: only "" and "0" are false
        return text not in ("", "0")
    return text


def _children_to_dict(element: ElementTree.Element) -> dict[str, Any]:
    return {_element_key(child): _element_value(child) for child in element}


def xml_to_dict(payload: str) -> dict[str, Any]:
    """Convert an XML document to a dict, dropping the document element.

    Keys come from the ``index`` attribute if present, ``nNN`` tags become
    ``NN`` and all other tags are used as is. Later siblings with the same key
    overwrite earlier ones.

    Raises:
        StoredDataParseError: If the payload is not well-formed XML.
    """
    try:
        root = ElementTree.fromstring(payload.strip())
        return _children_to_dict(root)
    except (ElementTree.ParseError, ValueError) as e:
        msg = f"Malformed flexform XML: {e}"
        raise StoredDataParseError(msg) from e


class FlexFormParser:
    """Parser for persisted ``T3FlexForms`` payloads."""

    def parse(self, payload: str) -> dict[str, Any] | None:
        if not payload or not payload.strip():
            return None
        return xml_to_dict(payload)
