import json
import re
from collections.abc import Mapping
from urllib.parse import parse_qsl
from xml.etree import ElementTree

from requests_toolbelt.multipart import decoder

XML_ROOT = "response"
XML_ITEM = "item"

_XML_NAME_RE = re.compile(r"^[^\W\d][\w.\-]*$")


def encode_json(data):
    return json.dumps(data, separators=(",", ":"))


def decode_json(text):
    return json.loads(text)


def _is_xml_name(name):
    return bool(_XML_NAME_RE.match(name)) and not name.lower().startswith("xml")


def _build_xml(element, value):
    if isinstance(value, Mapping):
        for key, item in value.items():
            key = str(key)
            if _is_xml_name(key):
                child = ElementTree.SubElement(element, key)
            else:
                child = ElementTree.SubElement(element, XML_ITEM, key=key)
            _build_xml(child, item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _build_xml(ElementTree.SubElement(element, XML_ITEM), item)
    elif value is None:
        return
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    else:
        element.text = str(value)


def encode_xml(data, root=XML_ROOT):
    """Serializes ``data`` into a UTF-8 XML document, as bytes.

    Mapping keys become child elements (keys that aren't valid XML names
    become ``<item key="...">``), sequences become repeated ``<item>``
    elements, ``None`` becomes an empty element.
    """
    element = ElementTree.Element(root)
    _build_xml(element, data)
    return ElementTree.tostring(element, encoding="utf-8", xml_declaration=True)


def decode_form(text):
    """Decodes a urlencoded string into a dict.

    Later values win; ``key[]`` fields are collected into a list under ``key``.
    Segments without an ``=`` are dropped; ``a=`` gives ``{"a": ""}``.
    """
    fields = "&".join(segment for segment in text.split("&") if "=" in segment)
    result = {}
    for key, value in parse_qsl(fields, keep_blank_values=True):
        if not key:
            continue
        if key.endswith("[]"):
            key = key[:-2]
            values = result.get(key)
            if not isinstance(values, list):
                values = result[key] = []
            values.append(value)
        else:
            result[key] = value
    return result


async def format_form(r):
    """Returns the form fields of a urlencoded or multipart request body."""
    if "multipart/form-data" in r.mimetype:
        decode = decoder.MultipartDecoder(await r.content, r.mimetype)
        fields = {}
        for part in decode.parts:
            header = part.headers.get(b"Content-Disposition").decode("utf-8")
            text = part.text

            for section in [h.strip() for h in header.split(";")]:
                split = section.split("=")
                if len(split) > 1 and split[0] == "name":
                    key = split[1][1:-1]
                    fields[key] = text
        return fields
    else:
        return decode_form(await r.text)
