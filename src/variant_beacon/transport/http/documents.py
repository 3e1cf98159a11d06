"""XML rendering of Beacon response and information documents."""

import xml.etree.ElementTree as ET

from variant_beacon.transport.http.schemas import BeaconInfo, BeaconResponse

XML_MEDIA_TYPE = "application/xml"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _serialize(root: ET.Element) -> str:
    ET.indent(root, space="  ")
    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def render_beacon_response(response: BeaconResponse) -> str:
    """``<BEACONResponse><exists>true</exists></BEACONResponse>``."""
    root = ET.Element("BEACONResponse")
    ET.SubElement(root, "exists").text = _text(response.exists)
    return _serialize(root)


def render_beacon_info(info: BeaconInfo) -> str:
    root = ET.Element("BEACON")
    fields = info.model_dump(by_alias=True)
    modes = fields.pop("coordinateModes")
    for name, value in fields.items():
        ET.SubElement(root, name).text = _text(value)
    supported = ET.SubElement(root, "coordinateModes")
    for mode in modes:
        ET.SubElement(supported, "mode").text = mode
    return _serialize(root)
