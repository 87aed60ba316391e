"""Parsers for registry server payloads.

The registry answers in XML or JSON depending on content negotiation. Both
are first normalized into one tree shape so the extractors below never
care which format arrived:

- a mapping holds the fields of one element;
- a field with nested structure is a list of mappings (one per occurrence);
- a leaf field is a string.

An XML document becomes ``{root_tag: [root_fields]}``, which matches how the
JSON codec wraps its payload in a single top-level key.
"""

import json
import re
import xml.etree.ElementTree as ET
from typing import Any

from eureka_exporter.core.errors import ParseError
from eureka_exporter.core.models import NodeEntry, ServerStatusEntry

STATUS_INFO_KEYS = ("com.netflix.eureka.util.StatusInfo", "StatusInfo")

_IPV4_RE = re.compile(
    r"((2(5[0-5]|[0-4]\d))|[0-1]?\d{1,2})(\.((2(5[0-5]|[0-4]\d))|[0-1]?\d{1,2})){3}"
)

Tree = dict[str, Any]


def _element_to_tree(element: ET.Element) -> Tree:
    node: Tree = dict(element.attrib)
    text = (element.text or "").strip()
    if element.attrib and text:
        node["$"] = text
    for child in element:
        if len(child) == 0 and not child.attrib:
            node[child.tag] = (child.text or "").strip()
        else:
            node.setdefault(child.tag, []).append(_element_to_tree(child))
    return node


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _normalize_json(value: Any) -> Any:
    if isinstance(value, dict):
        return [{key: _normalize_json(item) for key, item in value.items()}]
    if isinstance(value, list):
        normalized: list[Any] = []
        for item in value:
            if isinstance(item, dict):
                normalized.extend(_normalize_json(item))
            else:
                normalized.append(_scalar(item))
        return normalized
    return _scalar(value)


def normalize_payload(payload: bytes | str) -> Tree:
    """Normalize an XML or JSON payload into the common tree shape.

    Args:
        payload: Raw response body.

    Returns:
        Mapping of the document's top-level key to a list of element trees.

    Raises:
        ParseError: If the payload is neither well-formed XML nor a JSON object.
    """
    if isinstance(payload, bytes):
        try:
            text = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"payload is not valid UTF-8: {exc}") from exc
    else:
        text = payload
    text = text.strip()
    if text.startswith("<"):
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ParseError(f"malformed XML payload: {exc}") from exc
        return {root.tag: [_element_to_tree(root)]}
    if text.startswith("{"):
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"malformed JSON payload: {exc}") from exc
        return {key: _normalize_json(value) for key, value in document.items()}
    raise ParseError("payload is neither XML nor a JSON object")


def _children(node: Tree, key: str) -> list[Tree]:
    """Return the nested elements under key; absent or empty means none."""
    value = node.get(key)
    if value is None or value == "":
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ParseError(f"expected nested elements under {key!r}")
    return value


def _first(node: Tree, key: str) -> Tree:
    children = _children(node, key)
    if not children:
        raise ParseError(f"missing required element {key!r}")
    return children[0]


def _field(node: Tree, key: str) -> str:
    value = node.get(key)
    if value is None:
        raise ParseError(f"missing required field {key!r}")
    if not isinstance(value, str):
        raise ParseError(f"field {key!r} is not a scalar value")
    return value


def is_ipv4(value: str) -> bool:
    """True if value is a literal dotted-quad IPv4 address."""
    return _IPV4_RE.fullmatch(value) is not None


def normalize_instance_id(instance_id: str, host_name: str) -> str:
    """Rebuild an instance id around the registered host name.

    The id is split at its first ``:``. The segment checked against the IPv4
    pattern stops one character short of the colon, matching the registry
    agent this exporter replaces; unless that segment is an IPv4 literal,
    the host part is replaced by host_name and the ``:port`` suffix kept.
    Ids without a colon are returned unchanged.
    """
    colon = instance_id.find(":")
    if colon < 0:
        return instance_id
    if is_ipv4(instance_id[: max(colon - 1, 0)]):
        return instance_id
    return host_name + instance_id[colon:]


def parse_node_listing(
    payload: bytes | str, cluster: str = "default"
) -> list[NodeEntry]:
    """Parse an ``/eureka/apps`` payload into node entries.

    A payload without applications, applications without instances, or an
    empty listing all yield an empty list.

    Raises:
        ParseError: On malformed payloads or instances missing a field.
    """
    tree = normalize_payload(payload)
    entries: list[NodeEntry] = []
    for applications in _children(tree, "applications"):
        for application in _children(applications, "application"):
            for instance in _children(application, "instance"):
                entries.append(
                    NodeEntry(
                        cluster=cluster,
                        application=_field(instance, "app"),
                        host=_field(instance, "hostName"),
                        instance_id=_field(instance, "instanceId"),
                        status=_field(instance, "status"),
                    )
                )
    return entries


def _status_infos(tree: Tree) -> list[Tree]:
    for key in STATUS_INFO_KEYS:
        if key in tree:
            return _children(tree, key)
    return []


def parse_server_status(
    payload: bytes | str, cluster: str = "default"
) -> list[ServerStatusEntry]:
    """Parse an ``/eureka/status`` payload into server status entries.

    Only the first applicationStats, instanceInfo and leaseInfo element of
    each StatusInfo is read.

    Raises:
        ParseError: On malformed payloads or missing required fields.
    """
    tree = normalize_payload(payload)
    entries: list[ServerStatusEntry] = []
    for status_info in _status_infos(tree):
        stats = _first(status_info, "applicationStats")
        instance = _first(status_info, "instanceInfo")
        lease = _first(instance, "leaseInfo")
        entries.append(
            ServerStatusEntry(
                cluster=cluster,
                replicas=_field(stats, "registered-replicas"),
                instance_id=normalize_instance_id(
                    _field(instance, "instanceId"), _field(instance, "hostName")
                ),
                status=_field(instance, "status"),
                renewal_interval_in_secs=_field(lease, "renewalIntervalInSecs"),
                duration_in_secs=_field(lease, "durationInSecs"),
            )
        )
    return entries
