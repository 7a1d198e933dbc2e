# src/pragmatic_tasks/tasks/task_log_format.py

"""
XML codec for completion logs.

    <tasklog>
      <entry>
        <scheduledOn>2024-01-01</scheduledOn>
        <on>2024-01-02</on>
        <status>Completed</status>
        <who>Dan</who>
        <custom name="hours">2</custom>
        <comments>...</comments>
      </entry>
    </tasklog>

Parsing is strict: anything outside this shape raises MalformedLog.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import date

from ..errors import MalformedLog
from .task_models import CompletionEntry, Status, User

ROOT_NODE_NAME = "tasklog"
ENTRY_NODE_NAME = "entry"
SCHEDULED_ON_NODE_NAME = "scheduledOn"
ON_NODE_NAME = "on"
STATUS_NODE_NAME = "status"
WHO_NODE_NAME = "who"
CUSTOM_NODE_NAME = "custom"
CUSTOM_NAME_ATTRIBUTE_NAME = "name"
COMMENTS_NODE_NAME = "comments"


def format_date(d: date) -> str:
    return d.isoformat()


def _parse_date(content: str, *, resource: str) -> date:
    try:
        return date.fromisoformat(content.strip())
    except ValueError:
        raise MalformedLog(f"Invalid date {content!r}", value=content, resource=resource) from None


def _text(elem: ET.Element) -> str:
    # All nested text, concatenated.
    return "".join(elem.itertext())


def _parse_entry(elem: ET.Element, *, resource: str) -> CompletionEntry:
    scheduled_ons: list[date] = []
    on: date | None = None
    status: Status | None = None
    who: list[User] = []
    custom: dict[str, str] = {}
    comments: str | None = None

    for child in elem:
        if not isinstance(child.tag, str):
            # comments / processing instructions
            continue
        content = _text(child)
        name = child.tag
        if name == SCHEDULED_ON_NODE_NAME:
            scheduled_on = _parse_date(content, resource=resource)
            if scheduled_ons:
                last = scheduled_ons[-1]
                if scheduled_on == last:
                    raise MalformedLog(
                        f"Duplicate {SCHEDULED_ON_NODE_NAME} value {content!r}",
                        value=content,
                        resource=resource,
                    )
                if scheduled_on < last:
                    raise MalformedLog(
                        f"Out of order {SCHEDULED_ON_NODE_NAME}: "
                        f"{format_date(scheduled_on)} <= {format_date(last)}",
                        value=content,
                        resource=resource,
                    )
            scheduled_ons.append(scheduled_on)
        elif name == ON_NODE_NAME:
            if on is not None:
                raise MalformedLog(f"Multiple {ON_NODE_NAME} tag", value=content, resource=resource)
            on = _parse_date(content, resource=resource)
        elif name == STATUS_NODE_NAME:
            if status is not None:
                raise MalformedLog(f"Multiple {STATUS_NODE_NAME} tag", value=content, resource=resource)
            try:
                status = Status.from_label(content.strip())
            except ValueError:
                raise MalformedLog(
                    f"Unexpected status label {content!r}", value=content, resource=resource
                ) from None
        elif name == WHO_NODE_NAME:
            try:
                user = User.parse(content)
            except ValueError as e:
                raise MalformedLog(f"Invalid {WHO_NODE_NAME} tag ({e})", value=content, resource=resource) from None
            if not user.is_person:
                raise MalformedLog(f"Not a person: {user}", value=content, resource=resource)
            who.append(user)
        elif name == CUSTOM_NODE_NAME:
            custom_name = child.get(CUSTOM_NAME_ATTRIBUTE_NAME)
            if custom_name is None:
                raise MalformedLog(
                    f"{CUSTOM_NAME_ATTRIBUTE_NAME} attribute missing from {CUSTOM_NODE_NAME} tag",
                    value=content,
                    resource=resource,
                )
            if custom_name in custom:
                raise MalformedLog(
                    f"Duplicate {CUSTOM_NAME_ATTRIBUTE_NAME} attribute in {CUSTOM_NODE_NAME} tag: {custom_name}",
                    value=custom_name,
                    resource=resource,
                )
            custom[custom_name] = content
        elif name == COMMENTS_NODE_NAME:
            if comments is not None:
                raise MalformedLog(f"Multiple {COMMENTS_NODE_NAME} tag", value=content, resource=resource)
            comments = content
        else:
            raise MalformedLog(f"Unexpected child element {name!r}", value=name, resource=resource)

    if on is None:
        raise MalformedLog(f"Missing {ON_NODE_NAME} tag", value=None, resource=resource)
    if status is None:
        raise MalformedLog(f"Missing {STATUS_NODE_NAME} tag", value=None, resource=resource)

    try:
        return CompletionEntry(
            scheduled_ons=tuple(scheduled_ons),
            on=on,
            status=status,
            who=tuple(who),
            custom=custom,
            comments=comments,
        )
    except ValueError as e:
        raise MalformedLog(f"Invalid entry ({e})", value=format_date(on), resource=resource) from None


def parse_entries(data: bytes, *, resource: str) -> list[CompletionEntry]:
    """Parse a stored log, enforcing every structural rule of the format."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise MalformedLog(f"Unparseable XML ({e})", value=None, resource=resource) from e

    if root.tag != ROOT_NODE_NAME:
        raise MalformedLog(f"Unexpected root element {root.tag!r}", value=root.tag, resource=resource)

    entries: list[CompletionEntry] = []
    for child in root:
        if not isinstance(child.tag, str):
            continue
        if child.tag != ENTRY_NODE_NAME:
            raise MalformedLog(f"Unexpected element {child.tag!r}", value=child.tag, resource=resource)
        entry = _parse_entry(child, resource=resource)
        if entries and entry.on < entries[-1].on:
            raise MalformedLog(
                f'Entry not in order by "on": {format_date(entry.on)} < {format_date(entries[-1].on)}',
                value=format_date(entry.on),
                resource=resource,
            )
        entries.append(entry)
    return entries


def serialize_entries(entries: Iterable[CompletionEntry]) -> bytes:
    root = ET.Element(ROOT_NODE_NAME)
    for entry in entries:
        elem = ET.SubElement(root, ENTRY_NODE_NAME)
        for scheduled_on in entry.scheduled_ons:
            ET.SubElement(elem, SCHEDULED_ON_NODE_NAME).text = format_date(scheduled_on)
        ET.SubElement(elem, ON_NODE_NAME).text = format_date(entry.on)
        ET.SubElement(elem, STATUS_NODE_NAME).text = entry.status.label
        for user in entry.who:
            ET.SubElement(elem, WHO_NODE_NAME).text = user.name
        for name, value in entry.custom.items():
            ET.SubElement(elem, CUSTOM_NODE_NAME, {CUSTOM_NAME_ATTRIBUTE_NAME: name}).text = value
        if entry.comments is not None:
            ET.SubElement(elem, COMMENTS_NODE_NAME).text = entry.comments
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"
