"""
Outline Parsing
===============
Turns the text returned by a topic generator (or an outline file) into the
`(main branch, [leaves])` pairs the graph is built from.

Accepted forms:
    1. JSON snapshot: {"topic": "...", "nodes": [{"text": ..., "children": [...]}, ...]}
    2. JSON list:     [{"name": "...", "children": ["...", ...]}, ...]
                      or [["main", ["leaf", ...]], ...]
    3. Bullet outline:
            # Topic
            - Main branch
              - Leaf
              - Leaf
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional, Tuple

from mindcanvas.model.errors import InputError

logger = logging.getLogger(__name__)

OutlineList = List[Tuple[str, List[str]]]

_BULLET_RE = re.compile(r"^(?P<indent>\s*)(?:[-*+]|\d+[.)])\s+(?P<text>.+?)\s*$")
_HEADING_RE = re.compile(r"^\s*#+\s+(?P<text>.+?)\s*$")


def parse_outline(text: str) -> Tuple[Optional[str], OutlineList]:
    """
    Parse generator output into a topic (if present) and an outline.

    Raises:
        InputError: If no main branch can be recovered.
    """
    if not text or not text.strip():
        raise InputError("Outline is empty.")

    stripped = text.strip()
    if stripped[0] in "[{":
        try:
            data = json.loads(stripped)
        except json.JSONDecodeError as e:
            logger.debug(f"Outline is not valid JSON ({e}); trying bullet format.")
        else:
            topic, outline = _from_json(data)
            if not outline:
                raise InputError("Outline contains no main branches.")
            return topic, outline

    topic, outline = _from_bullets(text)
    if not outline:
        raise InputError("Outline contains no main branches.")
    return topic, outline


def _label(item: Any) -> str:
    if isinstance(item, dict):
        return str(item.get("text") or item.get("name") or item.get("title") or "").strip()
    return str(item).strip()


def _from_json(data: Any) -> Tuple[Optional[str], OutlineList]:
    topic: Optional[str] = None
    items = data
    if isinstance(data, dict):
        topic = str(data.get("topic") or "").strip() or None
        items = data.get("nodes") or data.get("branches") or []

    outline: OutlineList = []
    for item in items if isinstance(items, list) else []:
        if isinstance(item, (list, tuple)) and item:
            main = _label(item[0])
            leaves = item[1] if len(item) > 1 and isinstance(item[1], list) else []
        else:
            main = _label(item)
            leaves = item.get("children", []) if isinstance(item, dict) else []
        if not main:
            continue
        outline.append((main, [leaf for leaf in (_label(x) for x in leaves) if leaf]))
    return topic, outline


def _from_bullets(text: str) -> Tuple[Optional[str], OutlineList]:
    topic: Optional[str] = None
    outline: OutlineList = []
    main_indent: Optional[int] = None

    for raw in text.splitlines():
        if not raw.strip():
            continue

        heading = _HEADING_RE.match(raw)
        if heading:
            if topic is None:
                topic = heading.group("text")
            continue

        bullet = _BULLET_RE.match(raw.expandtabs(4))
        if not bullet:
            # Plain first line doubles as the topic
            if topic is None and not outline:
                topic = raw.strip()
            continue

        indent = len(bullet.group("indent"))
        label = bullet.group("text").strip("*_ ").strip()
        if not label:
            continue
        if main_indent is None or indent <= main_indent:
            main_indent = indent
            outline.append((label, []))
        else:
            # Deeper levels collapse onto the leaf tier
            outline[-1][1].append(label)

    return topic, outline
