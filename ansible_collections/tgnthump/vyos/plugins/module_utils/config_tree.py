# Copyright (C) 2025 tgnthump.vyos contributors
# This file is part of the tgnthump.vyos Ansible Collection
# SPDX-License-Identifier: GPL-3.0-or-later
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Configuration tree helpers shared by the resource adapters.
# It provides:
#   • path model (split / join / wire segments)
#   • tree flattener (nested value -> (relative path, leaf) pairs)
#   • operation builder (set / delete batches for the /configure endpoint)
#
# Paths are space separated and VyOS has no escaping for segments, so a
# segment can never contain a space.

import json

from ansible.module_utils._text import to_text
from ansible_collections.tgnthump.vyos.plugins.module_utils.errors import (
    InvalidPathError,
    MalformedValueError,
    UnsupportedValueKind,
)

SEPARATOR = " "

# Leaf value emitted for an empty mapping or list. The API sets a valueless
# node when a set operation carries no value.
EMPTY_NODE = ""

SCALAR_TYPES = (str, bool, int, float, type(None))


# Path model
def split_path(path: str) -> tuple[str, str]:
    """Return *(parent, terminal)*; the parent of a one-segment path is ``""`` (root)."""
    if not path:
        raise InvalidPathError("Configuration path must not be empty")
    parent, _sep, terminal = path.rpartition(SEPARATOR)
    return parent, terminal


def join_path(prefix: str, suffix: str) -> str:
    if prefix and suffix:
        return f"{prefix}{SEPARATOR}{suffix}"
    return prefix or suffix


def path_segments(path: str) -> list[str]:
    """Wire form of *path*; the root path is the empty list."""
    return path.split(SEPARATOR) if path else []


def check_path(path: str) -> str:
    """Reject a non-root *path* that contains an empty segment."""
    if path and "" in path_segments(path):
        raise InvalidPathError(f"Invalid configuration path {path!r}: empty segment", path=path)
    return path


def _check_segment(key) -> str:
    if not isinstance(key, str):
        raise UnsupportedValueKind(
            f"Configuration keys must be strings, got {type(key).__name__}", key=key
        )
    if not key or SEPARATOR in key:
        raise InvalidPathError(
            f"Invalid path segment {key!r}: segments must be non-empty and contain no spaces",
            key=key,
        )
    return key


# Tree flattener
def flatten(value) -> list[tuple[str, object]]:
    """
    Decompose *value* into ``(relative_path, leaf)`` pairs, one per leaf.
    Mappings are visited in insertion order, lists by index.
    """
    if isinstance(value, SCALAR_TYPES):
        return [("", value)]

    if isinstance(value, dict):
        items = [(_check_segment(k), v) for k, v in value.items()]
    elif isinstance(value, list):
        items = [(str(i), v) for i, v in enumerate(value)]
    else:
        raise UnsupportedValueKind(
            f"Cannot flatten a value of type {type(value).__name__}",
            value=to_text(repr(value)),
        )

    if not items:
        return [("", EMPTY_NODE)]

    pairs: list[tuple[str, object]] = []
    for segment, child in items:
        pairs += [(join_path(segment, sub), leaf) for sub, leaf in flatten(child)]
    return pairs


def wire_value(leaf) -> str:
    """String form of a scalar leaf as sent to the API."""
    if leaf is None:
        return ""
    if isinstance(leaf, bool):
        return "true" if leaf else "false"
    if isinstance(leaf, SCALAR_TYPES):
        return str(leaf)
    raise UnsupportedValueKind(f"Not a scalar: {type(leaf).__name__}")


def normalize(value):
    """Return *value* the way the router reports it back once it has been set."""
    if isinstance(value, dict):
        return {k: normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return {str(i): normalize(v) for i, v in enumerate(value)} if value else {}
    text = wire_value(value)
    return text if text else {}


def decode_value(text: str | None):
    """Parse the JSON text of a ``value`` attribute; a missing value is an empty node."""
    if text is None or text == "":
        return {}
    try:
        return json.loads(text)
    except ValueError as err:
        raise MalformedValueError(
            f"Value is not valid JSON: {to_text(err)}", value=text
        ) from err


# Operation builder
class ConfigOperation:
    """Single ``set`` or ``delete`` entry of a /configure batch."""

    SET = "set"
    DELETE = "delete"

    def __init__(self, op: str, path: str, value=None):
        if op not in (self.SET, self.DELETE):
            raise ValueError(f"Unknown operation {op!r}")
        self.op = op
        self.path = path
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, ConfigOperation):
            return NotImplemented
        return (self.op, self.path, self.value) == (other.op, other.path, other.value)

    def __repr__(self):
        return f"ConfigOperation({self.op!r}, {self.path!r}, {self.value!r})"

    def to_payload(self) -> dict:
        payload = {"op": self.op, "path": path_segments(self.path)}
        if self.op == self.SET:
            text = wire_value(self.value)
            if text:
                payload["value"] = text
        return payload

    def to_command(self) -> str:
        if self.op == self.DELETE:
            return f"delete {self.path}"
        text = wire_value(self.value)
        return f"set {self.path} '{text}'" if text else f"set {self.path}"


def build_set_batch(path: str, value) -> list[ConfigOperation]:
    return [
        ConfigOperation(ConfigOperation.SET, join_path(path, sub), leaf)
        for sub, leaf in flatten(value)
    ]


def build_update_batch(target_path: str, new_value) -> list[ConfigOperation]:
    """
    Replace the subtree at *target_path* with *new_value*.
    The delete of the whole subtree always comes first so that no stale
    children survive; the sets follow in flattening order.
    """
    sets = build_set_batch(target_path, new_value)
    return [ConfigOperation(ConfigOperation.DELETE, target_path)] + sets


def render_commands(batch: list[ConfigOperation]) -> list[str]:
    return [op.to_command() for op in batch]
