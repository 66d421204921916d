# Copyright (C) 2025 tgnthump.vyos contributors
# This file is part of the tgnthump.vyos Ansible Collection
# SPDX-License-Identifier: GPL-3.0-or-later
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Client for the VyOS HTTP API. The transport is the httpapi plugin
# (plugins/httpapi/vyos.py) reached through the persistent connection, which
# answers send_request(endpoint, payload) with the decoded API envelope
# {"success": bool, "data": ..., "error": str | None}.

import re
import threading

from ansible.module_utils._text import to_text
from ansible.module_utils.connection import ConnectionError
from ansible_collections.tgnthump.vyos.plugins.module_utils.config_tree import (
    ConfigOperation,
    build_set_batch,
    path_segments,
)
from ansible_collections.tgnthump.vyos.plugins.module_utils.errors import (
    VyosApiError,
)

EMPTY_PATH_ERROR = "specified path is empty"


class VyosClient:
    def __init__(self, connection):
        self._conn = connection
        self.container_images = ContainerImages(self, threading.Lock())

    def api_request(self, endpoint: str, payload):
        """POST *payload* to */endpoint* and return the ``data`` member."""
        try:
            response = self._conn.send_request(endpoint, payload)
        except ConnectionError as err:
            raise VyosApiError(to_text(err), endpoint=endpoint) from err

        if not isinstance(response, dict):
            raise VyosApiError(
                f"Unexpected response from /{endpoint}", endpoint=endpoint
            )
        if not response.get("success"):
            error = to_text(response.get("error") or "unknown error").strip()
            raise VyosApiError(error, endpoint=endpoint)
        return response.get("data")

    def show(self, path: str):
        """Return the config tree below *path*, or None when nothing is configured there."""
        try:
            return self.api_request(
                "retrieve", {"op": "showConfig", "path": path_segments(path)}
            )
        except VyosApiError as err:
            if EMPTY_PATH_ERROR in err.msg.lower():
                return None
            raise

    def set(self, path: str, value) -> None:
        batch = build_set_batch(path, value)
        self.api_request("configure", [op.to_payload() for op in batch])

    def delete(self, path: str) -> None:
        op = ConfigOperation(ConfigOperation.DELETE, path)
        self.api_request("configure", op.to_payload())

    def save(self) -> None:
        self.api_request("config-file", {"op": "save"})


class ContainerImage:
    def __init__(self, name: str, tag: str, id: str = "", created: str = "", size: str = ""):
        self.name = name
        self.tag = tag
        self.id = id
        self.created = created
        self.size = size

    @property
    def reference(self) -> str:
        return f"{self.name}:{self.tag}"

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "tag": self.tag,
            "id": self.id,
            "created": self.created,
            "size": self.size,
        }


def _split_reference(ref: str) -> tuple[str, str]:
    # the tag follows the last ':' unless that colon belongs to a registry port
    name, sep, tag = ref.rpartition(":")
    if not sep or "/" in tag:
        return ref, "latest"
    return name, tag


def _image_from_json(entry: dict) -> list[ContainerImage]:
    ident = to_text(entry.get("Id") or entry.get("id") or "")
    created = to_text(entry.get("CreatedAt") or entry.get("Created") or entry.get("created") or "")
    size = to_text(entry.get("Size") or entry.get("size") or "")

    if entry.get("name"):
        return [ContainerImage(entry["name"], entry.get("tag") or "latest", ident, created, size)]
    if entry.get("Repository"):
        return [ContainerImage(entry["Repository"], entry.get("Tag") or "latest", ident, created, size)]
    return [
        ContainerImage(*_split_reference(ref), ident, created, size)
        for ref in entry.get("Names") or []
    ]


_TABLE_SPLIT = re.compile(r"\s{2,}")


def _images_from_table(text: str) -> list[ContainerImage]:
    """Parse the ``REPOSITORY  TAG  IMAGE ID  CREATED  SIZE`` table."""
    images = []
    for line in text.splitlines():
        cols = _TABLE_SPLIT.split(line.strip())
        if len(cols) < 2 or cols[0] == "REPOSITORY":
            continue
        cols += [""] * (5 - len(cols))
        images.append(ContainerImage(*cols[:5]))
    return images


def parse_images(data) -> list[ContainerImage]:
    if not data:
        return []
    if isinstance(data, str):
        return _images_from_table(data)
    images: list[ContainerImage] = []
    for entry in data:
        images += _image_from_json(entry)
    return images


class ContainerImages:
    """
    Container image sub-client. The API has no transactional guarantee for
    image operations, so every remote call is serialised behind *lock*.
    """

    def __init__(self, client: VyosClient, lock: threading.Lock):
        self._client = client
        self._lock = lock

    def show_all(self) -> list[ContainerImage]:
        with self._lock:
            return parse_images(self._client.api_request("container-image", {"op": "show"}))

    def show(self, name: str) -> ContainerImage | None:
        """Find *name*; an untagged reference matches the router's ``:latest`` entry."""
        wanted = "%s:%s" % _split_reference(name)
        for image in self.show_all():
            if image.reference == wanted:
                return image
        return None

    def add(self, name: str) -> None:
        with self._lock:
            self._client.api_request("container-image", {"op": "add", "name": name})

    def delete(self, name: str) -> None:
        with self._lock:
            self._client.api_request("container-image", {"op": "delete", "name": name})
