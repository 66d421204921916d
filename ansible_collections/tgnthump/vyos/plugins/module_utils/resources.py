# Copyright (C) 2025 tgnthump.vyos contributors
# This file is part of the tgnthump.vyos Ansible Collection
# SPDX-License-Identifier: GPL-3.0-or-later
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Resource adapters. Each one maps create / read / update / delete / import
# onto VyosClient calls. Records are plain dicts shaped like module params.

import json

from ansible_collections.tgnthump.vyos.plugins.module_utils.config_tree import (
    build_update_batch,
    check_path,
    decode_value,
    join_path,
    split_path,
)
from ansible_collections.tgnthump.vyos.plugins.module_utils.errors import (
    ConflictError,
    InvalidPathError,
    NotFoundError,
)


def _no_log(msg: str) -> None:
    pass


class _TreeResource:
    """Common parent lookup for resources stored in the config tree."""

    def __init__(self, client, log=None):
        self.client = client
        self.log = log or _no_log

    def _parent(self, path: str):
        parent_path, terminal = split_path(check_path(path))
        self.log(f"Reading path {path}")
        return self.client.show(parent_path), terminal

    def lookup(self, path: str):
        """Return ``(found, subtree)`` for *path*."""
        parent, terminal = self._parent(path)
        if isinstance(parent, dict) and terminal in parent:
            return True, parent[terminal]
        return False, None

    def _ensure_absent(self, path: str) -> None:
        found, existing = self.lookup(path)
        if found:
            raise ConflictError(
                f"Configuration path '{path}' already exists, try a resource import instead.",
                existing=existing,
            )

    def _fetch(self, path: str):
        parent, terminal = self._parent(path)
        if parent is None:
            raise NotFoundError("Parent of resource not found", path=path)
        if not isinstance(parent, dict) or terminal not in parent:
            raise NotFoundError("Resource not found", path=path)
        return parent[terminal]

    def _replace(self, path: str, tree) -> list:
        batch = build_update_batch(check_path(path), tree)
        self.log(f"Updating path {path}: {[op.to_command() for op in batch]}")
        self.client.api_request("configure", [op.to_payload() for op in batch])
        return batch

    def _remove(self, path: str) -> None:
        check_path(path)
        self.log(f"Deleting path {path}")
        self.client.delete(path)
        self.log(f"Deleted path {path}")


# vyos_config
class ConfigResource(_TreeResource):
    """Arbitrary subtree at ``path`` holding the JSON document ``value``."""

    def create(self, plan: dict) -> dict:
        path = plan["path"]
        self._ensure_absent(path)
        tree = decode_value(plan.get("value"))
        self.log(f"Setting path {path} to value {plan.get('value')}")
        self.client.set(path, tree)
        return dict(plan, id=path)

    def read(self, state: dict) -> dict:
        tree = self._fetch(state["path"])
        return dict(state, value=json.dumps(tree))

    def update(self, plan: dict) -> dict:
        self._replace(plan["path"], decode_value(plan.get("value")))
        return dict(plan, id=plan["path"])

    def delete(self, state: dict) -> None:
        self._remove(state["path"])

    @staticmethod
    def import_state(identifier: str) -> dict:
        return {"id": identifier, "path": identifier}


# vyos_container_image
class ContainerImageResource:
    """
    Image pulled on the router. The name is the only attribute, so an update
    is a replacement: the old image is removed and the new one pulled.
    """

    def __init__(self, client, log=None):
        self.images = client.container_images
        self.log = log or _no_log

    def create(self, plan: dict) -> dict:
        self.log(f"Adding container image {plan['name']}")
        self.images.add(plan["name"])
        self.log(f"Added container image {plan['name']}")
        return dict(plan, id=plan["name"])

    def read(self, state: dict) -> dict | None:
        """Return the refreshed record, or None once the image is gone."""
        self.log(f"Getting container image {state['name']}")
        image = self.images.show(state["name"])
        if image is None:
            return None
        return dict(state, name=image.reference, image=image.as_dict())

    def update(self, plan: dict, state: dict) -> dict:
        if plan["name"] == state.get("name"):
            return dict(state, **plan)
        self.delete(state)
        return self.create(plan)

    def delete(self, state: dict) -> None:
        self.log(f"Deleting container image {state['name']}")
        self.images.delete(state["name"])
        self.log(f"Deleted container image {state['name']}")

    @staticmethod
    def import_state(identifier: str) -> dict:
        return {"id": identifier, "name": identifier}


# vyos_container
CONTAINER_ROOT = "container name"

CONTAINER_FIELDS = (
    "name",
    "image",
    "description",
    "host_network",
    "network",
    "env",
    "ports",
    "volumes",
)


def container_path(name: str) -> str:
    if not name or " " in name:
        raise InvalidPathError(f"Invalid container name {name!r}", name=name)
    return join_path(CONTAINER_ROOT, name)


def container_tree(p: dict) -> dict:
    """Build the ``container name <name>`` subtree from the resource attributes."""
    tree: dict = {"image": p["image"]}
    if p.get("description"):
        tree["description"] = p["description"]
    if p.get("host_network"):
        tree["allow-host-networks"] = {}

    net = p.get("network")
    if net:
        tree["network"] = {net["name"]: {"address": net["address"]} if net.get("address") else {}}

    if p.get("env"):
        tree["environment"] = {k: {"value": v} for k, v in p["env"].items()}

    if p.get("ports"):
        tree["port"] = {
            port["name"]: {
                k: port[k] for k in ("source", "destination", "protocol") if port.get(k) is not None
            }
            for port in p["ports"]
        }

    if p.get("volumes"):
        tree["volume"] = {
            vol["name"]: {
                k: vol[k] for k in ("source", "destination", "mode") if vol.get(k) is not None
            }
            for vol in p["volumes"]
        }
    return tree


def _port_number(raw):
    try:
        return int(raw)
    except (TypeError, ValueError):
        return raw


def container_from_tree(name: str, tree: dict) -> dict:
    """Inverse of :func:`container_tree` for a subtree read from the router."""
    tree = tree if isinstance(tree, dict) else {}

    network = None
    for net_name, net in (tree.get("network") or {}).items():
        network = {"name": net_name, "address": (net or {}).get("address")}
        break

    env = {
        k: (v or {}).get("value", "") for k, v in (tree.get("environment") or {}).items()
    }

    ports = [
        {
            "name": port_name,
            "source": _port_number(port.get("source")),
            "destination": _port_number(port.get("destination")),
            "protocol": port.get("protocol"),
        }
        for port_name, port in (tree.get("port") or {}).items()
    ]

    volumes = [
        {
            "name": vol_name,
            "source": vol.get("source"),
            "destination": vol.get("destination"),
            "mode": vol.get("mode"),
        }
        for vol_name, vol in (tree.get("volume") or {}).items()
    ]

    return {
        "id": name,
        "name": name,
        "image": tree.get("image"),
        "description": tree.get("description"),
        "host_network": "allow-host-networks" in tree,
        "network": network,
        "env": env or None,
        "ports": ports or None,
        "volumes": volumes or None,
    }


class ContainerResource(_TreeResource):
    def create(self, plan: dict) -> dict:
        path = container_path(plan["name"])
        self._ensure_absent(path)
        self.log(f"Adding container {plan['name']}")
        self.client.set(path, container_tree(plan))
        self.log(f"Added container {plan['name']}")
        return dict(plan, id=plan["name"])

    def read(self, state: dict) -> dict:
        tree = self._fetch(container_path(state["name"]))
        return container_from_tree(state["name"], tree)

    def update(self, plan: dict) -> dict:
        self._replace(container_path(plan["name"]), container_tree(plan))
        return dict(plan, id=plan["name"])

    def delete(self, state: dict) -> None:
        self._remove(container_path(state["name"]))

    @staticmethod
    def import_state(identifier: str) -> dict:
        return {"id": identifier, "name": identifier}
