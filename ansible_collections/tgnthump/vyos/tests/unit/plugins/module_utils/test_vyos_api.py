# Copyright (C) 2025 tgnthump.vyos contributors
# This file is part of the tgnthump.vyos Ansible Collection
# SPDX-License-Identifier: GPL-3.0-or-later

from unittest.mock import MagicMock

import pytest

from ansible.module_utils.connection import ConnectionError
from ansible_collections.tgnthump.vyos.plugins.module_utils.errors import VyosApiError
from ansible_collections.tgnthump.vyos.plugins.module_utils.vyos_api import (
    ContainerImages,
    VyosClient,
    parse_images,
)

IMAGE_TABLE = """\
REPOSITORY                TAG         IMAGE ID      CREATED      SIZE
docker.io/library/alpine  3.18.0      5e2b554c1c45  3 weeks ago  7.63 MB
docker.io/mvance/unbound  1.17.1      0a3c1f5ad4c6  2 months ago  288 MB
"""


def test_show_returns_subtree(router):
    router.config = {"system": {"host-name": "r1"}}
    assert VyosClient(router).show("system") == {"host-name": "r1"}
    assert router.requests == [("retrieve", {"op": "showConfig", "path": ["system"]})]


def test_show_root_uses_empty_path(router):
    router.config = {"system": {}}
    assert VyosClient(router).show("") == {"system": {}}
    assert router.requests[0][1]["path"] == []


def test_show_missing_path_is_none(router):
    assert VyosClient(router).show("firewall name WAN") is None


def test_show_propagates_other_errors(router):
    router.fail = {"retrieve": "Invalid path"}
    with pytest.raises(VyosApiError, match="Invalid path"):
        VyosClient(router).show("bogus")


def test_api_request_wraps_transport_errors():
    conn = MagicMock()
    conn.send_request.side_effect = ConnectionError("connection refused")
    with pytest.raises(VyosApiError, match="connection refused") as exc:
        VyosClient(conn).api_request("retrieve", {})
    assert exc.value.details == {"endpoint": "retrieve"}


def test_api_request_rejects_non_envelope():
    conn = MagicMock()
    conn.send_request.return_value = "<html>"
    with pytest.raises(VyosApiError):
        VyosClient(conn).api_request("retrieve", {})


def test_set_sends_one_configure_request(router):
    VyosClient(router).set("service ntp", {"server": {"time.example.com": {}}, "allow-client": {"address": "0.0.0.0/0"}})

    assert router.endpoints() == ["configure"]
    assert router.requests[0][1] == [
        {"op": "set", "path": ["service", "ntp", "server", "time.example.com"]},
        {"op": "set", "path": ["service", "ntp", "allow-client", "address"], "value": "0.0.0.0/0"},
    ]
    assert router.config == {
        "service": {"ntp": {"server": {"time.example.com": {}}, "allow-client": {"address": "0.0.0.0/0"}}}
    }


def test_delete_sends_single_operation(router):
    router.config = {"firewall": {"name": {"WAN": {"default-action": "drop"}}}}
    VyosClient(router).delete("firewall name WAN")

    assert router.requests == [("configure", {"op": "delete", "path": ["firewall", "name", "WAN"]})]
    assert router.config == {"firewall": {"name": {}}}


def test_save(router):
    VyosClient(router).save()
    assert router.requests == [("config-file", {"op": "save"})]


# container images
def test_parse_images_from_json():
    images = parse_images(
        [
            {"Id": "abc", "Names": ["docker.io/library/alpine:3.18.0"], "Size": 7630000},
            {"Id": "def", "Repository": "docker.io/mvance/unbound", "Tag": "1.17.1"},
            {"name": "localhost:5000/tool", "tag": "dev"},
        ]
    )
    assert [i.reference for i in images] == [
        "docker.io/library/alpine:3.18.0",
        "docker.io/mvance/unbound:1.17.1",
        "localhost:5000/tool:dev",
    ]
    assert images[0].id == "abc"
    assert images[0].size == "7630000"


def test_parse_images_registry_port_without_tag():
    (image,) = parse_images([{"Names": ["localhost:5000/tool"]}])
    assert (image.name, image.tag) == ("localhost:5000/tool", "latest")


def test_parse_images_from_table():
    images = parse_images(IMAGE_TABLE)
    assert [i.reference for i in images] == [
        "docker.io/library/alpine:3.18.0",
        "docker.io/mvance/unbound:1.17.1",
    ]
    assert images[0].as_dict() == {
        "name": "docker.io/library/alpine",
        "tag": "3.18.0",
        "id": "5e2b554c1c45",
        "created": "3 weeks ago",
        "size": "7.63 MB",
    }


def test_parse_images_empty():
    assert parse_images(None) == []
    assert parse_images([]) == []


def test_container_images_show_by_reference(router):
    router.images = ["docker.io/library/alpine:3.18.0", "docker.io/library/busybox:1.36"]
    images = VyosClient(router).container_images

    assert images.show("docker.io/library/busybox:1.36").id == "id1"
    assert images.show("docker.io/library/busybox:latest") is None


def test_container_images_show_untagged_means_latest(router):
    router.images = ["docker.io/library/alpine:latest", "docker.io/library/alpine:3.18.0"]
    image = VyosClient(router).container_images.show("docker.io/library/alpine")
    assert image.reference == "docker.io/library/alpine:latest"


def test_container_images_add_and_delete(router):
    images = VyosClient(router).container_images
    images.add("docker.io/library/alpine:3.18.0")
    images.delete("docker.io/library/alpine:3.18.0")

    assert router.requests == [
        ("container-image", {"op": "add", "name": "docker.io/library/alpine:3.18.0"}),
        ("container-image", {"op": "delete", "name": "docker.io/library/alpine:3.18.0"}),
    ]
    assert router.images == []


def test_container_images_hold_the_lock_for_every_call():
    client = MagicMock()
    client.api_request.return_value = []
    lock = MagicMock()
    images = ContainerImages(client, lock)

    images.show_all()
    images.show("x:1")
    images.add("x:1")
    images.delete("x:1")

    assert lock.__enter__.call_count == 4
    assert lock.__exit__.call_count == 4

