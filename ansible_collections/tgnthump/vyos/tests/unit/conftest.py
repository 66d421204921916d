# Copyright (C) 2025 tgnthump.vyos contributors
# This file is part of the tgnthump.vyos Ansible Collection
# SPDX-License-Identifier: GPL-3.0-or-later

import copy
from unittest.mock import patch

import pytest

from ansible_collections.tgnthump.vyos.plugins.module_utils import vyos_common


def _ok(data=None):
    return {"success": True, "data": data, "error": None}


def _err(msg):
    return {"success": False, "data": None, "error": msg}


class FakeRouter:
    """In-memory VyOS HTTP API answering send_request() like the httpapi plugin."""

    def __init__(self, config=None, images=None, fail=None):
        self.config = config if config is not None else {}
        self.images = list(images or [])
        self.fail = fail or {}
        self.requests = []

    def send_request(self, endpoint, payload):
        self.requests.append((endpoint, copy.deepcopy(payload)))
        if endpoint in self.fail:
            return _err(self.fail[endpoint])
        return getattr(self, "_" + endpoint.replace("-", "_"))(payload)

    def endpoints(self):
        return [endpoint for endpoint, _payload in self.requests]

    # /retrieve
    def _retrieve(self, payload):
        node = self.config
        for seg in payload["path"]:
            if not isinstance(node, dict) or seg not in node:
                return _err("Configuration under specified path is empty\n")
            node = node[seg]
        return _ok(copy.deepcopy(node))

    # /configure
    def _configure(self, payload):
        for op in payload if isinstance(payload, list) else [payload]:
            *parents, last = op["path"]
            node = self.config
            for seg in parents:
                if not isinstance(node.get(seg), dict):
                    if op["op"] == "delete":
                        return _err("Nothing to delete")
                    node[seg] = {}
                node = node[seg]
            if op["op"] == "delete":
                if last not in node:
                    return _err("Nothing to delete")
                del node[last]
            elif "value" in op:
                node[last] = op["value"]
            else:
                node.setdefault(last, {})
        return _ok()

    # /config-file
    def _config_file(self, payload):
        return _ok("Saving configuration to '/config/config.boot'...\nDone\n")

    # /container-image
    def _container_image(self, payload):
        if payload["op"] == "show":
            return _ok([{"Id": f"id{i}", "Names": [ref]} for i, ref in enumerate(self.images)])
        if payload["op"] == "add":
            self.images.append(payload["name"])
            return _ok()
        if payload["name"] not in self.images:
            return _err(f"image not known: {payload['name']}")
        self.images.remove(payload["name"])
        return _ok()


class AnsibleExitJson(Exception):
    pass


class AnsibleFailJson(Exception):
    pass


class FakeModule:
    def __init__(self, params, check_mode=False, diff=False):
        self.params = params
        self.check_mode = check_mode
        self._diff = diff
        self._socket_path = "/tmp/fake-socket"
        self.debug_messages = []

    def debug(self, msg):
        self.debug_messages.append(msg)

    def exit_json(self, **kwargs):
        kwargs.setdefault("changed", False)
        raise AnsibleExitJson(kwargs)

    def fail_json(self, **kwargs):
        kwargs["failed"] = True
        raise AnsibleFailJson(kwargs)


def module_params(argument_spec, **args):
    return {k: args.get(k, spec.get("default")) for k, spec in argument_spec.items()}


@pytest.fixture
def router():
    return FakeRouter()


@pytest.fixture
def run_module():
    """Run ``mod.main()`` against a FakeRouter and return the result dict."""

    def _run(mod, router, check_mode=False, diff=False, **args):
        fake = FakeModule(module_params(mod.ARGUMENT_SPEC, **args), check_mode, diff)
        with patch.object(mod, "AnsibleModule", return_value=fake), patch.object(
            vyos_common, "Connection", return_value=router
        ):
            with pytest.raises((AnsibleExitJson, AnsibleFailJson)) as exc:
                mod.main()
        return exc.value.args[0]

    return _run
