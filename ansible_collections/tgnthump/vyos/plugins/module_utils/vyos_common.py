# Copyright (C) 2025 tgnthump.vyos contributors
# This file is part of the tgnthump.vyos Ansible Collection
# SPDX-License-Identifier: GPL-3.0-or-later
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Core helper module used by all vyos_* Ansible modules.
# It provides:
#   • client factory (persistent httpapi connection)
#   • "save" helper
#   • result helpers (check mode, diff, error reporting)

import json

from ansible.module_utils.connection import Connection
from ansible_collections.tgnthump.vyos.plugins.module_utils.errors import VyosError
from ansible_collections.tgnthump.vyos.plugins.module_utils.vyos_api import VyosClient

SAVE_WHEN_SPEC = dict(
    type="str", choices=["never", "changed", "always"], default="changed"
)


def get_client(module) -> VyosClient:
    return VyosClient(Connection(module._socket_path))


# helper (save)
def save_config(client: VyosClient, save_when: str, changed: bool) -> bool:
    """Persist the running config depending on *save_when*."""
    if save_when == "always" or (save_when == "changed" and changed):
        client.save()
        return True
    return False


# result helpers
def fail_from(module, err: VyosError, **result) -> None:
    module.fail_json(msg=err.msg, **dict(result, **err.details))


def as_json(value) -> str:
    return json.dumps(value, indent=2, sort_keys=True)


def finish_module(module, changed: bool, commands: list[str], before=None, after=None, **result):
    """exit_json with *commands* and, in diff mode, a before/after pair."""
    if module._diff and changed:
        result["diff"] = {
            "before": "" if before is None else as_json(before),
            "after": "" if after is None else as_json(after),
        }
    module.exit_json(changed=changed, commands=commands, **result)
