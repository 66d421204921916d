# Copyright (C) 2025 tgnthump.vyos contributors
# This file is part of the tgnthump.vyos Ansible Collection
# SPDX-License-Identifier: GPL-3.0-or-later
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

DOCUMENTATION = r"""
---
module: vyos_config
short_description: Manage a configuration subtree on VyOS routers
version_added: "1.0.0"
author: tgnthump.vyos contributors
description:
  - Declares the configuration below a single VyOS config path as a JSON document.
  - When the path does not exist yet it is created; when it exists with a
    different value the whole subtree is deleted and set again in a single
    C(/configure) request.
  - C(state=gathered) imports the path and returns its current value without
    changing anything.
options:
  path:
    description:
      - Space separated configuration path, e.g. C(firewall name WAN).
      - Segments cannot contain spaces; there is no quoting.
    type: str
    required: true
    aliases: [id]

  value:
    description:
      - JSON document describing the subtree below I(path).
      - A dictionary or list is serialised automatically; a plain scalar has
        to be given as JSON text, e.g. C('"router1"').
      - Omitting it declares a valueless node.
    type: json
    required: false

  state:
    description:
      - Whether the subtree should be present, absent, or only read back.
    type: str
    choices: [present, absent, gathered]
    default: present

  save_when:
    description:
      - When to save the running configuration to the boot config.
    type: str
    choices: [never, changed, always]
    default: changed

notes:
  - Requires C(ansible_connection=ansible.netcommon.httpapi) and
    C(ansible_network_os=tgnthump.vyos.vyos).
  - Lists are addressed by index, C(["a", "b"]) becomes the children C(0) and C(1).
  - Supports check mode and diff mode.

seealso:
  - module: tgnthump.vyos.vyos_container
"""

EXAMPLES = r"""
- name: Declare a firewall ruleset
  tgnthump.vyos.vyos_config:
    path: firewall name WAN
    value:
      default-action: drop
      rule:
        "10":
          action: accept
          state:
            established: enable

- name: Set the host name
  tgnthump.vyos.vyos_config:
    path: system host-name
    value: '"router1"'

- name: Read a subtree back
  tgnthump.vyos.vyos_config:
    path: service ntp
    state: gathered
  register: ntp

- name: Remove the ruleset
  tgnthump.vyos.vyos_config:
    path: firewall name WAN
    state: absent
"""

RETURN = r"""
changed:
  description: Whether the subtree was created, replaced or deleted.
  type: bool
  returned: always

commands:
  description: Operations sent to the router, rendered as CLI lines.
  type: list
  elements: str
  returned: always
  sample: ["delete firewall name WAN", "set firewall name WAN default-action 'drop'"]

config:
  description: Resource record (id, path and value as JSON text).
  type: dict
  returned: when state is present or gathered

saved:
  description: Whether the configuration was saved afterwards.
  type: bool
  returned: when changed
"""

import json

from ansible.module_utils.basic import AnsibleModule
from ansible_collections.tgnthump.vyos.plugins.module_utils import config_tree as ct
from ansible_collections.tgnthump.vyos.plugins.module_utils import vyos_common as vc
from ansible_collections.tgnthump.vyos.plugins.module_utils.errors import VyosError
from ansible_collections.tgnthump.vyos.plugins.module_utils.resources import (
    ConfigResource,
)

ARGUMENT_SPEC = dict(
    path=dict(type="str", required=True, aliases=["id"]),
    value=dict(type="json"),
    state=dict(type="str", choices=["present", "absent", "gathered"], default="present"),
    save_when=vc.SAVE_WHEN_SPEC,
)


def _absent(module, resource, client, p) -> None:
    found, current = resource.lookup(p["path"])
    if not found:
        vc.finish_module(module, changed=False, commands=[])
        return

    commands = [f"delete {p['path']}"]
    if not module.check_mode:
        resource.delete(p)
        vc.save_config(client, p["save_when"], changed=True)
    vc.finish_module(module, changed=True, commands=commands, before=current)


def _gathered(module, resource) -> None:
    state = resource.import_state(module.params["path"])
    config = resource.read(state)
    module.exit_json(changed=False, commands=[], config=config)


def _present(module, resource, client, p) -> None:
    desired = ct.decode_value(p["value"])
    found, current = resource.lookup(p["path"])
    record = dict(id=p["path"], path=p["path"], value=json.dumps(desired))

    if found and ct.normalize(current) == ct.normalize(desired):
        module.exit_json(changed=False, commands=[], config=record)
        return

    if found:
        batch = ct.build_update_batch(p["path"], desired)
    else:
        batch = ct.build_set_batch(p["path"], desired)
    commands = ct.render_commands(batch)

    saved = False
    if not module.check_mode:
        record_in = dict(record, value=p["value"])
        (resource.update if found else resource.create)(record_in)
        saved = vc.save_config(client, p["save_when"], changed=True)

    vc.finish_module(
        module,
        changed=True,
        commands=commands,
        before=current if found else None,
        after=desired,
        config=record,
        saved=saved,
    )


def main() -> None:
    module = AnsibleModule(argument_spec=ARGUMENT_SPEC, supports_check_mode=True)
    p = module.params
    client = vc.get_client(module)
    resource = ConfigResource(client, log=module.debug)

    try:
        if p["state"] == "gathered":
            _gathered(module, resource)
        elif p["state"] == "absent":
            _absent(module, resource, client, p)
        else:
            _present(module, resource, client, p)
    except VyosError as err:
        vc.fail_from(module, err)


if __name__ == "__main__":
    main()
