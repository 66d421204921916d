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
module: vyos_container
short_description: Manage containers on VyOS routers
version_added: "1.0.0"
author: tgnthump.vyos contributors
description:
  - Declares a container under C(container name <name>).
  - A container that differs from the declaration is replaced as a whole
    (delete and set in one C(/configure) request).
options:
  name:
    description:
      - Container name.
    type: str
    required: true
    aliases: [id]

  image:
    description:
      - Image reference; pull it first with M(tgnthump.vyos.vyos_container_image).
      - Required when C(state=present).
    type: str

  description:
    description:
      - Free text description.
    type: str

  host_network:
    description:
      - Share the host network namespace. Mutually exclusive with I(network).
    type: bool

  network:
    description:
      - Container network to attach to.
    type: dict
    suboptions:
      name:
        description: Name of a network defined under C(container network).
        type: str
        required: true
      address:
        description: Static address inside that network.
        type: str

  env:
    description:
      - Environment variables.
    type: dict

  ports:
    description:
      - Published ports.
    type: list
    elements: dict
    suboptions:
      name:
        description: Port mapping name.
        type: str
        required: true
      source:
        description: Port on the router.
        type: int
      destination:
        description: Port inside the container.
        type: int
      protocol:
        description: Transport protocol.
        type: str
        choices: [tcp, udp]

  volumes:
    description:
      - Bind mounts.
    type: list
    elements: dict
    suboptions:
      name:
        description: Volume name.
        type: str
        required: true
      source:
        description: Path on the router.
        type: str
      destination:
        description: Path inside the container.
        type: str
      mode:
        description: Access mode.
        type: str
        choices: [ro, rw]

  state:
    description:
      - Whether the container should be present, absent, or only read back.
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
  - Supports check mode and diff mode.

seealso:
  - module: tgnthump.vyos.vyos_container_image
  - module: tgnthump.vyos.vyos_config
"""

EXAMPLES = r"""
- name: Run unbound in a container
  tgnthump.vyos.vyos_container:
    name: dns
    image: docker.io/mvance/unbound:1.17.1
    network:
      name: services
      address: 172.20.0.53
    env:
      TZ: UTC
    ports:
      - name: dns
        source: 53
        destination: 53
        protocol: udp
    volumes:
      - name: conf
        source: /config/unbound
        destination: /opt/unbound/etc/unbound
        mode: ro

- name: Remove it again
  tgnthump.vyos.vyos_container:
    name: dns
    state: absent
"""

RETURN = r"""
changed:
  description: Whether the container was created, replaced or deleted.
  type: bool
  returned: always

commands:
  description: Operations sent to the router, rendered as CLI lines.
  type: list
  elements: str
  returned: always

container:
  description: Resource record as read back from (or written to) the router.
  type: dict
  returned: when state is present or gathered
"""

from ansible.module_utils.basic import AnsibleModule
from ansible_collections.tgnthump.vyos.plugins.module_utils import config_tree as ct
from ansible_collections.tgnthump.vyos.plugins.module_utils import vyos_common as vc
from ansible_collections.tgnthump.vyos.plugins.module_utils.errors import VyosError
from ansible_collections.tgnthump.vyos.plugins.module_utils.resources import (
    CONTAINER_FIELDS,
    ContainerResource,
    container_path,
    container_tree,
)

ARGUMENT_SPEC = dict(
    name=dict(type="str", required=True, aliases=["id"]),
    image=dict(type="str"),
    description=dict(type="str"),
    host_network=dict(type="bool"),
    network=dict(
        type="dict",
        options=dict(
            name=dict(type="str", required=True),
            address=dict(type="str"),
        ),
    ),
    env=dict(type="dict"),
    ports=dict(
        type="list",
        elements="dict",
        options=dict(
            name=dict(type="str", required=True),
            source=dict(type="int"),
            destination=dict(type="int"),
            protocol=dict(type="str", choices=["tcp", "udp"]),
        ),
    ),
    volumes=dict(
        type="list",
        elements="dict",
        options=dict(
            name=dict(type="str", required=True),
            source=dict(type="str"),
            destination=dict(type="str"),
            mode=dict(type="str", choices=["ro", "rw"]),
        ),
    ),
    state=dict(type="str", choices=["present", "absent", "gathered"], default="present"),
    save_when=vc.SAVE_WHEN_SPEC,
)


def run_module(module, resource) -> None:
    p = module.params
    path = container_path(p["name"])

    if p["state"] == "gathered":
        module.exit_json(
            changed=False, commands=[], container=resource.read(resource.import_state(p["name"]))
        )
        return

    found, current = resource.lookup(path)

    if p["state"] == "absent":
        if not found:
            vc.finish_module(module, changed=False, commands=[])
            return
        if not module.check_mode:
            resource.delete(p)
            vc.save_config(resource.client, p["save_when"], changed=True)
        vc.finish_module(module, changed=True, commands=[f"delete {path}"], before=current)
        return

    plan = {k: p[k] for k in CONTAINER_FIELDS}
    desired = container_tree(plan)
    record = dict(plan, id=p["name"])

    if found and ct.normalize(current) == ct.normalize(desired):
        vc.finish_module(module, changed=False, commands=[], container=record)
        return

    if found:
        batch = ct.build_update_batch(path, desired)
    else:
        batch = ct.build_set_batch(path, desired)

    if not module.check_mode:
        record = resource.update(plan) if found else resource.create(plan)
        vc.save_config(resource.client, p["save_when"], changed=True)

    vc.finish_module(
        module,
        changed=True,
        commands=ct.render_commands(batch),
        before=current if found else None,
        after=desired,
        container=record,
    )


def main() -> None:
    module = AnsibleModule(
        argument_spec=ARGUMENT_SPEC,
        mutually_exclusive=[["host_network", "network"]],
        required_if=[["state", "present", ["image"]]],
        supports_check_mode=True,
    )
    resource = ContainerResource(vc.get_client(module), log=module.debug)
    try:
        run_module(module, resource)
    except VyosError as err:
        vc.fail_from(module, err)


if __name__ == "__main__":
    main()
