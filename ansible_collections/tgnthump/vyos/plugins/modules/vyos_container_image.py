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
module: vyos_container_image
short_description: Manage container images on VyOS routers
version_added: "1.0.0"
author: tgnthump.vyos contributors
description:
  - Pulls or removes a container image through the C(/container-image) API.
  - The image reference is the identity of the resource. Moving to a different
    reference is a replacement, requested with I(replaces).
options:
  name:
    description:
      - Image reference, e.g. C(docker.io/library/alpine:3.18.0).
      - A reference without a tag means C(:latest).
    type: str
    required: true
    aliases: [id]

  replaces:
    description:
      - Reference of an image this one supersedes.
      - When I(name) is missing and this image is present, the old image is
        removed and I(name) pulled in its place.
      - Ignored unless C(state=present).
    type: str

  state:
    description:
      - Whether the image should be present, absent, or only looked up.
    type: str
    choices: [present, absent, gathered]
    default: present

notes:
  - Requires C(ansible_connection=ansible.netcommon.httpapi) and
    C(ansible_network_os=tgnthump.vyos.vyos).
  - Image operations are not part of the configuration, so nothing is saved.

seealso:
  - module: tgnthump.vyos.vyos_container
"""

EXAMPLES = r"""
- name: Pull alpine
  tgnthump.vyos.vyos_container_image:
    name: docker.io/library/alpine:3.18.0

- name: Upgrade alpine
  tgnthump.vyos.vyos_container_image:
    name: docker.io/library/alpine:3.19.0
    replaces: docker.io/library/alpine:3.18.0

- name: Remove alpine
  tgnthump.vyos.vyos_container_image:
    name: docker.io/library/alpine:3.18.0
    state: absent
"""

RETURN = r"""
changed:
  description: Whether the image was pulled or removed.
  type: bool
  returned: always

image:
  description: Resource record (id, name) plus the image details reported by the router.
  type: dict
  returned: when the image exists

replaced:
  description: Reference of the image that was removed in favour of I(name).
  type: str
  returned: when an image was replaced
"""

from ansible.module_utils.basic import AnsibleModule
from ansible_collections.tgnthump.vyos.plugins.module_utils import vyos_common as vc
from ansible_collections.tgnthump.vyos.plugins.module_utils.errors import VyosError
from ansible_collections.tgnthump.vyos.plugins.module_utils.resources import (
    ContainerImageResource,
)

ARGUMENT_SPEC = dict(
    name=dict(type="str", required=True, aliases=["id"]),
    replaces=dict(type="str"),
    state=dict(type="str", choices=["present", "absent", "gathered"], default="present"),
)


def run_module(module, resource) -> None:
    p = module.params
    current = resource.read(resource.import_state(p["name"]))

    if p["state"] == "gathered":
        if current is None:
            module.fail_json(msg=f"No image exists with name {p['name']}")
        module.exit_json(changed=False, image=current)
        return

    if p["state"] == "absent":
        if current is not None and not module.check_mode:
            resource.delete(current)
        module.exit_json(changed=current is not None)
        return

    if current is not None:
        module.exit_json(changed=False, image=current)
        return

    record = {"id": p["name"], "name": p["name"]}
    old = resource.read(resource.import_state(p["replaces"])) if p["replaces"] else None
    if old is not None:
        if not module.check_mode:
            record = resource.update(record, old)
        module.exit_json(changed=True, image=record, replaced=old["name"])
        return

    if not module.check_mode:
        record = resource.create(record)
    module.exit_json(changed=True, image=record)


def main() -> None:
    module = AnsibleModule(argument_spec=ARGUMENT_SPEC, supports_check_mode=True)
    resource = ContainerImageResource(vc.get_client(module), log=module.debug)
    try:
        run_module(module, resource)
    except VyosError as err:
        vc.fail_from(module, err)


if __name__ == "__main__":
    main()
