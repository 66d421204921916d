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
name: vyos
short_description: HttpApi plugin for the VyOS HTTP configuration API
version_added: "1.0.0"
author: tgnthump.vyos contributors
description:
  - Sends requests to the VyOS HTTP API (C(/retrieve), C(/configure),
    C(/config-file), C(/container-image)).
  - Every request is a form POST carrying the JSON payload in C(data) and
    the API key in C(key).
  - Implements C(send_request) which is used by all tgnthump.vyos modules.
options:
  api_key:
    description:
      - Key configured under C(service https api keys) on the router.
    type: str
    env:
      - name: VYOS_API_KEY
    vars:
      - name: ansible_httpapi_vyos_api_key
notes:
  - Automatically loaded when
    C(ansible_network_os=tgnthump.vyos.vyos) and
    C(ansible_connection=ansible.netcommon.httpapi) are set.
"""

import json
from urllib.parse import urlencode

from ansible.errors import AnsibleConnectionFailure
from ansible.module_utils._text import to_text
from ansible.plugins.httpapi import HttpApiBase

BASE_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Accept": "application/json",
}


class HttpApi(HttpApiBase):
    """HTTP context for VyOS routers."""

    # ------------------------------------------------------------------ helpers
    def _encode(self, payload) -> str:
        key = self.get_option("api_key")
        if not key:
            raise AnsibleConnectionFailure(
                "No API key set, use ansible_httpapi_vyos_api_key or VYOS_API_KEY"
            )
        return urlencode({"data": json.dumps(payload), "key": key})

    @staticmethod
    def _decode(response_data) -> dict:
        raw = to_text(response_data.getvalue(), errors="surrogate_or_strict")
        try:
            return json.loads(raw)
        except ValueError:
            raise AnsibleConnectionFailure(f"Response was not valid JSON: {raw[:200]}")

    # ---------------------------------------------------------------- requests
    def send_request(self, endpoint, payload):
        """POST *payload* to */endpoint* and return the decoded API envelope."""
        path = "/" + endpoint.lstrip("/")
        self.connection.queue_message("vvvv", f"POST {path} {json.dumps(payload)}")

        _response, response_data = self.connection.send(
            path, self._encode(payload), method="POST", headers=BASE_HEADERS
        )
        result = self._decode(response_data)
        self.connection.queue_message("vvvv", f"{path} -> {json.dumps(result)}")
        return result

    def handle_httperror(self, exc):
        """Hand API error bodies back to the caller, raise on auth failures."""
        if exc.code in (401, 403):
            return False
        if exc.code in (400, 500):
            return exc
        return super().handle_httperror(exc)
