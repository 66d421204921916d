# Copyright (C) 2025 tgnthump.vyos contributors
# This file is part of the tgnthump.vyos Ansible Collection
# SPDX-License-Identifier: GPL-3.0-or-later
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Exceptions raised by the tgnthump.vyos module utilities."""


class VyosError(Exception):
    """Base class; modules turn it into ``fail_json(msg=...)``."""

    def __init__(self, msg: str, **details):
        super().__init__(msg)
        self.msg = msg
        self.details = details


class MalformedValueError(VyosError):
    """A value could not be decoded into a configuration tree."""


class InvalidPathError(VyosError):
    """A configuration path or path segment cannot be expressed on the wire."""


class UnsupportedValueKind(VyosError):
    """A tree node is neither a scalar, a list nor a mapping."""


class NotFoundError(VyosError):
    pass


class ConflictError(VyosError):
    pass


class VyosApiError(VyosError):
    """The HTTP API reported a failure or could not be reached."""
