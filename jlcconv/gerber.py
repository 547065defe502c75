#! /usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright 2025 The jlcconv authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

"""
Textual fixups that make Gerber files from other EDA tools look like JLC's own exports to the fabrication host. These
only touch comments and aperture select commands, they do not parse the Gerber graphics.
"""

import re
from datetime import datetime

from .layers import is_drill_role


HEADER_TEMPLATE = 'G04 EasyEDA Pro v2.2.42.2, {timestamp}*\nG04 Gerber Generator version 0.3*\n'

_APERTURE_SELECT_RE = re.compile(r'D([0-9]{2,4})\*')


def _decode(data):
    return data.decode('utf-8', errors='surrogateescape')

def _encode(text):
    return text.encode('utf-8', errors='surrogateescape')


def add_header(data, timestamp=None):
    """ Prepend the generator header comment and normalize line endings to ``\\n``.

    :param data: Gerber file contents as :py:obj:`bytes`
    :param timestamp: :py:class:`~datetime.datetime` to put into the header. Defaults to the current local time.
    :rtype: :py:obj:`bytes`
    """
    timestamp = timestamp or datetime.now()
    header = HEADER_TEMPLATE.format(timestamp=timestamp.strftime('%Y-%m-%d %H:%M:%S'))
    return _encode(header + _decode(data).replace('\r\n', '\n'))


def convert_kicad_apertures(data):
    """ KiCad selects apertures with bare ``Dnn*`` commands. Rewrite these to the older ``G54Dnn*`` form. Only lines
    holding nothing but an aperture select are touched, so D01-D03 operations and ``%ADD`` definitions stay as they are.

    :param data: Gerber file contents as :py:obj:`bytes`
    :rtype: :py:obj:`bytes`
    """
    out = []
    for line in _decode(data).split('\n'):
        stripped = line.rstrip('\r')
        if (m := _APERTURE_SELECT_RE.fullmatch(stripped)) and int(m[1]) >= 10:
            line = 'G54' + line
        out.append(line)
    return _encode('\n'.join(out))


def fixups_for(convention, timestamp=None):
    """ Return the list of content fixups for files of the given convention. Each fixup is a callable taking
    ``(role, data)`` and returning the new data. Drill files are passed through unchanged. """

    def header(role, data):
        return data if is_drill_role(role) else add_header(data, timestamp=timestamp)

    def apertures(role, data):
        return data if is_drill_role(role) else convert_kicad_apertures(data)

    if convention == 'kicad':
        return [header, apertures]
    return [header]
