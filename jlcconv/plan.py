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

import re
from dataclasses import dataclass, field

from .layers import classify, convention_roles, conventions, detect_convention, output_filename, Detection


@dataclass(frozen=True)
class ColorSilkscreenRequest:
    """ A colorful silkscreen image to include in the output for one board side.

    :ivar side: ``"top"`` or ``"bottom"``
    :ivar data: Image file contents as :py:obj:`bytes`
    """
    side: str
    data: bytes = field(repr=False)

    def __post_init__(self):
        if self.side not in ('top', 'bottom'):
            raise ValueError(f'Color silkscreen side must be "top" or "bottom", not {self.side!r}')

    @property
    def role(self):
        return f'{self.side} colorsilk'


@dataclass(frozen=True)
class PlanEntry:
    """ One output file of a :py:class:`ConversionPlan`.

    :ivar role: Layer role of this file.
    :ivar filename: Output file name in the JLC naming convention.
    :ivar source: :py:class:`~.source.SourceFile` this entry is copied from, or :py:obj:`None` for entries with inline
                  data such as color silkscreen images.
    :ivar data: Inline content, or :py:obj:`None`.
    :ivar fixups: Content transforms applied by :py:meth:`read`, see :py:func:`~.gerber.fixups_for`.
    """
    role: str
    filename: str
    source: object = None
    data: bytes = field(default=None, repr=False)
    fixups: tuple = field(default=(), repr=False)

    @property
    def source_name(self):
        return self.source.name if self.source is not None else '<inline>'

    def read(self):
        data = self.data if self.data is not None else self.source.read()
        for fixup in self.fixups:
            data = fixup(self.role, data)
        return data


@dataclass(frozen=True)
class DuplicateLayer:
    """ Several source files were classified as the same layer. Only the first one is used. """
    role: str
    sources: tuple

    kind = 'duplicate'

    @property
    def chosen(self):
        return self.sources[0]

    def __str__(self):
        names = ', '.join(src.name for src in self.sources)
        return f'Multiple files found for {self.role} layer: {names}. Using {self.chosen.name}.'


@dataclass(frozen=True)
class UnmatchedFile:
    """ A source file did not match any layer of the convention. It is not copied to the output. """
    source: object

    kind = 'unmatched'

    def __str__(self):
        return f'Ignoring {self.source.name}, it does not look like any known layer.'


@dataclass(frozen=True)
class MissingLayer:
    """ No source file was found for a layer. """
    role: str

    kind = 'missing'

    def __str__(self):
        return f'No file found for {self.role} layer ({output_filename(self.role)}).'


@dataclass(frozen=True)
class ConversionPlan:
    """ The result of classifying a set of files: which file goes where, and what went wrong along the way.

    :ivar convention: Naming convention the sources were classified under.
    :ivar entries: :py:obj:`tuple` of :py:class:`PlanEntry` in output order.
    :ivar warnings: :py:obj:`tuple` of :py:class:`DuplicateLayer` and :py:class:`UnmatchedFile` warnings, ordered by
                    the position of the first affected file in the input.
    :ivar missing: :py:obj:`tuple` of :py:class:`MissingLayer` notices in :py:obj:`~.layers.STANDARD_LAYERS` order.
    :ivar ignored: Source files dropped by an ``"ignore"`` override.
    """
    convention: str
    entries: tuple = ()
    warnings: tuple = ()
    missing: tuple = ()
    ignored: tuple = ()

    @property
    def all_warnings(self):
        return self.warnings + self.missing

    @property
    def filenames(self):
        return [entry.filename for entry in self.entries]

    @property
    def roles(self):
        return [entry.role for entry in self.entries]

    def get(self, role, default=None):
        for entry in self.entries:
            if entry.role == role:
                return entry
        return default

    def __contains__(self, role):
        return self.get(role) is not None

    def __getitem__(self, role):
        if (entry := self.get(role)) is None:
            raise KeyError(role)
        return entry

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)

    def format_layer_map(self):
        lines = [f'  Naming convention: {self.convention}']

        for entry in self.entries:
            lines.append(f'    {entry.role + ":":<20} {entry.source_name} -> {entry.filename}')

        for notice in self.missing:
            lines.append(f'    {notice.role + ":":<20} <not found>')

        unmatched = [w.source.name for w in self.warnings if w.kind == 'unmatched']
        if unmatched:
            lines.append(f'  Unmatched files: {", ".join(unmatched)}')
        if self.ignored:
            lines.append(f'  Ignored files: {", ".join(src.name for src in self.ignored)}')
        return '\n'.join(lines)


def _check_overrides(overrides):
    for expr, role in overrides.items():
        try:
            re.compile(expr)
        except re.error as e:
            raise ValueError(f'Invalid filename regex {expr!r} in layer overrides: {e}') from e

        if role != 'ignore':
            output_filename(role)


def build_plan(files, convention, color_requests=(), overrides=None, sniff_content=True, fixups=()):
    """ Classify a list of source files under a naming convention and work out their output names.

    :param files: :py:obj:`list` of :py:class:`~.source.SourceFile` in enumeration order. When several files map to
                  the same layer, the first one in this list wins.
    :param convention: Naming convention name, see :py:obj:`~.layer_rules.MATCH_RULES`.
    :param color_requests: Iterable of :py:class:`ColorSilkscreenRequest`. These are added to the plan directly, and
                           replace any classified file with the same output name.
    :param overrides: :py:obj:`dict` mapping filename regexes to layer roles, or to the string ``"ignore"`` to drop the
                      file. Overrides take precedence over the built-in rules. When several overrides match one file,
                      the last one wins.
    :param sniff_content: Allow rules that need content sniffing to look at the file header.
    :param fixups: Content transforms to attach to every classified entry, see :py:func:`~.gerber.fixups_for`.
    :rtype: :py:class:`ConversionPlan`
    """
    files = list(files)
    overrides = overrides or {}
    _check_overrides(overrides)

    groups = {}
    unmatched = []
    ignored = []
    for index, src in enumerate(files):
        role = classify(convention, src.name, header=(src.header if sniff_content else None)).role

        for expr, layer in overrides.items():
            if re.fullmatch(expr, src.name):
                role = layer

        if role == 'ignore':
            ignored.append(src)
        elif role is None:
            unmatched.append((index, UnmatchedFile(src)))
        else:
            groups.setdefault(role, []).append((index, src))

    entries = []
    warnings = list(unmatched)
    for role, members in groups.items():
        index, src = members[0]
        entries.append((index, PlanEntry(role, output_filename(role), src, fixups=tuple(fixups))))
        if len(members) > 1:
            warnings.append((index, DuplicateLayer(role, tuple(src for _i, src in members))))

    entries = [entry for _index, entry in sorted(entries, key=lambda e: e[0])]
    warnings = [warning for _index, warning in sorted(warnings, key=lambda w: w[0])]

    for request in color_requests:
        entry = PlanEntry(request.role, output_filename(request.role), data=request.data)
        entries = [e for e in entries if e.filename != entry.filename] + [entry]

    missing = [MissingLayer(role) for role in convention_roles(convention) if role not in groups]

    return ConversionPlan(convention, tuple(entries), tuple(warnings), tuple(missing), tuple(ignored))


def resolve_convention(filenames, eda='auto'):
    """ Pick the naming convention for a conversion run. With ``eda="auto"`` the convention is detected from the
    filenames, otherwise the given convention is used as-is.

    :rtype: :py:class:`~.layers.Detection`
    """
    if eda == 'auto':
        return detect_convention(filenames)

    if eda not in conventions():
        raise ValueError(f'Unknown EDA convention {eda!r}, expected one of auto, {", ".join(conventions())}')
    return Detection(eda)
