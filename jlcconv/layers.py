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
from dataclasses import dataclass
from functools import lru_cache

from .layer_rules import MATCH_RULES, NATIVE_CONVENTION, TIE_BREAK_ORDER


STANDARD_LAYERS = [
        'mechanical outline',
        'top copper',
        'top mask',
        'top silk',
        'top paste',
        'bottom copper',
        'bottom mask',
        'bottom silk',
        'bottom paste',
        'drill plated',
        'drill nonplated',
        'drill via',
        ]

COLOR_SILK_LAYERS = [
        'top colorsilk',
        'bottom colorsilk',
        ]


class NamingScheme:
    jlc = {
    'top copper':           'Gerber_TopLayer.GTL',
    'top mask':             'Gerber_TopSolderMaskLayer.GTS',
    'top silk':             'Gerber_TopSilkscreenLayer.GTO',
    'top paste':            'Gerber_TopPasteMaskLayer.GTP',
    'bottom copper':        'Gerber_BottomLayer.GBL',
    'bottom mask':          'Gerber_BottomSolderMaskLayer.GBS',
    'bottom silk':          'Gerber_BottomSilkscreenLayer.GBO',
    'bottom paste':         'Gerber_BottomPasteMaskLayer.GBP',
    'inner copper':         'Gerber_InnerLayer{layer_number}.G{layer_number}',
    'mechanical outline':   'Gerber_BoardOutlineLayer.GKO',
    'drill plated':         'Drill_PTH_Through.DRL',
    'drill nonplated':      'Drill_NPTH_Through.DRL',
    'drill via':            'Drill_PTH_Through_Via.DRL',
    'top colorsilk':        'Fabrication_ColorfulTopSilkscreen.FCTS',
    'bottom colorsilk':     'Fabrication_ColorfulBottomSilkscreen.FCBS',
    }


def inner_layer_role(number):
    """ Return the layer role of the inner copper layer with the given 1-based number, e.g. ``"inner_02 copper"``. """
    number = int(number)
    if number < 1:
        raise ValueError(f'Inner layer numbers start at 1, got {number}')
    return f'inner_{number:02d} copper'


def is_drill_role(role):
    return role.startswith('drill ')


def output_filename(role):
    """ Look up the canonical JLC filename for a layer role.

    :param role: Layer role as a ``"side use"`` :py:obj:`str`, e.g. ``"top copper"`` or ``"inner_02 copper"``.
    :rtype: :py:obj:`str`
    """
    if (m := re.fullmatch(r'inner_([0-9]+) copper', role)):
        return NamingScheme.jlc['inner copper'].format(layer_number=int(m[1]))

    try:
        return NamingScheme.jlc[role]
    except KeyError:
        raise ValueError(f'Unknown layer role {role!r}') from None


def identify_file(data):
    """ Identify file type from file contents. Returns either of the string constants :py:obj:`excellon` or
    :py:obj:`gerber`, or returns :py:obj:`None` if the file format is unclear.

    :param data: Start of the file as :py:obj:`str` or :py:obj:`bytes`
    :rtype: :py:obj:`str`
    """
    if isinstance(data, bytes):
        data = data.decode('utf-8', errors='replace')

    if 'M48' in data:
        return 'excellon'

    if 'G90' in data and ';LEADER:' in data: # allegro-style excellon without M48 header
        return 'excellon'

    if 'FSLAX' in data or 'FSTAX' in data:
        return 'gerber'

    return None


@dataclass(frozen=True)
class Rule:
    role: str
    regex: re.Pattern
    sniff: str = None

    def match(self, filename):
        return self.regex.fullmatch(filename)


@lru_cache(maxsize=None)
def compile_rules(convention):
    """ Compile the rule table of a convention from :py:obj:`~.layer_rules.MATCH_RULES`. Raises :py:obj:`KeyError` for
    conventions that do not exist.

    :rtype: :py:obj:`tuple` of :py:class:`Rule`
    """
    return tuple(Rule(role, re.compile(regex, re.IGNORECASE), *sniff)
                 for role, regex, *sniff in MATCH_RULES[convention])


def conventions():
    """ All known conventions in tie-break order. """
    return [conv for conv in TIE_BREAK_ORDER if conv in MATCH_RULES] + \
           sorted(conv for conv in MATCH_RULES if conv not in TIE_BREAK_ORDER)


def convention_roles(convention):
    """ Fixed layer roles that a convention can recognize, in :py:obj:`STANDARD_LAYERS` order. Parametric inner copper
    roles and the color silkscreen roles are not included. """
    roles = {rule.role for rule in compile_rules(convention)}
    return [role for role in STANDARD_LAYERS if role in roles]


@dataclass(frozen=True)
class Classification:
    """ Result of matching one filename against one convention.

    :ivar role: Layer role the file was matched to, or :py:obj:`None` if no rule matched.
    :ivar rule: Index of the matching rule in the convention's rule table, or :py:obj:`None`.
    """
    role: str = None
    rule: int = None

    @property
    def matched(self):
        return self.role is not None


UNMATCHED = Classification()


def classify(convention, filename, header=None):
    """ Classify a single file under the given convention. This function never fails for any filename.

    :param convention: Name of the convention, one of the keys of :py:obj:`~.layer_rules.MATCH_RULES`.
    :param filename: Bare filename, without any directory components.
    :param header: Optional callable returning the first few KiB of the file's content. Rules that require content
                   sniffing only consult it when given, and match on the filename alone otherwise.
    :rtype: :py:class:`Classification`
    """
    for index, rule in enumerate(compile_rules(convention)):
        if not (m := rule.match(filename)):
            continue

        if rule.sniff and header is not None and identify_file(header()) != rule.sniff:
            return UNMATCHED

        if rule.role == 'inner copper':
            if int(m[1]) < 1: # inner layers are numbered from 1
                return UNMATCHED
            return Classification(inner_layer_role(m[1]), index)
        return Classification(rule.role, index)

    return UNMATCHED


class DetectionError(ValueError):
    """ Raised by :py:meth:`Detection.require` when no unique convention could be determined. """

    def __init__(self, detection):
        self.detection = detection
        super().__init__(detection.describe())


@dataclass(frozen=True)
class Detection:
    """ Result of :py:func:`detect_convention`.

    :ivar convention: Detected convention, or :py:obj:`None` if detection failed.
    :ivar scores: :py:obj:`tuple` of ``(convention, matched file count)`` pairs in tie-break order.
    :ivar failure: :py:obj:`None` on success, ``"unknown"`` if no convention matched any file, or ``"ambiguous"`` if
                   several conventions tied for the best score.
    :ivar candidates: The tied conventions when detection was ambiguous.
    """
    convention: str = None
    scores: tuple = ()
    failure: str = None
    candidates: tuple = ()

    @property
    def ok(self):
        return self.failure is None

    def describe(self):
        score_str = ', '.join(f'{conv}: {count}' for conv, count in self.scores)
        if self.failure == 'unknown':
            return f'Cannot identify the EDA tool that exported these files, no known file names found ({score_str})'
        if self.failure == 'ambiguous':
            return (f'Cannot decide between EDA tools {", ".join(self.candidates)}, they match equally many files '
                    f'({score_str}). Please select one explicitly.')
        return f'Detected {self.convention} naming convention ({score_str})'

    def require(self):
        """ Return the detected convention or raise :py:class:`DetectionError`. """
        if not self.ok:
            raise DetectionError(self)
        return self.convention


def _counts_for_detection(convention, filename):
    result = classify(convention, filename)
    return result.matched and not compile_rules(convention)[result.rule].sniff


def detect_convention(filenames):
    """ Guess which EDA tool's naming convention a set of files follows by counting how many of the files each
    convention recognizes. The convention with the strictly highest positive count wins. Ties are only broken in
    favor of the native JLC convention, any other tie is reported as ambiguous. Matches of rules that need content
    sniffing are not counted, since detection only looks at filenames.

    :param filenames: Iterable of bare filenames.
    :rtype: :py:class:`Detection`
    """
    filenames = sorted(set(filenames))
    scores = tuple((conv, sum(_counts_for_detection(conv, fn) for fn in filenames)) for conv in conventions())

    best = max((count for _conv, count in scores), default=0)
    if best == 0:
        return Detection(scores=scores, failure='unknown')

    tied = tuple(conv for conv, count in scores if count == best)
    if len(tied) == 1:
        return Detection(tied[0], scores)

    if NATIVE_CONVENTION in tied:
        return Detection(NATIVE_CONVENTION, scores)

    return Detection(scores=scores, failure='ambiguous', candidates=tied)
