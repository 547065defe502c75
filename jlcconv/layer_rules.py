#!/usr/bin/env python
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

# Each convention maps to an ordered list of (layer role, filename regex) rules, optionally followed by the file type
# that content sniffing must confirm. Regexes are applied with re.fullmatch and re.IGNORECASE, first match wins. Within
# one convention no two rules may match the same filename, see tests/test_layer_rules.py.
#
# Rules with a sniff type do not count towards auto-detection, since their filename pattern alone also matches
# incidental files such as reports and READMEs.
#
# "inner copper" rules must capture the layer number in their first group.

_KICAD_PREFIX = r'(?:.*-)?'

MATCH_RULES = {
'kicad': [
    ('top copper',          _KICAD_PREFIX + r'F[._]Cu\.gbr'),
    ('bottom copper',       _KICAD_PREFIX + r'B[._]Cu\.gbr'),
    ('inner copper',        _KICAD_PREFIX + r'In([0-9]+)[._]Cu\.gbr'),
    ('top mask',            _KICAD_PREFIX + r'F[._]Mask\.gbr'),
    ('bottom mask',         _KICAD_PREFIX + r'B[._]Mask\.gbr'),
    ('top paste',           _KICAD_PREFIX + r'F[._]Paste\.gbr'),
    ('bottom paste',        _KICAD_PREFIX + r'B[._]Paste\.gbr'),
    ('top silk',            _KICAD_PREFIX + r'F[._]Silk(?:S|screen)\.gbr'),
    ('bottom silk',         _KICAD_PREFIX + r'B[._]Silk(?:S|screen)\.gbr'),
    ('mechanical outline',  _KICAD_PREFIX + r'Edge[._]Cuts\.gbr'),
    ('drill nonplated',     _KICAD_PREFIX + r'NPTH\.drl'),
    ('drill plated',        _KICAD_PREFIX + r'PTH\.drl'),
    # merged PTH/NPTH export, anything that is not one of the two split files above
    ('drill plated',        r'(?!' + _KICAD_PREFIX + r'N?PTH\.drl$).*\.drl'),
    ],

'protel': [
    ('top copper',          r'.*\.gtl'),
    ('bottom copper',       r'.*\.gbl'),
    ('top mask',            r'.*\.gts'),
    ('bottom mask',         r'.*\.gbs'),
    ('top paste',           r'.*\.gtp'),
    ('bottom paste',        r'.*\.gbp'),
    ('top silk',            r'.*\.gto'),
    ('bottom silk',         r'.*\.gbo'),
    ('inner copper',        r'.*\.(?:gp?|l)([0-9]+)'),
    ('mechanical outline',  r'.*\.(?:gko|gm1|outline|oln)'),
    ('drill nonplated',     r'.*(?:npth|non-?plated)\.drl'),
    ('drill plated',        r'(?!.*(?:npth|non-?plated)\.drl$).*\.(?:drl|xln)'),
    # Altium likes to export drill files as .txt, next to all kinds of reports also ending in .txt.
    ('drill nonplated',     r'.*(?:npth|non-?plated)\.txt', 'excellon'),
    ('drill plated',        r'(?!.*(?:npth|non-?plated)\.txt$).*\.txt', 'excellon'),
    ],

'jlc': [
    ('top copper',          r'Gerber_TopLayer\.GTL'),
    ('bottom copper',       r'Gerber_BottomLayer\.GBL'),
    ('inner copper',        r'Gerber_InnerLayer([0-9]+)\.G\1'),
    ('top mask',            r'Gerber_TopSolderMaskLayer\.GTS'),
    ('bottom mask',         r'Gerber_BottomSolderMaskLayer\.GBS'),
    ('top paste',           r'Gerber_TopPasteMaskLayer\.GTP'),
    ('bottom paste',        r'Gerber_BottomPasteMaskLayer\.GBP'),
    ('top silk',            r'Gerber_TopSilkscreenLayer\.GTO'),
    ('bottom silk',         r'Gerber_BottomSilkscreenLayer\.GBO'),
    ('mechanical outline',  r'Gerber_BoardOutlineLayer\.GKO'),
    ('drill plated',        r'Drill_PTH_Through\.DRL'),
    ('drill nonplated',     r'Drill_NPTH_Through\.DRL'),
    ('drill via',           r'Drill_PTH_Through_Via\.DRL'),
    ('top colorsilk',       r'Fabrication_ColorfulTopSilkscreen\.FCTS'),
    ('bottom colorsilk',    r'Fabrication_ColorfulBottomSilkscreen\.FCBS'),
    ],
}

# Auto-detection ties are only broken in favor of the native convention. The order below is used to report scores and
# ambiguous candidates reproducibly.
NATIVE_CONVENTION = 'jlc'
TIE_BREAK_ORDER = ('jlc', 'kicad', 'protel')
