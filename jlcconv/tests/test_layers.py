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

import random

import pytest

from ..layers import *
from .utils import GERBER_CONTENT, EXCELLON_CONTENT


REFERENCE_SETS = {
        'kicad-6': ('kicad', {
            'board-F_Cu.gbr': 'top copper',
            'board-B_Cu.gbr': 'bottom copper',
            'board-In1_Cu.gbr': 'inner_01 copper',
            'board-In2_Cu.gbr': 'inner_02 copper',
            'board-F_Mask.gbr': 'top mask',
            'board-B_Mask.gbr': 'bottom mask',
            'board-F_Paste.gbr': 'top paste',
            'board-B_Paste.gbr': 'bottom paste',
            'board-F_Silkscreen.gbr': 'top silk',
            'board-B_Silkscreen.gbr': 'bottom silk',
            'board-Edge_Cuts.gbr': 'mechanical outline',
            'board-PTH.drl': 'drill plated',
            'board-NPTH.drl': 'drill nonplated',
            'board-job.gbrjob': None,
            'board-drl_map.pdf': None,
            }),
        'kicad-5': ('kicad', {
            'my-board-F.Cu.gbr': 'top copper',
            'my-board-B.Cu.gbr': 'bottom copper',
            'my-board-F.SilkS.gbr': 'top silk',
            'my-board-B.SilkS.gbr': 'bottom silk',
            'my-board-F.Mask.gbr': 'top mask',
            'my-board-Edge.Cuts.gbr': 'mechanical outline',
            'my-board.drl': 'drill plated',
            }),
        'kicad-bare': ('kicad', {
            'F_Cu.gbr': 'top copper',
            'B_Cu.gbr': 'bottom copper',
            'F_Silkscreen.gbr': 'top silk',
            'B_Silkscreen.gbr': 'bottom silk',
            'Edge_Cuts.gbr': 'mechanical outline',
            }),
        'protel': ('protel', {
            'board.GTL': 'top copper',
            'board.GBL': 'bottom copper',
            'board.G1': 'inner_01 copper',
            'board.GP2': 'inner_02 copper',
            'board.GTS': 'top mask',
            'board.GBS': 'bottom mask',
            'board.GTP': 'top paste',
            'board.GBP': 'bottom paste',
            'board.GTO': 'top silk',
            'board.GBO': 'bottom silk',
            'board.GKO': 'mechanical outline',
            'board.DRL': 'drill plated',
            'board-NPTH.DRL': 'drill nonplated',
            'board.REP': None,
            }),
        'protel-lowercase': ('protel', {
            'pcb.gtl': 'top copper',
            'pcb.gbl': 'bottom copper',
            'pcb.gm1': 'mechanical outline',
            'pcb.l3': 'inner_03 copper',
            'pcb.xln': 'drill plated',
            'pcb-nonplated.txt': 'drill nonplated',
            }),
        'jlc': ('jlc', {
            'Gerber_TopLayer.GTL': 'top copper',
            'Gerber_BottomLayer.GBL': 'bottom copper',
            'Gerber_InnerLayer1.G1': 'inner_01 copper',
            'Gerber_InnerLayer2.G2': 'inner_02 copper',
            'Gerber_TopSolderMaskLayer.GTS': 'top mask',
            'Gerber_BottomSolderMaskLayer.GBS': 'bottom mask',
            'Gerber_TopPasteMaskLayer.GTP': 'top paste',
            'Gerber_BottomPasteMaskLayer.GBP': 'bottom paste',
            'Gerber_TopSilkscreenLayer.GTO': 'top silk',
            'Gerber_BottomSilkscreenLayer.GBO': 'bottom silk',
            'Gerber_BoardOutlineLayer.GKO': 'mechanical outline',
            'Drill_PTH_Through.DRL': 'drill plated',
            'Drill_NPTH_Through.DRL': 'drill nonplated',
            'Drill_PTH_Through_Via.DRL': 'drill via',
            'Fabrication_ColorfulTopSilkscreen.FCTS': 'top colorsilk',
            'Fabrication_ColorfulBottomSilkscreen.FCBS': 'bottom colorsilk',
            'PCB_Order_Notice.txt': None,
            }),
        }


@pytest.mark.parametrize('reference', list(REFERENCE_SETS))
def test_classify_reference_sets(reference):
    convention, expected = REFERENCE_SETS[reference]
    for filename, role in expected.items():
        assert classify(convention, filename).role == role, filename


@pytest.mark.parametrize('reference', list(REFERENCE_SETS))
def test_detect_reference_sets(reference):
    convention, expected = REFERENCE_SETS[reference]
    detection = detect_convention(expected)
    assert detection.ok
    assert detection.convention == convention
    assert detection.require() == convention


def test_classify_is_case_insensitive():
    assert classify('kicad', 'BOARD-F_CU.GBR').role == 'top copper'
    assert classify('kicad', 'board-f.cu.gbr').role == 'top copper'
    assert classify('protel', 'BOARD.gtl').role == 'top copper'
    assert classify('jlc', 'gerber_toplayer.gtl').role == 'top copper'


def test_classify_never_fails():
    for convention in conventions():
        for name in ['', '.', 'no_extension', '....gbr', 'ünïcödé.GTL', 'a' * 1000, 'In0_Cu.gbr', 'board.G0']:
            result = classify(convention, name)
            assert isinstance(result, Classification)


def test_classify_inner_layers():
    assert classify('kicad', 'board-In7_Cu.gbr').role == 'inner_07 copper'
    assert classify('kicad', 'board-In0_Cu.gbr') == UNMATCHED
    assert classify('protel', 'board.G12').role == 'inner_12 copper'
    assert classify('jlc', 'Gerber_InnerLayer3.G3').role == 'inner_03 copper'
    # the number in the extension has to match the layer number
    assert classify('jlc', 'Gerber_InnerLayer3.G4') == UNMATCHED


def test_classify_first_rule_wins():
    result = classify('kicad', 'board-NPTH.drl')
    assert result.role == 'drill nonplated'
    assert result.matched
    assert 0 <= result.rule < len(compile_rules('kicad'))
    assert not classify('kicad', 'board.zip').matched


def test_classify_content_sniffing():
    assert classify('protel', 'board-RoundHoles.TXT').role == 'drill plated'
    assert classify('protel', 'board-RoundHoles.TXT', header=lambda: EXCELLON_CONTENT).role == 'drill plated'
    assert classify('protel', 'board-RoundHoles.TXT', header=lambda: b'Altium design rule check report') == UNMATCHED
    assert classify('protel', 'Status Report.Txt', header=lambda: 'Design rule check: OK') == UNMATCHED
    # filename rules never look at the contents
    assert classify('protel', 'board.GTL', header=lambda: b'garbage').role == 'top copper'


def test_identify_file():
    assert identify_file(GERBER_CONTENT) == 'gerber'
    assert identify_file(EXCELLON_CONTENT) == 'excellon'
    assert identify_file(EXCELLON_CONTENT.decode()) == 'excellon'
    assert identify_file(';LEADER: 12\nG90\n') == 'excellon'
    assert identify_file(b'\xff\xfe\x00 nothing to see here') is None


def test_output_filename():
    assert output_filename('top copper') == 'Gerber_TopLayer.GTL'
    assert output_filename('drill nonplated') == 'Drill_NPTH_Through.DRL'
    assert output_filename('inner_02 copper') == 'Gerber_InnerLayer2.G2'
    assert output_filename(inner_layer_role(12)) == 'Gerber_InnerLayer12.G12'
    assert output_filename('bottom colorsilk') == 'Fabrication_ColorfulBottomSilkscreen.FCBS'

    with pytest.raises(ValueError):
        output_filename('top fab')
    with pytest.raises(ValueError):
        inner_layer_role(0)


def test_output_filenames_are_unique():
    roles = STANDARD_LAYERS + COLOR_SILK_LAYERS + [inner_layer_role(n) for n in range(1, 33)]
    names = [output_filename(role) for role in roles]
    assert len(set(names)) == len(names)


def test_convention_roles():
    assert convention_roles('jlc') == STANDARD_LAYERS
    assert 'drill via' not in convention_roles('kicad')
    assert 'drill via' not in convention_roles('protel')
    assert convention_roles('kicad')[0] == 'mechanical outline'
    for convention in conventions():
        assert not any('inner' in role or 'colorsilk' in role for role in convention_roles(convention))


def test_detect_unknown():
    detection = detect_convention(['README.md', 'board.kicad_pcb', 'photo.jpg'])
    assert not detection.ok
    assert detection.failure == 'unknown'
    assert detection.convention is None
    assert all(count == 0 for _conv, count in detection.scores)
    with pytest.raises(DetectionError) as excinfo:
        detection.require()
    assert excinfo.value.detection is detection

    assert detect_convention([]).failure == 'unknown'


def test_detect_ambiguous():
    detection = detect_convention(['a-F_Cu.gbr', 'b.GTL'])
    assert detection.failure == 'ambiguous'
    assert detection.candidates == ('kicad', 'protel')
    assert dict(detection.scores) == {'jlc': 0, 'kicad': 1, 'protel': 1}
    assert 'kicad' in detection.describe() and 'protel' in detection.describe()
    with pytest.raises(ValueError):
        detection.require()


def test_detect_prefers_native_on_tie():
    # Protel extensions also match most JLC file names
    names = ['Gerber_TopLayer.GTL', 'Gerber_BottomLayer.GBL', 'Gerber_BoardOutlineLayer.GKO']
    detection = detect_convention(names)
    assert dict(detection.scores) == {'jlc': 3, 'kicad': 0, 'protel': 3}
    assert detection.convention == 'jlc'


def test_detect_highest_score_wins():
    names = ['board-F_Cu.gbr', 'board-B_Cu.gbr', 'board-NPTH.drl', 'board.GTL']
    detection = detect_convention(names)
    assert detection.convention == 'kicad'
    assert detection.scores[0][0] == 'jlc'
    assert 'kicad' in detection.describe()


def test_detect_is_deterministic():
    names = list(REFERENCE_SETS['protel'][1]) + list(REFERENCE_SETS['kicad-5'][1])
    reference = detect_convention(names)
    rng = random.Random(0)
    for _i in range(20):
        rng.shuffle(names)
        assert detect_convention(names) == reference


JLC_EXPORT = [
    'Gerber_TopLayer.GTL',
    'Gerber_BottomLayer.GBL',
    'Gerber_TopSolderMaskLayer.GTS',
    'Gerber_BottomSolderMaskLayer.GBS',
    'Gerber_BoardOutlineLayer.GKO',
    'Drill_PTH_Through.DRL',
    'Drill_NPTH_Through.DRL',
    'Drill_PTH_Through_Via.DRL',
    ]

INCIDENTAL_SETS = {
        'jlc': JLC_EXPORT + ['How-to-order-PCB.txt', 'PCB_Order_Notice.txt', 'BOM_Board.csv'],
        'kicad': REFERENCE_SETS['kicad-bare'][1].keys() | {
            'board.kicad_pcb', 'board.kicad_pro', 'board-job.gbrjob', 'README.txt', 'fab-notes.txt', '.DS_Store'},
        'protel': ['board.GTL', 'board.GBL', 'board.GTS', 'board.GKO', 'board.DRL',
                   'Status Report.Txt', 'board-drill-report.txt', 'README.txt', 'board.PcbDoc', 'board.REP'],
        }


@pytest.mark.parametrize('convention', list(INCIDENTAL_SETS))
def test_detect_with_incidental_files(convention):
    detection = detect_convention(INCIDENTAL_SETS[convention])
    assert detection.ok
    assert detection.convention == convention


def test_detect_ignores_content_sniffing_rules():
    # .txt drills only count once their contents have been checked, which detection never does
    detection = detect_convention(JLC_EXPORT + ['How-to-order-PCB.txt'])
    assert detection.convention == 'jlc'
    assert dict(detection.scores) == {'jlc': 8, 'kicad': 3, 'protel': 8}

    assert detect_convention(['README.txt', 'notes.txt']).failure == 'unknown'
    assert classify('protel', 'README.txt').matched
