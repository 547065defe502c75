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

GERBER_CONTENT = b'%FSLAX46Y46*%\n%MOMM*%\n%ADD10C,0.100000*%\nD10*\nX0Y0D02*\nX1000000Y0D01*\nM02*\n'
EXCELLON_CONTENT = b'M48\nMETRIC\nT1C0.800\n%\nT1\nX10.0Y10.0\nM30\n'

KICAD_BOARD = ['F_Cu.gbr', 'B_Cu.gbr', 'F_Silkscreen.gbr', 'B_Silkscreen.gbr', 'Edge_Cuts.gbr']


def content_for(name):
    if name.lower().endswith(('.drl', '.txt', '.xln')):
        return EXCELLON_CONTENT
    return GERBER_CONTENT
