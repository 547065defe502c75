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

"""
jlcconv
=======

jlcconv renames the Gerber and Excellon files exported by a number of common EDA tools to the file names JLC's online
PCB order editor expects. It figures out which tool exported a set of files from their names, maps each file to its
layer, and writes the result into a directory or a zip file.
"""

__version__ = '0.3.0'

from .layers import classify, detect_convention, output_filename, Classification, Detection, DetectionError
from .plan import build_plan, ColorSilkscreenRequest, ConversionPlan
from .source import SourceFile, SourceSet, load_image
from .output import DirectorySink, ZipSink
