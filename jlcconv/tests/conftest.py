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

import io

import pytest
from PIL import Image

from ..source import SourceFile
from .utils import content_for


@pytest.fixture()
def board_dir(tmp_path):
    """ Factory writing the given files into a fresh input directory. Takes either a list of names, in which case
    plausible Gerber or Excellon content is generated, or a dict mapping names to contents. """
    def make(files, subdir='input'):
        directory = tmp_path / subdir
        directory.mkdir(parents=True, exist_ok=True)
        if not isinstance(files, dict):
            files = {name: content_for(name) for name in files}
        for name, data in files.items():
            (directory / name).write_bytes(data)
        return directory
    return make


@pytest.fixture()
def sources(board_dir):
    """ Factory returning :py:class:`SourceFile` objects for the given names, in exactly the given order. """
    def make(*names, subdir='input'):
        directory = board_dir(names, subdir=subdir)
        return [SourceFile.from_path(directory / name) for name in names]
    return make


@pytest.fixture()
def png_bytes():
    buf = io.BytesIO()
    Image.new('RGB', (16, 8), (255, 0, 0)).save(buf, format='PNG')
    return buf.getvalue()
