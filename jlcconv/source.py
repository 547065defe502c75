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
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from zipfile import ZipFile, is_zipfile

from PIL import Image, UnidentifiedImageError


HEADER_SIZE = 16384


@dataclass(frozen=True)
class SourceFile:
    """ One input file.

    :ivar name: Bare file name, used for classification.
    :ivar path: Path of the file on disk.
    :ivar size: File size in bytes at enumeration time.
    """
    name: str
    path: Path
    size: int = field(default=0, compare=False)

    @classmethod
    def from_path(kls, path):
        path = Path(path)
        return kls(path.name, path, path.stat().st_size)

    def read(self):
        return self.path.read_bytes()

    def header(self):
        """ Return the first :py:obj:`HEADER_SIZE` bytes of this file for content sniffing. """
        with open(self.path, 'rb') as f:
            return f.read(HEADER_SIZE)

    def __str__(self):
        return self.name


def list_directory(path, recursive=False):
    """ List all regular files inside a directory, sorted by their path relative to it. Hidden files and macOS
    archive metadata are skipped.

    :param path: Directory to enumerate.
    :param recursive: Also descend into sub-directories.
    :rtype: :py:obj:`list` of :py:class:`SourceFile`
    """
    directory = Path(path)
    if not directory.exists():
        raise FileNotFoundError(f'Input path {directory} does not exist')
    if not directory.is_dir():
        raise NotADirectoryError(f'{directory} is not a directory')

    files = directory.glob('**/*') if recursive else directory.iterdir()
    files = [p for p in files if p.is_file() and not _is_metadata(p.relative_to(directory))]
    files.sort(key=lambda p: p.relative_to(directory).as_posix())
    return [SourceFile.from_path(p) for p in files]


def _is_metadata(relpath):
    """ Hidden files and macOS resource forks (``__MACOSX/._foo``, ``.DS_Store``) that archivers leave around. """
    return any(part.startswith('.') or part == '__MACOSX' for part in relpath.parts)


class SourceSet:
    """ Files of one board, either read from a directory or extracted from a zip file. Use as a context manager when
    opening zip files so the temporary extraction directory is cleaned up afterwards.

    :ivar files: :py:obj:`list` of :py:class:`SourceFile` in enumeration order.
    :ivar original_path: Path of the directory or zip file the files were loaded from.
    :ivar was_zipped: True if the files were extracted from a zip file.
    """

    def __init__(self, files, original_path=None, was_zipped=False, tmpdir=None):
        self.files = list(files)
        self.original_path = original_path
        self.was_zipped = was_zipped
        self.tmpdir = tmpdir

    @classmethod
    def open(kls, path):
        """ Load the files from a directory or a zip file.

        :param path: Path to a directory or zip file
        :rtype: :py:class:`SourceSet`
        """
        path = Path(path)
        if path.is_dir():
            return kls.open_dir(path)
        elif path.is_file() and (path.suffix.lower() == '.zip' or is_zipfile(path)):
            return kls.open_zip(path)
        elif path.exists():
            raise NotADirectoryError(f'{path} is neither a directory nor a zip file')
        else:
            raise FileNotFoundError(f'Input path {path} does not exist')

    @classmethod
    def open_dir(kls, directory):
        return kls(list_directory(directory), original_path=Path(directory))

    @classmethod
    def open_zip(kls, file):
        """ Extract a zip file into a temporary directory and load all files from it, including files in
        sub-directories of the archive. """
        tmpdir = tempfile.TemporaryDirectory()
        tmp_indir = Path(tmpdir.name) / 'input'
        tmp_indir.mkdir()

        try:
            with ZipFile(file) as f:
                f.extractall(path=tmp_indir)
            files = list_directory(tmp_indir, recursive=True)
        except BaseException:
            tmpdir.cleanup()
            raise

        return kls(files, original_path=Path(file), was_zipped=True, tmpdir=tmpdir)

    @property
    def filenames(self):
        return [f.name for f in self.files]

    def close(self):
        if self.tmpdir is not None:
            self.tmpdir.cleanup()
            self.tmpdir = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __len__(self):
        return len(self.files)

    def __iter__(self):
        return iter(self.files)

    def __repr__(self):
        return f'<SourceSet {self.original_path} with {len(self.files)} files>'


class ImageError(ValueError):
    """ Raised by :py:func:`load_image` for files that are not readable images. """


def load_image(path):
    """ Load a color silkscreen image. The image is validated, but its bytes are returned unchanged.

    :param path: Path of the image file.
    :rtype: :py:obj:`bytes`
    """
    data = Path(path).read_bytes()
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, SyntaxError, OSError) as e:
        raise ImageError(f'{path} is not a valid image file: {e}') from e
    return data
