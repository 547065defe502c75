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

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from zipfile import ZipFile, ZIP_DEFLATED


@dataclass
class EmitReport:
    """ Outcome of writing a :py:class:`~.plan.ConversionPlan`.

    :ivar destination: Output directory or zip file path.
    :ivar written: Output file names that were written successfully, in plan order.
    :ivar failed: :py:obj:`list` of ``(filename, exception)`` tuples for entries that could not be written.
    """
    destination: Path
    written: list = field(default_factory=list)
    failed: list = field(default_factory=list)

    @property
    def ok(self):
        return not self.failed

    def format_failures(self):
        return '\n'.join(f'  {name}: {exc}' for name, exc in self.failed)


class DirectorySink:
    """ Write plan entries as plain files into a directory. Every file is written to a temporary file next to its
    destination first and then renamed into place, so a failed write never leaves a half-written output file.

    :param path: Output directory. It is created if it does not exist.
    :param overwrite_existing: When :py:obj:`False`, entries whose output file already exists are reported as failed.
    """

    def __init__(self, path, overwrite_existing=True):
        self.path = Path(path)
        self.overwrite_existing = overwrite_existing

    def emit(self, plan):
        """ Write all entries of the plan.

        :rtype: :py:class:`EmitReport`
        """
        self.path.mkdir(parents=True, exist_ok=True)
        report = EmitReport(self.path)

        for entry in plan:
            out = self.path / entry.filename
            try:
                if out.exists() and not self.overwrite_existing:
                    raise FileExistsError(f'Path exists but overwrite_existing is False: {out}')
                self._write_atomic(out, entry.read())
            except OSError as e:
                report.failed.append((entry.filename, e))
            else:
                report.written.append(entry.filename)

        return report

    def _write_atomic(self, out, data):
        fd, tmp = tempfile.mkstemp(dir=out.parent, prefix=f'.{out.name}.', suffix='.part')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp, out)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


class ZipSink:
    """ Write plan entries into a zip archive, in plan order. The archive is assembled under a temporary name and only
    moved to its final path once all entries have been processed. Entries whose content cannot be read are left out of
    the archive and reported as failed.

    :param path: Path of the output zip file. Its parent directory is created if necessary.
    :param prefix: Store all entries under this prefix inside the archive.
    """

    def __init__(self, path, prefix=''):
        self.path = Path(path)
        self.prefix = prefix

    def emit(self, plan):
        """ Write all entries of the plan.

        :rtype: :py:class:`EmitReport`
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        report = EmitReport(self.path)

        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f'.{self.path.name}.', suffix='.part')
        os.close(fd)
        try:
            with ZipFile(tmp, 'w', compression=ZIP_DEFLATED) as le_zip:
                for entry in plan:
                    try:
                        data = entry.read()
                    except OSError as e:
                        report.failed.append((entry.filename, e))
                        continue

                    le_zip.writestr(self.prefix + entry.filename, data)
                    report.written.append(entry.filename)

            os.replace(tmp, self.path)

        except OSError as e:
            Path(tmp).unlink(missing_ok=True)
            # the archive never made it to disk, so none of the entries did either
            already_failed = {name for name, _exc in report.failed}
            report.failed.extend((entry.filename, e) for entry in plan if entry.filename not in already_failed)
            report.written.clear()

        return report


def sink_for(output_path, zip=False, zip_name='Gerber'):
    """ Return the sink a conversion run writes to: a :py:class:`ZipSink` for ``<output_path>/<zip_name>.zip`` when
    ``zip`` is set, a :py:class:`DirectorySink` for ``output_path`` otherwise. """
    output_path = Path(output_path)
    if zip:
        return ZipSink(output_path / f'{zip_name}.zip')
    return DirectorySink(output_path)
