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

import json
from pathlib import Path
from zipfile import BadZipFile

import click

from .gerber import fixups_for
from .layers import conventions
from .output import sink_for
from .plan import build_plan, resolve_convention, ColorSilkscreenRequest
from .source import SourceSet, ImageError, load_image
from . import __version__


def _print_version(ctx, param, value):
    if value and not ctx.resilient_parsing:
        click.echo(f'Version {__version__}')
        ctx.exit()


def _load_input_map(path):
    try:
        overrides = json.loads(path.read_bytes())
    except (OSError, ValueError) as e:
        raise click.BadParameter(f'Cannot read input map {path}: {e}', param_hint='--input-map')

    if not isinstance(overrides, dict) or not all(isinstance(v, str) for v in overrides.values()):
        raise click.BadParameter('The input map must be a JSON object mapping filename regexes to layer names',
                                 param_hint='--input-map')
    return overrides


def _report_warnings(plan, format_warnings):
    if format_warnings == 'ignore':
        return

    for warning in plan.warnings:
        click.secho(f'Warning: {warning}', fg='yellow', err=True)

    for notice in plan.missing:
        click.echo(f'Note: {notice}', err=True)


@click.command()
@click.option('--version', is_flag=True, callback=_print_version, expose_value=False, is_eager=True)
@click.option('--eda', type=click.Choice(['auto', *conventions()], case_sensitive=False), default='auto',
              show_default=True, help='''EDA tool that exported the input files. "auto" guesses the tool from the file
              names.''')
@click.option('--path', 'inpath', type=click.Path(path_type=Path), default='.', show_default=True,
              help='Input directory or zip file containing the Gerber and drill files')
@click.option('--output_path', type=click.Path(path_type=Path), default='./output', show_default=True,
              help='Output directory')
@click.option('--zip', 'make_zip', type=click.BOOL, default=False, show_default=True, help='''Write a single zip archive
              into the output directory instead of individual files''')
@click.option('--zip_name', default='Gerber', show_default=True, help='File name of the zip archive, without ".zip"')
@click.option('--top_color_image', type=click.Path(exists=True, dir_okay=False, path_type=Path), help='''Image to use
              as colorful silkscreen on the top side''')
@click.option('--bottom_color_image', type=click.Path(exists=True, dir_okay=False, path_type=Path), help='''Image to
              use as colorful silkscreen on the bottom side''')
@click.option('-m', '--input-map', type=click.Path(exists=True, dir_okay=False, path_type=Path), help='''Extend or
              override the layer name mapping with a name map from a JSON file. The JSON file must contain a single JSON
              dict with an arbitrary number of string: string entries. The keys are interpreted as regexes applied to
              the filenames via re.fullmatch, and each value must either be the string "ignore" to skip the file, or a
              layer name such as "top copper", "inner_02 copper", "bottom silk" or "drill nonplated".''')
@click.option('--fixup-gerber/--no-fixup-gerber', default=False, show_default=True, help='''Add JLC's generator header
              to Gerber files and rewrite KiCad aperture selects. By default files are copied byte by byte.''')
@click.option('--dry-run', is_flag=True, help='Only print the layer mapping, do not write any files')
@click.option('--warnings', 'format_warnings', type=click.Choice(['default', 'ignore']), default='default',
              help='''Print or hide warnings about unmatched and duplicate files, and notes about missing
              layers (default: print)''')
def cli(eda, inpath, output_path, make_zip, zip_name, top_color_image, bottom_color_image, input_map, fixup_gerber,
        dry_run, format_warnings):
    """ Rename the Gerber and drill files exported by KiCad, Protel/Altium or JLC's own EDA tools to the file names
    expected by JLC's online order editor. """

    overrides = _load_input_map(input_map) if input_map else None

    color_requests = []
    for side, image in (('top', top_color_image), ('bottom', bottom_color_image)):
        if image:
            try:
                color_requests.append(ColorSilkscreenRequest(side, load_image(image)))
            except (ImageError, OSError) as e:
                raise click.BadParameter(str(e), param_hint=f'--{side}_color_image')

    try:
        sources = SourceSet.open(inpath)
    except (OSError, BadZipFile) as e:
        raise click.ClickException(f'Cannot read input: {e}')

    with sources:
        detection = resolve_convention(sources.filenames, eda.lower())
        if not detection.ok:
            raise click.ClickException(f'{detection.describe()} Use --eda to select the EDA tool.')
        if eda.lower() == 'auto':
            click.echo(detection.describe())

        fixups = fixups_for(detection.convention) if fixup_gerber else ()
        try:
            plan = build_plan(sources.files, detection.convention, color_requests=color_requests,
                              overrides=overrides, fixups=fixups)
        except (ValueError, OSError) as e:
            raise click.ClickException(str(e))

        _report_warnings(plan, format_warnings)

        if dry_run:
            click.echo(plan.format_layer_map())
            return

        report = sink_for(output_path, zip=make_zip, zip_name=zip_name).emit(plan)

    if not report.ok:
        raise click.ClickException(f'Failed to write {len(report.failed)} of {len(plan)} files to '
                                   f'{report.destination}:\n{report.format_failures()}')

    click.echo(f'Wrote {len(report.written)} files to {report.destination}')


if __name__ == '__main__':
    cli()
