#!/usr/bin/env python3

from pathlib import Path
from setuptools import setup, find_packages
import re
import subprocess

def version():
    try:
        res = subprocess.run(['git', 'describe', '--tags', '--match', 'v*'], capture_output=True, check=True, text=True)
        version, _, _rest = res.stdout.strip()[1:].partition('-')
        return version
    except (subprocess.CalledProcessError, FileNotFoundError):
        # Not a git checkout, e.g. an unpacked sdist
        init = Path(__file__).with_name('jlcconv') / '__init__.py'
        return re.search(r"^__version__ = '([^']+)'", init.read_text(), re.MULTILINE)[1]

setup(
    name='jlcconv',
    version=version(),
    author='The jlcconv authors',
    description='Rename Gerber and drill files from KiCad, Protel/Altium and other EDA tools for ordering at JLC',
    long_description=Path('README.md').read_text(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests']),
    include_package_data=True,
    install_requires=['click', 'Pillow'],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'jlcconv = jlcconv.cli:cli',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'Intended Audience :: Manufacturing',
        'License :: OSI Approved :: Apache Software License',
        'Natural Language :: English',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)',
        'Topic :: Utilities',
    ],
    keywords='gerber excellon pcb jlcpcb kicad altium',
    python_requires='>=3.10',
)
