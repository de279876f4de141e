#!/usr/bin/python3

import sys

from setuptools import setup
from version import version

freeze = {}
if {'build_exe', 'bdist_msi'} & set(sys.argv):
    # Windows console executable
    from cx_Freeze import setup, Executable

    freeze = {
        'options': {'build_exe': {
                        'excludes': ['tkinter', 'unittest'],
                        'zip_include_packages': ['*'],
                        'zip_exclude_packages': ['numpy', 'numpy.libs', 'yaml'],
                        'include_files': [('glodata/maps.yaml', 'lib/glodata/maps.yaml')],
                    },
                    'bdist_msi': {
                        'initial_target_dir': '[ProgramFilesFolder]\\glo2csv',
                        'upgrade_code': '{3F0B8D5E-6C1A-4E0B-9A57-2D8E4C1B7F60}',
                    },
                    },
        'executables': [Executable('glo2csv.py')],
    }

setup(
    name = 'glo2csv',
    version = version,
    description = 'Convert Omex MAP4000 .glo ECU logs to CSV files and maps',
    license = 'MIT',
    packages = ['glodata'],
    py_modules = ['glo2csv', 'version'],
    package_data = {'glodata': ['maps.yaml']},
    install_requires = [
        'numpy',
        'PyYAML',
        'dacite',
    ],
    extras_require = {
        'test': ['pytest'],
        'freeze': ['cx_Freeze'],
    },
    entry_points = {
        'console_scripts': ['glo2csv = glo2csv:main'],
    },
    python_requires = '>=3.10',
    **freeze,
)
