# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

from dataclasses import dataclass
import os
import typing

import dacite
import yaml

from . import base

DEFAULT_MAPS = os.path.join(os.path.dirname(__file__), 'maps.yaml')

@dataclass(eq=False)
class MapLayout:
    name: str
    title: str
    load_channel: str
    speed_channel: str
    value_channel: str
    load_axis: typing.List[float]
    speed_axis: typing.List[float]
    load_label: str = 'Load'
    speed_label: str = 'Speed'

    def __post_init__(self):
        for label, axis in (('load_axis', self.load_axis), ('speed_axis', self.speed_axis)):
            if not axis:
                raise ValueError('%s: %s is empty' % (self.name, label))
            if any(a >= b for a, b in zip(axis[:-1], axis[1:])):
                raise ValueError('%s: %s must be strictly ascending' % (self.name, label))

def parse_layouts(text):
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError('expected a mapping of layout names')
    return {name: dacite.from_dict(data_class=MapLayout,
                                   data=dict(entry, name=name),
                                   config=dacite.Config(cast=[float]))
            for name, entry in data.items()}

def load_layouts(fname=None):
    layouts = {}
    for f in [DEFAULT_MAPS] + ([fname] if fname else []):
        try:
            with open(f, 'rt', encoding='utf-8') as fh:
                layouts.update(parse_layouts(fh.read()))
        except (OSError, yaml.YAMLError, dacite.DaciteError, TypeError, ValueError) as err:
            raise base.LayoutError('Could not load map layouts from %s: %s' % (f, err)) from err
    return layouts

def default_layout():
    return load_layouts()['afr']
