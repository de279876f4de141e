# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

# Bin one channel (e.g. Lambda1) into the cells of a MAP4000 style
# table addressed by two other channels (e.g. Engine Load, Engine
# Speed).  Cells are numbered load_index * columns + speed_index.

import bisect
import logging

import numpy as np

from . import base
from . import layouts
from .csvout import format_value

logger = logging.getLogger(__name__)

def axis_index(axis, value):
    # first entry strictly greater than value; past the end lands in the last bucket
    return min(bisect.bisect_right(axis, value), len(axis) - 1)

def cell_stats(cell):
    values = np.array([r.value for r in cell.samples])
    return (round(float(np.min(values)), 2),
            round(float(np.max(values)), 2),
            round(float(np.mean(values)), 2))

class MapGrid:
    def __init__(self, load_decoder, speed_decoder, value_decoder, layout=None):
        self.layout = layout or layouts.default_layout()
        missing = [name for name, dec in ((self.layout.load_channel, load_decoder),
                                          (self.layout.speed_channel, speed_decoder),
                                          (self.layout.value_channel, value_decoder))
                   if dec is None]
        if missing:
            logger.error('Missing required channels for %s generation: %s',
                         self.layout.title, ', '.join(missing))
            raise base.MissingRequiredChannel('Log must include %s, %s and %s'
                                              % (self.layout.load_channel,
                                                 self.layout.speed_channel,
                                                 self.layout.value_channel))
        self.load_decoder = load_decoder
        self.speed_decoder = speed_decoder
        self.value_decoder = value_decoder
        self.cells = {}
        self.included = 0
        self.excluded = 0

    @property
    def columns(self):
        return len(self.layout.speed_axis)

    def map_address(self, load, speed):
        return (axis_index(self.layout.load_axis, load) * self.columns
                + axis_index(self.layout.speed_axis, speed))

    def load(self):
        for dec in (self.load_decoder, self.speed_decoder, self.value_decoder):
            if dec.payload is None:
                dec.load_payload()
            # aligned so the three channels share timestamps
            dec.load_channel(align=True)
        self.populate_cells()
        return self

    def populate_cells(self):
        if any(dec.channel is None
               for dec in (self.load_decoder, self.speed_decoder, self.value_decoder)):
            raise base.NotReady('Map channels not loaded, call load first')
        load_records = self.load_decoder.channel.records
        speed_records = self.speed_decoder.channel.records
        self.cells = {}
        self.included = 0
        self.excluded = 0
        for tc, record in self.value_decoder.channel.records.items():
            load = load_records.get(tc)
            speed = speed_records.get(tc)
            if load is None or speed is None:
                logger.debug('Missing log record for map cell population at %dms, '
                             'data has been excluded', tc)
                self.excluded += 1
                continue
            address = self.map_address(load.value, speed.value)
            self.cells.setdefault(address, base.MapCell(address)).samples.append(record)
            self.included += 1
        if self.excluded:
            logger.warning('%d records included but %d were excluded from the %s',
                           self.included, self.excluded, self.layout.title)
        return self.cells

    def render(self, header=None, include_min_max=False):
        lay = self.layout
        rows = []
        if header is not None:
            rows.append([header])
        rows.append(['Map of ' + self.value_decoder.name])
        rows.append(['%s / %s' % (lay.load_label, lay.speed_label)]
                    + [format_value(v) for v in lay.speed_axis] + [''])

        for row in reversed(range(len(lay.load_axis))):
            label = format_value(lay.load_axis[row])
            stats = [cell_stats(self.cells[addr]) if addr in self.cells else None
                     for addr in range(row * self.columns, (row + 1) * self.columns)]
            avg_row = [label + '-Avg'] + [format_value(s[2]) if s else '' for s in stats]
            if include_min_max:
                rows.append([label + '-Max'] + [format_value(s[1]) if s else '' for s in stats])
                rows.append(avg_row)
                rows.append([label + '-Min'] + [format_value(s[0]) if s else '' for s in stats])
            else:
                rows.append(avg_row)
        rows.append([])
        return rows
