# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

import csv
import logging
import os
import re

logger = logging.getLogger(__name__)

_bad_fname_chars = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

def format_value(v, dec_pts=2):
    s = '%.*f' % (dec_pts, v)
    return s.rstrip('0').rstrip('.') if '.' in s else s

def column_name(channel):
    return '%s (%s)' % (channel.name, channel.units)

def channel_rows(channel):
    rows = [['Time (ms)', column_name(channel)]]
    rows.extend([str(tc), format_value(channel.records[tc].value, 3)]
                for tc in sorted(channel.records))
    return rows

def aligned_rows(channels):
    timecodes = sorted(set().union(*(ch.records.keys() for ch in channels)))
    rows = [['Time (ms)'] + [column_name(ch) for ch in channels]]
    for tc in timecodes:
        row = [str(tc)]
        for ch in channels:
            rec = ch.records.get(tc)
            row.append(format_value(rec.value, 3) if rec else '')
        rows.append(row)
    return rows

def safe_file_name(fname):
    return _bad_fname_chars.sub('_', fname)

def write_rows(rows, fname, out_dir='.'):
    path = os.path.abspath(os.path.join(out_dir, safe_file_name(fname)))
    with open(path, 'wt', encoding='utf-8', newline='') as f:
        csv.writer(f).writerows(rows)
    logger.info('  Saved CSV file to %s', path)
    return path
