#!/usr/bin/env python3

# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

import argparse
import configparser
import logging
import os
import sys

from glodata import base
from glodata import csvout
from glodata import glo
from glodata import layouts
from glodata.mapgrid import MapGrid
from version import version

logger = logging.getLogger('glo2csv')

DEFAULT_CONFIG = os.path.join(os.path.expanduser('~'), '.glo2csv', 'config.ini')

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='glo2csv', allow_abbrev=False,
        description='Reads an Omex MAP4000 .glo log file and saves the log data as CSV.')
    command = parser.add_mutually_exclusive_group(required=True)
    command.add_argument('-I', dest='command', action='store_const', const='I',
                         help='each channel in its own CSV file with original timestamps, '
                         'e.g. MyLog1-Throttle.csv')
    command.add_argument('-A', dest='command', action='store_const', const='A',
                         help='all channels in a single CSV file with timestamps aligned to '
                         '40ms intervals, e.g. MyLog1-All.csv')
    command.add_argument('-M', dest='command', action='store_const', const='M',
                         help='generate a map (by default an AFR map, the log must contain '
                         'Engine Speed, Engine Load and Lambda1)')
    command.add_argument('-MM', dest='command', action='store_const', const='MM',
                         help='generate a map with max/min/avg rows')
    parser.add_argument('-input', '-i', dest='input', required=True, help='.glo file to read')
    parser.add_argument('-DEBUG', '--debug', dest='debug', action='store_true',
                        help='a lot of extra logging')
    parser.add_argument('--config', default=DEFAULT_CONFIG, help='ini file with defaults')
    parser.add_argument('--map', help='map layout to generate (default afr)')
    parser.add_argument('--output-dir', help='where to write the CSV files')
    parser.add_argument('--version', action='version', version='%(prog)s ' + version)
    return parser.parse_args(argv)

def load_config(fname):
    config = configparser.ConfigParser()
    config['main'] = {} # base structure initialization
    config.read(fname)
    return config

def save_each_channel(log, stem, out_dir):
    for ch in log.channels:
        logger.info('  Reading log data from %s', ch.format_file.name)
        ch.load_payload()
        channel = ch.load_channel(align=False)
        csvout.write_rows(csvout.channel_rows(channel), '%s-%s.csv' % (stem, channel.name),
                          out_dir)

def save_all_channels(log, stem, out_dir):
    channels = list(log.load_channels(align=True).values())
    csvout.write_rows(csvout.aligned_rows(channels), stem + '-All.csv', out_dir)

def save_map(log, fname, stem, out_dir, layout, include_min_max):
    grid = MapGrid(log.find(layout.load_channel),
                   log.find(layout.speed_channel),
                   log.find(layout.value_channel),
                   layout)
    grid.load()
    header = fname + ' - ' + log.notes
    csvout.write_rows(grid.render(header, include_min_max),
                      '%s-%s.csv' % (stem, layout.title), out_dir)

def run_command(args, config, log, stem, out_dir):
    if args.command == 'I':
        logger.info('Saving each log channel to individual CSV files')
        save_each_channel(log, stem, out_dir)
    elif args.command == 'A':
        logger.info('Saving all log channels to a single CSV file')
        save_all_channels(log, stem, out_dir)
    else:
        name = args.map or config.get('main', 'map', fallback='afr')
        try:
            maps = layouts.load_layouts(config.get('main', 'maps_file', fallback=None))
        except base.LayoutError as err:
            logger.error('%s', err)
            return 1
        if name not in maps:
            logger.error('Unknown map %s, choose from %s', name, ', '.join(sorted(maps)))
            return 1
        logger.info('Creating %s%s', maps[name].title,
                    ' with max/min/avg' if args.command == 'MM' else '')
        try:
            save_map(log, args.input, stem, out_dir, maps[name], args.command == 'MM')
        except base.MissingRequiredChannel as err:
            logger.error('%s', err)
            return 1

    logger.info('Done!')
    return 0

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')
    config = load_config(args.config)
    out_dir = args.output_dir or config.get('main', 'output_dir', fallback='.')

    if not os.path.isfile(args.input):
        logger.error("File '%s' not found, check the -input parameter", args.input)
        logger.error("Full path is '%s'", os.path.abspath(args.input))
        return 1

    logger.info('Processing %s', args.input)
    try:
        log = glo.GloLogFile.from_file(args.input)
    except base.MalformedContainer as err:
        logger.error('%s', err)
        return 1
    logger.info('Found %d subfiles', len(log.sub_files))
    logger.info('Found %d log channels', len(log.channels))
    log.read_formats()

    stem = os.path.splitext(os.path.basename(args.input))[0]
    try:
        return run_command(args, config, log, stem, out_dir)
    except OSError as err:
        logger.error("Error saving csv file '%s': %s", err.filename, err.strerror)
        return 1

if __name__ == '__main__':
    sys.exit(main())
