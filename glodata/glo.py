# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

# Omex MAP4000 .glo log files.  The compound container holds an
# ecu_info and notes sub-file plus a .gcf (format) / .gcd (data) pair
# for every logged channel.

import logging

from . import base
from . import compound
from . import gcd
from . import gcf

logger = logging.getLogger(__name__)

def _stem(name):
    return name[:-4].lower()

def decode_notes(payload):
    text, missing = gcf.decode_wide_string(payload)
    if text is None:
        logger.warning('Notes subfile is too short to hold any text')
        return ''
    if missing:
        logger.warning('Notes text is truncated, %d bytes missing', missing)
    return gcf.clean_text(text, entities=False)

class GloLogFile:
    def __init__(self, data, file_name=''):
        self.file_name = file_name
        self.reader = compound.CompoundFileReader(data)
        self.file_type = self.reader.read_header()
        self.sub_files = self.reader.enumerate_sub_files()
        self.notes = ''
        self.channels = [] # ChannelDataDecoder, one per .gcf/.gcd pair
        self._identify_channels()

    @classmethod
    def from_file(cls, fname):
        with open(fname, 'rb') as f:
            return cls(f.read(), fname)

    @property
    def problems(self):
        return self.reader.problems

    def _identify_channels(self):
        for sub in self.sub_files:
            logger.debug('Processing %s', sub.name)
            self.reader.build_block_chain(sub)

        data_files = {_stem(sub.name): sub for sub in self.sub_files
                      if sub.name.lower().endswith('.gcd')}
        paired = set()
        for sub in self.sub_files:
            name = sub.name.lower()
            if name == 'ecu_info':
                logger.debug('  Found ecu_info')
            elif name == 'notes':
                logger.debug('  Found notes')
                self.notes = decode_notes(self.reader.read_payload(sub))
            elif name.endswith('.gcf'):
                data_file = data_files.get(_stem(sub.name))
                if data_file is None:
                    self._unmatched('No matching log data subfile found for %s, '
                                    'discarding log channel' % sub.name)
                    continue
                logger.debug('  Found log channel %s with data in %s', sub.name, data_file.name)
                self.channels.append(gcd.ChannelDataDecoder(self.reader, sub, data_file))
                paired.add(_stem(sub.name))
            elif name.endswith('.gcd'):
                pass # picked up with its .gcf
            else:
                logger.warning('Unknown subfile type: %s', sub.name)

        for stem, sub in data_files.items():
            if stem not in paired:
                self._unmatched('No channel format subfile found for %s, ignoring its data'
                                % sub.name)

    def _unmatched(self, msg):
        logger.warning('%s', msg)
        self.reader.problems.append(base.UnmatchedChannelPair(msg))

    def read_formats(self):
        good = []
        for ch in self.channels:
            try:
                ch.read_format()
            except base.ChannelFormatError as err:
                logger.error('Discarding channel %s: %s', ch.format_file.name, err)
                self.reader.problems.append(err)
                continue
            good.append(ch)
        self.channels = good
        return [ch.format for ch in self.channels]

    def find(self, name):
        for ch in self.channels:
            if ch.format is not None and ch.format.name == name:
                return ch
        return None

    def load_channels(self, align=False):
        ret = {}
        for ch in self.channels:
            logger.info('  Reading log data from %s', ch.data_file.name)
            ch.load_payload()
            channel = ch.load_channel(align)
            ret.setdefault(channel.name, channel)
        return ret

    def summary(self, align=False):
        metadata = {'File Type': self.file_type}
        if self.notes:
            metadata['Notes'] = self.notes
        return base.LogFile(self.load_channels(align), metadata, self.file_name)
