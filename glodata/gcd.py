# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

# .gcd sub-files hold the samples for the channel described by the
# .gcf of the same name: repeating records of a 16-bit millisecond
# timestamp followed by a 1 or 2 byte sample, all little endian,
# terminated by three zero bytes or the end of the data.

import logging

import numpy as np

from . import base
from . import gcf

logger = logging.getLogger(__name__)

ALIGNMENT_MS = 40
ROLLOVER = 65536

def decode_samples(payload, size):
    stride = 2 + size
    count = len(payload) // stride # a short final record is dropped
    if not count:
        return np.zeros(0, dtype=np.int64), np.zeros(0, dtype=np.int64)
    head = np.ndarray(shape=(count, 3), strides=(stride, 1), dtype=np.uint8,
                      buffer=payload)
    end = np.all(head[1:] == 0, axis=1)
    if np.any(end):
        count = int(np.argmax(end)) + 1
    timecodes = np.ndarray(shape=(count,), strides=(stride,), dtype='<u2',
                           buffer=payload)
    values = np.ndarray(shape=(count,), strides=(stride,), dtype='u1' if size == 1 else '<u2',
                        offset=2, buffer=payload)
    return timecodes.astype(np.int64), values.astype(np.int64)

def unwrap_timecodes(timecodes):
    # the logger's clock is 16 bits wide, every step backwards is a wrap
    timecodes = np.asarray(timecodes, dtype=np.int64)
    wraps = np.zeros(len(timecodes), dtype=np.int64)
    wraps[1:] = timecodes[1:] < timecodes[:-1]
    return np.cumsum(wraps) * ROLLOVER + timecodes

def align_timecodes(timecodes, quantum=ALIGNMENT_MS):
    timecodes = np.asarray(timecodes, dtype=np.int64)
    return timecodes - timecodes % quantum

class ChannelDataDecoder:
    def __init__(self, reader, format_file, data_file):
        self.reader = reader
        self.format_file = format_file
        self.data_file = data_file
        self.format = None
        self.payload = None
        self.channel = None

    @property
    def name(self):
        return self.format.name if self.format else self.format_file.name

    def read_format(self):
        self.format = gcf.parse_channel_format(self.reader, self.format_file)
        return self.format

    def load_payload(self):
        if self.format is None:
            self.read_format()
        self.payload = self.reader.read_payload(self.data_file)
        return self.payload

    def _check_ready(self):
        if self.format is None:
            raise base.NotReady('Channel format for %s not loaded, call read_format first'
                                % self.format_file.name)
        if self.payload is None:
            raise base.NotReady('Log data for %s not loaded, call load_payload first'
                                % self.data_file.name)

    def samples(self):
        self._check_ready()
        return decode_samples(self.payload, self.format.size)

    def process(self, consumer):
        timecodes, values = self.samples()
        for tc, v in zip(timecodes.tolist(), values.tolist()):
            consumer(tc, v)
        logger.info('  Processed %d records in %s', len(timecodes), self.format.name)
        return len(timecodes)

    def load_channel(self, align=False):
        timecodes, raw = self.samples()
        timecodes = unwrap_timecodes(timecodes)
        if align:
            timecodes = align_timecodes(timecodes)
        _, first = np.unique(timecodes, return_index=True)
        first.sort()
        if len(first) != len(timecodes):
            logger.debug('  %s: dropped %d records with duplicate timestamps',
                         self.format.name, len(timecodes) - len(first))
        scale = self.format.value_per_bit

        self.channel = base.Channel(self.format)
        self.channel.records = {tc: base.LogRecord(tc, r, round(r * scale, 3))
                                for tc, r in zip(timecodes[first].tolist(),
                                                 raw[first].tolist())}
        logger.info('  Loaded %d records in %s', len(self.channel.records), self.format.name)
        return self.channel
