# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

# GEMS compound file: a prologue, a table of sub-file descriptors and
# a pool of fixed size blocks.  Every block starts with the address of
# the next block in its chain (0 ends the chain) and a reserved word.

import logging
import struct

from . import base

logger = logging.getLogger(__name__)

PROLOGUE_LEN = 0x24
TAG_LEN = 25
RECORD_LEN = 0x2C
BLOCK_HEADER_LEN = 8

_record = struct.Struct('<I28xI4xI')
_u32 = struct.Struct('<I')

class CompoundFileReader:
    def __init__(self, data):
        self.data = memoryview(data)
        self.pos = 0
        self.sub_files = []
        self.problems = []

    def read_at(self, offset, count):
        # a short result means we ran off the end of the container
        return bytes(self.data[offset:offset + count])

    def _read(self, count):
        ret = self.read_at(self.pos, count)
        self.pos += len(ret)
        return ret

    def _problem(self, err):
        logger.error('%s', err)
        self.problems.append(err)

    def read_header(self):
        self.pos = PROLOGUE_LEN
        tag = self._read(TAG_LEN)
        if len(tag) < TAG_LEN:
            raise base.MalformedContainer('Not a valid .glo file, header too short (%d bytes)'
                                          % len(self.data))
        tag = tag.decode('ascii', errors='replace')
        logger.debug('File type: %s', tag)
        if not tag.startswith('GEMS COMPOUND FILE'):
            logger.warning('Unexpected file type %r, continuing anyway', tag)
        self._read(1) # 0x1a
        return tag

    def enumerate_sub_files(self):
        logger.info('Identifying subfiles')
        self.sub_files = []
        while True:
            start = self.pos
            rec = self._read(RECORD_LEN)
            if len(rec) < RECORD_LEN:
                self._problem(base.TruncatedDescriptorTable(
                    'Subfile record at 0x%x is truncated (%d of %d bytes)'
                    % (start, len(rec), RECORD_LEN)))
                break
            first_block, block_size, name_length = _record.unpack(rec)
            sub = base.SubFile([first_block], block_size, name_length)
            if not sub.is_valid():
                self.pos = start
                logger.debug('No more subfile descriptors found')
                break
            sub.name = self._read(name_length).decode('latin-1')
            logger.debug('Subfile %s: first block 0x%08x, block size %d',
                         sub.name, first_block, block_size)
            self.sub_files.append(sub)
        return self.sub_files

    def build_block_chain(self, sub):
        # rebuilt from the first block every time
        del sub.block_addresses[1:]
        addr = sub.block_addresses[0]
        seen = {addr}
        logger.debug('    Data block at 0x%08x', addr)
        while addr:
            word = self.read_at(addr, 4)
            if len(word) < 4:
                self._problem(base.TruncatedDataBlock(
                    'Invalid subfile data for %s, block 0x%08x is past the end of the file'
                    % (sub.name, addr)))
                break
            addr, = _u32.unpack(word)
            if not addr:
                break
            if addr in seen:
                self._problem(base.CorruptChain(
                    'Block chain for %s loops back to 0x%08x, truncating after %d blocks'
                    % (sub.name, addr, len(sub.block_addresses))))
                break
            logger.debug('    Data block at 0x%08x', addr)
            seen.add(addr)
            sub.block_addresses.append(addr)
        logger.debug('  Found %d blocks', len(sub.block_addresses))
        return sub.block_addresses

    def read_payload(self, sub):
        chunks = []
        for addr in sub.block_addresses:
            block = self.read_at(addr, sub.block_size)
            if len(block) != sub.block_size:
                self._problem(base.TruncatedDataBlock(
                    'Could not read %s, block 0x%08x too short (%d of %d bytes)'
                    % (sub.name, addr, len(block), sub.block_size)))
            chunks.append(block[BLOCK_HEADER_LEN:])
        return b''.join(chunks)
