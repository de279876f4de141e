# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

# Builders for small synthetic .glo containers used throughout the tests.

import struct

import pytest

from glodata.gcf import FORMAT_TAG

TAG = b'GEMS COMPOUND FILE v01.00'
HEADER = bytes(0x24) + TAG + b'\x1a'

def wide_string(text):
    return struct.pack('<I', len(text)) + text.encode('utf-16-le')

def channel_xml(name, size=1, units='%', m_adjusted='1', lo=0, hi=100):
    scalar = '' if m_adjusted is None else '\t\t<scalar m_adjusted="%s"/>\r\n' % m_adjusted
    return ('<channel>\r\n'
            '\t<output name="%s" size="%d" min="%s" max="%s" signed="0" units="%s">\r\n'
            '%s'
            '\t</output>\r\n'
            '</channel>\r\n' % (name, size, lo, hi, units, scalar))

def gcf_payload(xml):
    return FORMAT_TAG + b'\x1a' + bytes(4) + wide_string(xml)

def gcd_payload(samples, size=1):
    return b''.join(struct.pack('<H', tc) + v.to_bytes(size, 'little') for tc, v in samples)

def build_container(files, block_size=512):
    """files is a list of (name, payload).  Blocks of the different
    sub-files are interleaved so the readers must follow the chains."""
    table_len = sum(0x2C + len(name) for name, _ in files) + 0x2C
    first_free = len(HEADER) + table_len
    step = block_size - 8
    chunks = [[p[i:i + step] for i in range(0, len(p), step)] or [b''] for _, p in files]

    addresses = [[] for _ in files]
    addr = first_free
    for depth in range(max((len(c) for c in chunks), default=0)):
        for i, c in enumerate(chunks):
            if depth < len(c):
                addresses[i].append(addr)
                addr += block_size

    blocks = bytearray(addr - first_free)
    for c, addrs in zip(chunks, addresses):
        for j, (chunk, a) in enumerate(zip(c, addrs)):
            nxt = addrs[j + 1] if j + 1 < len(addrs) else 0
            off = a - first_free
            blocks[off:off + 8] = struct.pack('<II', nxt, 0)
            blocks[off + 8:off + 8 + len(chunk)] = chunk

    table = b''.join(struct.pack('<I28xI4xI', addrs[0], block_size, len(name))
                     + name.encode('latin-1')
                     for (name, _), addrs in zip(files, addresses))
    return HEADER + table + bytes(0x2C) + bytes(blocks)

def channel_files(name, samples, size=1, units='%', m_adjusted='1'):
    return [(name + '.gcf', gcf_payload(channel_xml(name, size, units, m_adjusted))),
            (name + '.gcd', gcd_payload(samples, size))]

# Engine load/speed/lambda sampled every 40ms with a few gaps
LOAD = [(40 * i, 30 + 5 * i) for i in range(1, 13)]
SPEED = [(40 * i, 500 + 400 * i) for i in range(1, 13) if i != 7]
LAMBDA = [(40 * i, 90 + i) for i in range(1, 13)]
THROTTLE = [(65000, 10), (65400, 20), (200, 30), (900, 40)]

@pytest.fixture
def sample_files():
    return ([('ecu_info', b'\x01\x02\x03\x04'),
             ('notes', wide_string('Track day\r\n  run 2'))]
            + channel_files('Engine Load', LOAD, units='kPa')
            + channel_files('Throttle', THROTTLE)
            + channel_files('Engine Speed', SPEED, size=2, units='RPM')
            + channel_files('Lambda1', LAMBDA, units='lambda', m_adjusted='0.01'))

@pytest.fixture
def sample_log(sample_files):
    return build_container(sample_files)

@pytest.fixture
def sample_path(tmp_path, sample_log):
    path = tmp_path / 'MyLog1.glo'
    path.write_bytes(sample_log)
    return path
