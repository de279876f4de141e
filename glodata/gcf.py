# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

# .gcf sub-files describe one logging channel with a small block of
# UTF-16 XML, e.g.
#
#   <channel><output name="Throttle" size="1" min="0" max="100"
#                    signed="0" units="%"><scalar m_adjusted="0.392"/>
#   </output></channel>

import logging
import re
import struct
from xml.etree import ElementTree as ET

from . import base
from .compound import BLOCK_HEADER_LEN

logger = logging.getLogger(__name__)

FORMAT_TAG = b'GEMS v4 LOGGING CHANNEL FORMAT'

_junk = re.compile('[\0\r\n\t]')
_entities = (('&micro;', 'micro'),
             ('&deg;', 'degrees'))

def clean_text(text, entities=True):
    text = _junk.sub('', text)
    text = text.replace('  ', '')
    if entities:
        # not real XML entities, the logger invents them for unit names
        for old, new in _entities:
            text = text.replace(old, new)
    return text

def decode_wide_string(data, offset=0):
    # u32 character count followed by that many UTF-16LE characters
    if len(data) < offset + 4:
        return None, 0
    count, = struct.unpack_from('<I', data, offset)
    raw = bytes(data[offset + 4:offset + 4 + count * 2])
    return raw.decode('utf-16-le', errors='replace'), count * 2 - len(raw)

def _attr(node, name, conv=str):
    try:
        return conv(node.attrib[name])
    except KeyError:
        raise base.ChannelFormatError('Channel output node has no %s attribute' % name) from None
    except ValueError:
        raise base.ChannelFormatError('Bad %s attribute %r' % (name, node.attrib[name])) from None

def parse_channel_xml(xml, source='', problems=None):
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as err:
        raise base.ChannelFormatError('Unreadable channel format XML in %s: %s'
                                      % (source, err)) from None
    output = root.find('output') if root.tag == 'channel' else None
    if output is None:
        raise base.MissingChannelNode('No channel output node found in %s' % source)

    fmt = base.ChannelFormat(name=_attr(output, 'name'),
                             size=_attr(output, 'size', int),
                             min=_attr(output, 'min', float),
                             max=_attr(output, 'max', float),
                             signed=_attr(output, 'signed', int),
                             units=_attr(output, 'units'))
    if fmt.size < 1:
        raise base.ChannelFormatError('Channel %s has invalid sample size %d'
                                      % (fmt.name, fmt.size))
    logger.info('    Channel Name: %s', fmt.name)
    logger.debug('    Size %d, min %g, max %g, signed %d, units %s',
                 fmt.size, fmt.min, fmt.max, fmt.signed, fmt.units)

    scalar = output.find('scalar')
    if scalar is None:
        logger.warning('    No output scalar node for %s in %s, defaulting value per bit to 1',
                       fmt.name, source)
        if problems is not None:
            problems.append(base.MissingScalarNode('No scalar node for %s in %s'
                                                   % (fmt.name, source)))
        return fmt
    fmt.value_per_bit = _attr(scalar, 'm_adjusted', float)
    logger.debug('    Value per bit: %g', fmt.value_per_bit)
    return fmt

def parse_channel_format(reader, sub):
    logger.debug('  Reading channel format XML for %s', sub.name)
    if not sub.is_valid():
        raise base.ChannelFormatError('Invalid .gcf channel file %s' % sub.name)

    pos = sub.block_addresses[0] + BLOCK_HEADER_LEN
    tag = reader.read_at(pos, len(FORMAT_TAG))
    if len(tag) < len(FORMAT_TAG):
        raise base.ChannelFormatError('Channel format header for %s is truncated' % sub.name)
    if tag != FORMAT_TAG:
        logger.warning('Unexpected channel format header %r in %s', tag, sub.name)
    pos += len(FORMAT_TAG) + 1 + 4 # 0x1a, reserved

    length = reader.read_at(pos, 4)
    if len(length) < 4:
        raise base.ChannelFormatError('Channel format XML length missing in %s' % sub.name)
    count, = struct.unpack('<I', length)
    text, missing = decode_wide_string(length + reader.read_at(pos + 4, count * 2))
    if missing:
        raise base.ChannelFormatError('Invalid XML string length in %s, %d bytes short'
                                      % (sub.name, missing))
    xml = clean_text(text)
    logger.debug('    Channel Format XML: %s', xml)

    return parse_channel_xml(xml, sub.name, reader.problems)
