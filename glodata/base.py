# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

from dataclasses import dataclass, field
import typing

# Exceptions.  The fatal ones are raised, the rest are recorded on the
# reader and logged so a partially damaged log still yields its channels.

class GloError(Exception):
    pass

class MalformedContainer(GloError):
    pass

class TruncatedDescriptorTable(GloError):
    pass

class TruncatedDataBlock(GloError):
    pass

class CorruptChain(GloError):
    pass

class ChannelFormatError(GloError):
    pass

class MissingChannelNode(ChannelFormatError):
    pass

class MissingScalarNode(ChannelFormatError):
    pass

class UnmatchedChannelPair(GloError):
    pass

class NotReady(GloError):
    pass

class MissingRequiredChannel(GloError):
    pass

class LayoutError(GloError):
    pass


@dataclass(eq=False)
class SubFile:
    block_addresses: typing.List[int]
    block_size: int
    name_length: int
    name: str = ''

    def is_valid(self):
        return bool(self.block_addresses) and self.block_addresses[0] != 0

@dataclass(eq=False)
class ChannelFormat:
    name: str
    size: int # bytes per sample
    min: float
    max: float
    signed: int
    units: str
    value_per_bit: float = 1.

    @property
    def range(self):
        return self.max - self.min

@dataclass(eq=False)
class LogRecord:
    timecode: int # ms
    raw: int
    value: float

@dataclass(eq=False)
class Channel:
    format: ChannelFormat
    records: typing.Dict[int, LogRecord] = field(default_factory=dict)

    @property
    def name(self):
        return self.format.name

    @property
    def units(self):
        return self.format.units

@dataclass(eq=False)
class MapCell:
    address: int
    samples: typing.List[LogRecord] = field(default_factory=list)

@dataclass(eq=False)
class LogFile:
    channels: typing.Dict[str, Channel]
    metadata: typing.Dict[str, str]
    file_name: str
