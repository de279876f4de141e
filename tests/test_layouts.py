# Copyright 2025, the glo2csv authors.  MIT License (see LICENSE).

import pytest

from glodata import base
from glodata import layouts


def test_default_afr():
    lay = layouts.default_layout()
    assert lay.name == 'afr'
    assert lay.title == 'AFR Map'
    assert (lay.load_channel, lay.speed_channel, lay.value_channel) == \
        ('Engine Load', 'Engine Speed', 'Lambda1')
    assert lay.load_axis == [35, 59, 87, 95, 103, 111, 119, 127, 135, 143, 151]
    assert lay.speed_axis[:4] == [600, 800, 1000, 1200]
    assert lay.speed_axis[-1] == 8000
    assert len(lay.load_axis) * len(lay.speed_axis) == 231
    assert all(isinstance(v, float) for v in lay.load_axis + lay.speed_axis)


LAYOUT = '''
boost:
  title: Boost Map
  load_channel: Throttle
  speed_channel: Engine Speed
  value_channel: Boost
  load_axis: [10, 50, 100]
  speed_axis: [2000, 4000.5]
'''

def test_parse_layouts():
    lay = layouts.parse_layouts(LAYOUT)['boost']
    assert lay.load_label == 'Load'
    assert lay.speed_label == 'Speed'
    assert lay.speed_axis == [2000.0, 4000.5]
    assert lay.load_axis == [10.0, 50.0, 100.0]
    assert layouts.parse_layouts('') == {}


@pytest.mark.parametrize('axis', ['[]', '[10, 10, 20]', '[30, 20]'])
def test_bad_axis(axis):
    with pytest.raises(ValueError):
        layouts.parse_layouts(LAYOUT.replace('[10, 50, 100]', axis))


def test_load_user_layouts(tmp_path):
    path = tmp_path / 'maps.yaml'
    path.write_text(LAYOUT + '''
afr:
  title: Small AFR
  load_channel: Engine Load
  speed_channel: Engine Speed
  value_channel: Lambda1
  load_axis: [50, 100]
  speed_axis: [3000, 6000]
''')
    maps = layouts.load_layouts(str(path))
    assert sorted(maps) == ['afr', 'boost']
    # user entries replace the built in ones
    assert maps['afr'].title == 'Small AFR'
    assert layouts.default_layout().title == 'AFR Map'


@pytest.mark.parametrize('text', [
    None, # file does not exist
    'boost: [1, 2',
    '- just\n- a list\n',
    'boost:\n  title: Boost Map\n',
    LAYOUT.replace('[2000, 4000.5]', '[4000, 2000]'),
])
def test_load_bad_user_layouts(tmp_path, text):
    path = tmp_path / 'maps.yaml'
    if text is not None:
        path.write_text(text)
    with pytest.raises(base.LayoutError) as info:
        layouts.load_layouts(str(path))
    assert str(path) in str(info.value)
