"""
Tests for light and corona decoding
"""

import pytest

from rfl_decoder import decode_level
from rfl_decoder.base.cursor import Cursor
from rfl_decoder.chunks.lights import CoronaDecoder
from rfl_decoder.config import DecodeConfig
from rfl_decoder.models import LightType, Vec3

from conftest import (
    ALTERNATE_REVISION,
    LEGACY_REVISION,
    build_level,
    corona_record,
    i32,
    light_record,
    section,
)


def lights_section(*records: bytes) -> bytes:
    return section(0x300, i32(len(records)) + b''.join(records))


class TestLights:
    """Test the light section"""

    def test_legacy_light_fields(self):
        data = build_level(LEGACY_REVISION, [lights_section(light_record(5, light_range=12.0, on_intensity=0.75))])
        light = decode_level(data).lights[0]
        assert light.uid == 5
        assert light.class_name == "Light"
        assert light.dynamic
        assert light.fade
        assert not light.shadow_casting
        assert light.enabled
        assert light.type == LightType.POINT
        assert light.range == 12.0
        assert light.on_intensity == 0.75
        assert light.fov == 45.0
        assert light.tube_width == 4.0

    def test_light_type_and_state_bits(self):
        flags = 0x4 | (LightType.SPOT << 4) | (3 << 8) | 0x2000
        data = build_level(LEGACY_REVISION, [lights_section(light_record(1, flags=flags))])
        light = decode_level(data).lights[0]
        assert light.type == LightType.SPOT
        assert light.shadow_casting
        assert light.initial_state == 3
        assert light.runtime_shadow

    def test_alternate_intensity_and_range(self):
        data = build_level(ALTERNATE_REVISION, [lights_section(light_record(1, light_range=10.0, on_intensity=2.0))])
        light = decode_level(data, DecodeConfig(light_scale=1.5)).lights[0]
        assert light.on_intensity == pytest.approx(3.0)
        assert light.range == pytest.approx(30.0)

    def test_legacy_values_untouched_by_light_scale(self):
        data = build_level(LEGACY_REVISION, [lights_section(light_record(1, light_range=10.0, on_intensity=2.0))])
        light = decode_level(data, DecodeConfig(light_scale=1.5)).lights[0]
        assert light.on_intensity == 2.0
        assert light.range == 10.0


class TestCoronas:
    """Test the corona section"""

    def test_corona_fields(self):
        record = corona_record(9, color=(255, 0, 0, 255), cone_angle=40.0, intensity=2.0,
                               forward=(0.0, 0.0, 3.0), position=(1.0, 2.0, 3.0), volumetric="vol.tga")
        cursor = Cursor(record)
        corona = CoronaDecoder.read_corona(cursor)
        assert cursor.at_end
        assert corona.uid == 9
        assert corona.position == Vec3(1.0, 2.0, 3.0)
        assert corona.orientation.forward == Vec3(0.0, 0.0, 3.0)
        assert corona.orientation.up == Vec3(0.0, 1.0, 0.0)
        assert corona.color.r == 1.0
        assert corona.color.g == 0.0
        assert corona.corona_bitmap == "corona.tga"
        assert corona.cone_angle == 40.0
        assert corona.intensity == 2.0
        assert corona.volumetric_bitmap == "vol.tga"
        assert corona.volumetric_height == 2.0
        assert corona.volumetric_length == 3.0

    def test_legacy_coronas_are_kept_without_conversion(self):
        body = i32(1) + corona_record(3)
        scene = decode_level(build_level(LEGACY_REVISION, [section(0x7678, body)]))
        assert len(scene.coronas) == 1
        assert scene.lights == []
