"""
Tests for entity, region, level-wide and lightmap section layouts
"""

import struct

import numpy as np

from rfl_decoder import decode_level
from rfl_decoder.base.cursor import Cursor
from rfl_decoder.chunks.level import LevelInfoDecoder, LevelPropertiesDecoder
from rfl_decoder.chunks.lightmaps import (
    LightmapDecoder,
    baked_to_lightmaps,
    median_baked_color,
    read_baked_lightmaps,
)
from rfl_decoder.chunks.movers import GroupDecoder
from rfl_decoder.chunks.objects import (
    AlternateEventDecoder,
    ClutterDecoder,
    ItemDecoder,
    LegacyEventDecoder,
    RespawnPointDecoder,
    TriggerDecoder,
)
from rfl_decoder.chunks.regions import DecalDecoder, ParticleEmitterDecoder, PushRegionDecoder
from rfl_decoder.models import EditorViewType, PushRegionShape, TriggerShape, Vec3

from conftest import (
    ALTERNATE_REVISION,
    LEGACY_REVISION,
    alternate_level_properties,
    build_level,
    f32,
    i32,
    mat3,
    object_header,
    section,
    uid_list,
    vstring,
)


def u8(*values: int) -> bytes:
    return bytes(values)


def decode(decoder_class, body: bytes, context):
    return decoder_class().decode(Cursor(body), context)


class TestTriggers:
    """Test trigger layouts"""

    def test_legacy_box_trigger(self, legacy_context):
        record = i32(21) + vstring("door") + u8(0) + i32(TriggerShape.BOX) + f32(2.5) + i32(-1)
        record += u8(1) + vstring("key_red") + u8(1, 2, 0, 1, 0)
        record += f32(1.0, 2.0, 3.0) + mat3() + f32(4.0, 5.0, 6.0) + u8(1)
        record += i32(-1, 99, -1) + u8(0) + f32(0.5, 1.5) + i32(1) + uid_list([30, 31])

        trigger, = decode(TriggerDecoder, i32(1) + record, legacy_context)
        assert trigger.uid == 21
        assert trigger.script_name == "door"
        assert trigger.shape == TriggerShape.BOX
        assert trigger.resets_after == 2.5
        assert trigger.use_key_is_required
        assert trigger.key_name == "key_red"
        assert trigger.weapon_activates
        assert trigger.activated_by == 2
        assert trigger.is_auto
        assert trigger.position == Vec3(1.0, 2.0, 3.0)
        assert (trigger.box_height, trigger.box_width, trigger.box_depth) == (4.0, 5.0, 6.0)
        assert trigger.one_way
        assert trigger.attached_to_uid == 99
        assert trigger.inside_time == 1.5
        assert trigger.team == 1
        assert trigger.links == [30, 31]

    def test_alternate_sphere_trigger(self, alternate_context):
        record = i32(5) + vstring("") + u8(0) + i32(TriggerShape.SPHERE) + f32(0.0) + i32(1)
        record += u8(0) + u8(3) + b'abc' + u8(1)
        record += f32(0.0, 0.0, 0.0) + f32(7.5)
        record += i32(-1, -1, -1) + u8(1) + f32(0.0, 2.0)
        record += u8(4) + struct.pack('<HI', 0x11, 0x0008) + uid_list([6])

        trigger, = decode(TriggerDecoder, i32(1) + record, alternate_context)
        assert trigger.shape == TriggerShape.SPHERE
        assert trigger.key_name == "abc"
        assert trigger.activated_by == 1
        assert trigger.sphere_radius == 7.5
        assert trigger.disabled
        assert trigger.is_auto
        assert trigger.unknown['inside_time'] == 2.0
        assert trigger.unknown['flags'] == 0x11
        assert trigger.links == [6]


class TestEvents:
    """Test event layouts"""

    def legacy_event(self, uid, class_name, rotation=True):
        record = i32(uid) + vstring(class_name) + f32(1.0, 2.0, 3.0) + vstring("script") + u8(0)
        record += f32(0.25) + u8(1, 0) + struct.pack('<iiff', 4, 5, 0.5, 0.75)
        record += vstring("one") + vstring("two") + uid_list([8, 9])
        if rotation:
            record += mat3((0.0, 1.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0))
        record += struct.pack('<I', 0xFF00FF00)
        return record

    def test_legacy_events(self, legacy_context):
        body = i32(2) + self.legacy_event(1, "Teleport") + self.legacy_event(2, "Message", rotation=False)
        teleport, message = decode(LegacyEventDecoder, body, legacy_context)

        assert teleport.has_rotation
        assert teleport.rotation.right == Vec3(0.0, 1.0, 0.0)
        assert teleport.raw_color == 0xFF00FF00
        assert teleport.delay == 0.25
        assert teleport.bool1 and not teleport.bool2
        assert (teleport.int1, teleport.int2, teleport.float1, teleport.float2) == (4, 5, 0.5, 0.75)
        assert (teleport.str1, teleport.str2) == ("one", "two")
        assert teleport.links == [8, 9]

        assert not message.has_rotation
        assert message.raw_color == 0xFF00FF00

    def test_alternate_event(self, alternate_context):
        record = i32(3) + vstring("Play_Explosion") + f32(0.0, 0.0, 0.0) + vstring("") + u8(0)
        record += f32(1.0) + i32(11, 12) + u8(0, 1)
        record += struct.pack('<iiiiffi', 1, 2, 13, 14, 0.5, 1.5, 15)
        record += vstring("a") + vstring("b") + vstring("c") + uid_list([40])
        record += mat3() + struct.pack('<I', 7)

        event, = decode(AlternateEventDecoder, i32(1) + record, alternate_context)
        assert event.class_name == "Play_Explosion"
        assert event.bool2
        assert (event.int1, event.int2) == (1, 2)
        assert (event.float1, event.float2) == (0.5, 1.5)
        assert event.unknown == {
            'unknown0': 11, 'unknown1': 12, 'unknown4': 13,
            'unknown5': 14, 'unknown8': 15, 'unknown9': "c",
        }
        assert event.links == [40]
        assert event.has_rotation
        assert event.raw_color == 7

    def test_events_dispatch_by_revision(self):
        legacy = section(0x600, i32(1) + self.legacy_event(1, "Message", rotation=False))
        scene = decode_level(build_level(LEGACY_REVISION, [legacy]))
        assert scene.events[0].class_name == "Message"


class TestPlacedObjects:
    """Test items, clutter and respawn points"""

    def test_alternate_item(self, alternate_context):
        record = object_header(4, "Medical Kit") + i32(1, 30, 0) + b'\x00' * 6
        body = i32(2) + record + record
        items = decode(ItemDecoder, body, alternate_context)
        assert len(items) == 2
        assert items[0].class_name == "Medical Kit"
        assert items[0].respawn_time == 30

    def test_legacy_clutter(self, legacy_context):
        record = object_header(8, "Barrel") + i32(0) + vstring("rusty") + uid_list([1])
        clutter, = decode(ClutterDecoder, i32(1) + record, legacy_context)
        assert clutter.skin == "rusty"
        assert clutter.links == [1]

    def test_respawn_point(self, legacy_context):
        record = i32(2) + f32(1.0, 1.0, 1.0) + mat3() + vstring("spawn") + u8(0) + i32(0) + u8(1, 0, 1)
        point, = decode(RespawnPointDecoder, i32(1) + record, legacy_context)
        assert point.script_name == "spawn"
        assert point.red_team
        assert not point.blue_team
        assert point.bot


class TestRegions:
    """Test push regions, decals and particle emitters"""

    def test_push_regions(self, legacy_context):
        sphere = object_header(1, "Push Region") + i32(PushRegionShape.SPHERE) + f32(3.0)
        sphere += f32(10.0) + struct.pack('<HH', 0x40 | 0x10, 2)
        box = object_header(2, "Push Region") + i32(PushRegionShape.AXIS_ALIGNED_BOX) + f32(1.0, 2.0, 3.0)
        box += f32(5.0) + struct.pack('<HH', 0x20, 0)

        first, second = decode(PushRegionDecoder, i32(2) + sphere + box, legacy_context)
        assert first.radius == 3.0
        assert first.strength == 10.0
        assert first.jump_pad
        assert first.radial
        assert not first.grounded
        assert first.turbulence == 2
        assert second.extents == Vec3(1.0, 2.0, 3.0)
        assert second.doesnt_affect_player

    def test_alternate_decal(self, alternate_context):
        record = object_header(3, "Decal") + f32(1.0, 1.0, 0.1) + vstring("blood.tga")
        record += i32(128) + u8(1) + i32(2) + f32(0.5) + struct.pack('<fii', 0.0, 0, 0)
        decal, = decode(DecalDecoder, i32(1) + record, alternate_context)
        assert decal.texture == "blood.tga"
        assert decal.alpha == 128
        assert decal.self_illuminated
        assert decal.tiling == 2
        assert decal.scale == 0.5

    def test_particle_emitter_response_nibbles(self, legacy_context):
        record = object_header(6, "Emitter") + i32(0) + f32(1.0, 0.0, 0.0) + vstring("spark.tga")
        record += f32(*range(12)) + u8(255, 0, 0, 255) + u8(0, 0, 255, 255)
        record += struct.pack('<IHH', 0x3, 0x1, 0x1234)
        record += u8(1) + f32(1.0, 0.0, 2.0, 0.0, 50.0)

        emitter, = decode(ParticleEmitterDecoder, i32(1) + record, legacy_context)
        assert emitter.texture == "spark.tga"
        assert emitter.velocity == 2.0
        assert emitter.particle_color.r == 1.0
        assert (emitter.stickiness, emitter.bounciness, emitter.push_effect, emitter.swirliness) == (1, 2, 3, 4)
        assert emitter.initially_on
        assert emitter.active_distance == 50.0


class TestGroups:
    """Test groups and moving data"""

    def test_static_and_moving_groups(self, legacy_context):
        static = vstring("lights") + u8(0, 0) + uid_list([1, 2]) + uid_list([])

        keyframe = i32(100) + f32(0.0, 5.0, 0.0) + mat3() + vstring("") + u8(0)
        keyframe += f32(1.0, 2.0, 2.0, 0.5, 0.5) + i32(-1, -1, -1) + f32(90.0)
        moving = vstring("door") + u8(0, 1)
        moving += i32(1) + keyframe
        moving += i32(1) + i32(7) + f32(0.0, 0.0, 0.0) + mat3()
        moving += u8(1, 0, 0, 1, 0, 0) + i32(2, 0)
        for sound in ("start.wav", "loop.wav", "stop.wav", "close.wav"):
            moving += vstring(sound) + f32(1.0)
        moving += uid_list([7]) + uid_list([3])

        first, second = decode(GroupDecoder, i32(2) + static + moving, legacy_context)
        assert first.name == "lights"
        assert not first.is_moving
        assert first.object_uids == [1, 2]

        data = second.moving_data
        assert second.is_moving
        assert data.keyframes[0].uid == 100
        assert data.keyframes[0].degrees_about_axis == 90.0
        assert data.member_transforms[0].uid == 7
        assert data.is_door
        assert data.use_travel_time_as_speed
        assert data.movement_type == 2
        assert data.close_sound == "close.wav"
        assert second.brush_uids == [3]


class TestLevelSections:
    """Test level properties and level info"""

    def test_legacy_level_properties(self, legacy_context):
        body = vstring("geo.tga") + i32(80) + u8(10, 20, 30, 255) + u8(1)
        body += u8(1, 2, 3, 255) + f32(5.0, 500.0)
        props = decode(LevelPropertiesDecoder, body, legacy_context)
        assert props.geomod_texture == "geo.tga"
        assert props.hardness == 80
        assert props.ambient_color == (10, 20, 30, 255)
        assert props.directional_ambient
        assert props.fog_color == (1, 2, 3, 255)
        assert props.fog_far == 500.0
        assert props.sun_color is None
        assert props.lightmap_multiplier == 1.0

    def test_alternate_level_properties(self, alternate_context):
        props = decode(LevelPropertiesDecoder, alternate_level_properties(lightmap_multiplier=1.5), alternate_context)
        assert props.sun_color == (255, 240, 200, 255)
        assert props.sun_yaw == 45.0
        assert props.hardlight_intensity == 3
        assert props.lightmap_multiplier == 1.5

    def test_level_info(self, legacy_context):
        body = i32(1) + vstring("Mine") + vstring("me") + vstring("01/01/01") + u8(1, 0)
        body += i32(EditorViewType.FREE_LOOK) + f32(1.0, 2.0, 3.0) + mat3()
        for view_type in (EditorViewType.TOP_DOWN, EditorViewType.SIDE_VIEW, EditorViewType.SIDE_VIEW):
            body += i32(view_type) + f32(1.0, 2.0, 3.0, 4.0) + mat3()
        info = decode(LevelInfoDecoder, body, legacy_context)
        assert info.name == "Mine"
        assert info.has_movers
        assert not info.multiplayer
        assert len(info.views) == 4
        assert info.views[0].position == (1.0, 2.0, 3.0)
        assert info.views[1].position == (1.0, 2.0, 3.0, 4.0)


class TestLightmaps:
    """Test raw lightmaps"""

    def test_lightmaps(self, legacy_context):
        body = i32(1) + i32(2, 1) + bytes(range(6))
        lightmap, = decode(LightmapDecoder, body, legacy_context)
        assert (lightmap.width, lightmap.height) == (2, 1)
        assert lightmap.is_complete
        assert lightmap.as_image_array().shape == (1, 2, 3)
        assert lightmap.pixels.tolist() == [0, 1, 2, 3, 4, 5]

    def test_lightmap_clamped_to_section(self, legacy_context, caplog):
        body = i32(2) + i32(2, 1) + bytes(6) + i32(4, 4) + bytes(10)
        first, second = decode(LightmapDecoder, body, legacy_context)
        assert first.is_complete
        assert second.pixels.size == 10
        assert not second.is_complete
        assert "clamping" in caplog.text


def baked_section_body(version: int = 5) -> bytes:
    def vertex(colors):
        data = i32(0, 1, 2)
        for rgb in colors:
            data += i32(*rgb)
        return data + f32(*([0.0] * 6)) + i32(255) + bytes(12)

    body = i32(version)
    if version != 5:
        return body
    body += i32(1, 1) + b'lm_tex.tga\x00'
    body += i32(1) + f32(0.5, 0.5)
    body += i32(0)  # lightmap ids
    body += i32(1)  # entries
    body += i32(3, 2, 0, 0, 0)
    body += f32(0, 0, 0) + f32(1, 0, 0) + f32(0, 1, 0)
    body += bytes(24)
    body += vertex([(10, 20, 30), (300, -5, 30), (10, 20, 30)])
    body += vertex([(50, 50, 50)] * 3)
    return body


class TestBakedLightmaps:
    """Test vertex-colour lightmaps"""

    def test_parse_and_clamp(self):
        data = read_baked_lightmaps(Cursor(baked_section_body()))
        assert data.version == 5
        assert data.texture_names == ["lm_tex.tga"]
        assert data.light_probes == [(0.5, 0.5)]
        triangles = list(data.iter_triangles())
        assert len(triangles) == 2
        assert triangles[0].colors[1] == (255, 0, 30)
        assert triangles[0].indices == (0, 1, 2)

    def test_corrupt_texture_count_does_not_stall(self):
        body = bytearray(baked_section_body())
        # texture count 1 -> 0x7F000001
        body[7] = 0x7F
        scene = decode_level(build_level(ALTERNATE_REVISION, [section(0x7900, bytes(body))]))
        assert scene.lightmaps == []

    def test_unsupported_version(self):
        assert read_baked_lightmaps(Cursor(baked_section_body(version=4))) is None

    def test_median(self):
        data = read_baked_lightmaps(Cursor(baked_section_body()))
        assert median_baked_color(data) == (50, 50, 50)

    def test_conversion_to_images(self):
        lightmap, = baked_to_lightmaps(read_baked_lightmaps(Cursor(baked_section_body())))
        assert (lightmap.width, lightmap.height) == (3, 2)
        assert lightmap.is_complete
        image = lightmap.as_image_array()
        assert image[0, 1].tolist() == [255, 0, 30]
        assert image.dtype == np.uint8

    def test_alternate_level(self):
        scene = decode_level(build_level(ALTERNATE_REVISION, [section(0x7900, baked_section_body())]))
        assert scene.median_baked_color == (50, 50, 50)
        assert scene.recommended_ambient == (75, 75, 75)
        assert len(scene.lightmaps) == 1

    def test_not_decoded_on_legacy(self):
        scene = decode_level(build_level(LEGACY_REVISION, [section(0x7900, baked_section_body())]))
        assert scene.lightmaps == []
        assert scene.median_baked_color is None
