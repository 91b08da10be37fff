# structs.py

from construct import (
    Adapter,
    Array,
    Byte,
    Float32l,
    Int16ul,
    Int32sl,
    Int32ul,
    Padding,
    Struct,
)

from ..models import Color

LEVEL_MAGIC = 0xD4BADA55


# Utility adapters
class ColorAdapter(Adapter):
    """Four bytes normalized to a 0..1 Color"""

    def _decode(self, obj, context, path):
        return Color(obj[0] / 255.0, obj[1] / 255.0, obj[2] / 255.0, obj[3] / 255.0)

    def _encode(self, obj, context, path):
        return [int(round(c * 255.0)) for c in obj]


class ClampedColorAdapter(Adapter):
    """Three i32 color channels clamped to 0..255"""

    def _decode(self, obj, context, path):
        return tuple(max(0, min(255, c)) for c in obj)

    def _encode(self, obj, context, path):
        return list(obj)


RGBAColor = ColorAdapter(Byte[4])
BakedColor = ClampedColorAdapter(Int32sl[3])

# Fixed part of the file header, followed by the level name (and mod name)
LevelHeader = Struct(
    "magic" / Int32ul,
    "version" / Int32sl,
    "timestamp" / Int32ul,
    "player_start_offset" / Int32sl,
    "level_info_offset" / Int32sl,
    "num_sections" / Int32sl,
    "sections_size" / Int32sl,
)

SectionHeader = Struct(
    "type" / Int32sl,
    "size" / Int32sl,
)

# Leading block shared by both face layouts
FaceHeader = Struct(
    "plane" / Float32l[4],
    "texture_index" / Int32sl,
    "surface_index" / Int32sl,
    "face_id" / Int32sl,
    Padding(4),
)

LegacyFaceTail = Struct(
    Padding(4),
    "portal_index" / Int32sl,
    "flags" / Int16ul,
    Padding(2),
    "smoothing_groups" / Int32ul,
    "room_index" / Int32sl,
    "vertex_count" / Int32sl,
)

# Everything in a light record after the flag word
LightBody = Struct(
    "color" / RGBAColor,
    "range" / Float32l,
    "fov" / Float32l,
    "fov_dropoff" / Float32l,
    "intensity_at_max_range" / Float32l,
    "dropoff_type" / Int32sl,
    "tube_width" / Float32l,
    "on_intensity" / Float32l,
    "on_time" / Float32l,
    "on_time_variation" / Float32l,
    "off_intensity" / Float32l,
    "off_time" / Float32l,
    "off_time_variation" / Float32l,
)

CoronaBody = Struct(
    "cone_angle" / Float32l,
    "intensity" / Float32l,
    "radius_distance" / Float32l,
    "radius_scale" / Float32l,
    "diminish_distance" / Float32l,
)

ParticleMotion = Struct(
    "spawn_delay" / Float32l,
    "spawn_randomize" / Float32l,
    "velocity" / Float32l,
    "velocity_randomize" / Float32l,
    "acceleration" / Float32l,
    "decay" / Float32l,
    "decay_randomize" / Float32l,
    "radius" / Float32l,
    "radius_randomize" / Float32l,
    "growth_rate" / Float32l,
    "gravity_multiplier" / Float32l,
    "random_direction" / Float32l,
    "particle_color" / RGBAColor,
    "fade_color" / RGBAColor,
    "emitter_flags" / Int32ul,
    "particle_flags" / Int16ul,
    "packed_response" / Int16ul,
)

ParticleTiming = Struct(
    "initially_on" / Byte,
    "time_on" / Float32l,
    "time_on_randomize" / Float32l,
    "time_off" / Float32l,
    "time_off_randomize" / Float32l,
    "active_distance" / Float32l,
)

KeyframeTiming = Struct(
    "pause_time" / Float32l,
    "depart_travel_time" / Float32l,
    "return_travel_time" / Float32l,
    "acceleration_time" / Float32l,
    "deceleration_time" / Float32l,
    "event_uid" / Int32sl,
    "item_uid_1" / Int32sl,
    "item_uid_2" / Int32sl,
    "degrees_about_axis" / Float32l,
)

RespawnTail = Struct(
    "team" / Int32sl,
    "red_team" / Byte,
    "blue_team" / Byte,
    "bot" / Byte,
)

FogSettings = Struct(
    "fog_color" / Byte[4],
    "fog_near" / Float32l,
    "fog_far" / Float32l,
)

SunSettings = Struct(
    "sun_color" / Byte[4],
    "sun_yaw" / Float32l,
    "sun_pitch" / Float32l,
    "sun_intensity" / Float32l,
    "sun_spread" / Float32l,
    "hardlight_color" / Byte[4],
    "hardlight_intensity" / Int32sl,
    "lightmap_multiplier" / Float32l,
)

# Baked triangle vertex of the vertex-colour lightmap section
BakedTriangleVertex = Struct(
    "indices" / Int32sl[3],
    "colors" / Array(3, BakedColor),
    "uvs" / Float32l[6],
    "alpha" / Int32sl,
    Padding(12),
)

BakedEntryHeader = Struct(
    "face_vertex_count" / Int32sl,
    "triangle_vertex_count" / Int32sl,
    "texture_index" / Int32sl,
    "unknown1" / Int32sl,
    "unknown2" / Int32sl,
)
