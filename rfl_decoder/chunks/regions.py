"""
Push region, climbing region, decal and particle emitter decoders
"""

import logging

from .base_decoder import SectionDecoder
from ..base.structs import ParticleMotion, ParticleTiming
from ..models import ClimbingRegion, Decal, ParticleEmitter, PushRegion, PushRegionShape

logger = logging.getLogger(__name__)


class PushRegionDecoder(SectionDecoder):
    """Decoder for push regions (0x1100)"""

    section_type = 0x1100
    name = "push regions"
    target = "push_regions"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_region(c), "push regions")

    @classmethod
    def read_region(cls, cursor) -> PushRegion:
        region = PushRegion(*cls.read_object_header(cursor))
        region.shape = cursor.read_i32()
        if region.shape == PushRegionShape.SPHERE:
            region.radius = cursor.read_f32()
        else:
            region.extents = cursor.read_vec3()
        region.strength = cursor.read_f32()
        region.flags = cursor.read_u16()
        region.turbulence = cursor.read_u16()
        logger.debug(
            f"Push region {region.uid}: shape={region.shape}, strength={region.strength}, "
            f"flags=0x{region.flags:04X}, turbulence={region.turbulence}"
        )
        return region


class ClimbingRegionDecoder(SectionDecoder):
    """Decoder for climbing regions (0xD00)"""

    section_type = 0xD00
    name = "climbing regions"
    target = "climbing_regions"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_region(c), "climbing regions")

    @classmethod
    def read_region(cls, cursor) -> ClimbingRegion:
        region = ClimbingRegion(*cls.read_object_header(cursor, rotation_order="fru"))
        region.type = cursor.read_i32()
        region.extents = cursor.read_vec3()
        return region


class DecalDecoder(SectionDecoder):
    """Decoder for decals (0x1000)"""

    section_type = 0x1000
    name = "decals"
    target = "decals"

    def decode(self, cursor, context):
        decals = self.read_records(cursor, lambda c, i: self.read_decal(c, context), "decals")
        logger.info(f"Parsed {len(decals)} decals")
        return decals

    @classmethod
    def read_decal(cls, cursor, context) -> Decal:
        decal = Decal(*cls.read_object_header(cursor, rotation_order="fru"))
        decal.extents = cursor.read_vec3()
        decal.texture = context.texture_name(cursor.read_vstring())
        decal.alpha = cursor.read_i32()
        decal.self_illuminated = cursor.read_bool()
        decal.tiling = cursor.read_i32()
        decal.scale = cursor.read_f32()
        if context.revision.is_alternate:
            cursor.unpack('fii')
        return decal


class AlternateDecalDecoder(SectionDecoder):
    """Decoder for class-based alternate-revision decals (0xF00)"""

    section_type = 0xF00
    name = "decals"
    target = "decals"

    def decode(self, cursor, context):
        return self.read_records(
            cursor,
            lambda c, i: Decal(*self.read_object_header(c, rotation_order="fru")),
            "decals",
        )


class ParticleEmitterDecoder(SectionDecoder):
    """Decoder for particle emitters (0xA00)"""

    section_type = 0xA00
    name = "particle emitters"
    target = "particle_emitters"

    def decode(self, cursor, context):
        return self.read_records(cursor, lambda c, i: self.read_emitter(c), "particle emitters")

    @classmethod
    def read_emitter(cls, cursor) -> ParticleEmitter:
        e = ParticleEmitter(*cls.read_object_header(cursor))
        e.shape = cursor.read_i32()
        e.sphere_radius, e.plane_width, e.plane_depth = cursor.read_floats(3)
        e.texture = cursor.read_vstring()

        motion = cursor.read_struct(ParticleMotion)
        e.spawn_delay = motion.spawn_delay
        e.spawn_randomize = motion.spawn_randomize
        e.velocity = motion.velocity
        e.velocity_randomize = motion.velocity_randomize
        e.acceleration = motion.acceleration
        e.decay = motion.decay
        e.decay_randomize = motion.decay_randomize
        e.radius = motion.radius
        e.radius_randomize = motion.radius_randomize
        e.growth_rate = motion.growth_rate
        e.gravity_multiplier = motion.gravity_multiplier
        e.random_direction = motion.random_direction
        e.particle_color = motion.particle_color
        e.fade_color = motion.fade_color
        e.emitter_flags = motion.emitter_flags
        e.particle_flags = motion.particle_flags

        # Four nibbles: stickiness, bounciness, push, swirl
        packed = motion.packed_response
        e.stickiness = (packed >> 12) & 0xF
        e.bounciness = (packed >> 8) & 0xF
        e.push_effect = (packed >> 4) & 0xF
        e.swirliness = packed & 0xF

        timing = cursor.read_struct(ParticleTiming)
        e.initially_on = bool(timing.initially_on)
        e.time_on = timing.time_on
        e.time_on_randomize = timing.time_on_randomize
        e.time_off = timing.time_off
        e.time_off_randomize = timing.time_off_randomize
        e.active_distance = timing.active_distance
        return e
