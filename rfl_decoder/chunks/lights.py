"""
Light and corona section decoders
"""

import logging

from .base_decoder import SectionDecoder
from ..base.structs import CoronaBody, LightBody
from ..models import Corona, Light, LightType, Mat3, Vec3

logger = logging.getLogger(__name__)

# Alternate ranges are inverse-square half-intensity distances; legacy ranges are linear cutoffs
ALTERNATE_RANGE_FACTOR = 3.0


class LightDecoder(SectionDecoder):
    """Decoder for the lights section (0x300)"""

    section_type = 0x300
    name = "lights"
    target = "lights"

    def decode(self, cursor, context):
        lights = self.read_records(cursor, lambda c, i: self.read_light(c, context), "lights")
        logger.debug(f"Parsed {len(lights)} lights")
        return lights

    @classmethod
    def read_light(cls, cursor, context) -> Light:
        header = cls.read_object_header(cursor)
        flags = cursor.read_u32()
        body = cursor.read_struct(LightBody)

        light = Light(
            uid=header.uid,
            class_name=header.class_name,
            position=header.position,
            rotation=header.rotation,
            script_name=header.script_name,
            hidden_in_editor=header.hidden_in_editor,
            dynamic=bool(flags & 0x1),
            fade=bool(flags & 0x2),
            shadow_casting=bool(flags & 0x4),
            enabled=bool(flags & 0x8),
            type=LightType((flags >> 4) & 0x3),
            initial_state=(flags >> 8) & 0xF,
            runtime_shadow=bool(flags & 0x2000),
            color=body.color,
            range=body.range,
            fov=body.fov,
            fov_dropoff=body.fov_dropoff,
            intensity_at_max_range=body.intensity_at_max_range,
            dropoff_type=body.dropoff_type,
            tube_width=body.tube_width,
            on_intensity=body.on_intensity,
            on_time=body.on_time,
            on_time_variation=body.on_time_variation,
            off_intensity=body.off_intensity,
            off_time=body.off_time,
            off_time_variation=body.off_time_variation,
        )

        if context.revision.is_alternate:
            light.on_intensity = body.on_intensity * context.config.light_scale
            light.range = body.range * ALTERNATE_RANGE_FACTOR
            logger.debug(
                f"Light {light.uid}: intensity {body.on_intensity} -> {light.on_intensity}, "
                f"range {body.range} -> {light.range}"
            )
        return light


class CoronaDecoder(SectionDecoder):
    """Decoder for the corona section (0x7678)"""

    section_type = 0x7678
    name = "coronas"
    target = "coronas"

    def decode(self, cursor, context):
        coronas = self.read_records(cursor, lambda c, i: self.read_corona(c), "coronas")
        logger.info(f"Parsed {len(coronas)} coronas")
        return coronas

    @staticmethod
    def read_corona(cursor) -> Corona:
        corona = Corona()
        corona.uid = cursor.read_i32()
        corona.name = cursor.read_vstring()
        corona.position = cursor.read_vec3()

        # Stored rows are right, forward (cone direction), up
        rf = cursor.read_floats(9)
        corona.orientation = Mat3(
            right=Vec3(*rf[0:3]),
            up=Vec3(*rf[6:9]),
            forward=Vec3(*rf[3:6]),
        )

        corona.script_name = cursor.read_vstring()
        cursor.read_u8()
        corona.color = cursor.read_color()
        cursor.skip(5)
        corona.corona_bitmap = cursor.read_vstring()

        body = cursor.read_struct(CoronaBody)
        corona.cone_angle = body.cone_angle
        corona.intensity = body.intensity
        corona.radius_distance = body.radius_distance
        corona.radius_scale = body.radius_scale
        corona.diminish_distance = body.diminish_distance

        corona.volumetric_bitmap = cursor.read_vstring()
        if corona.volumetric_bitmap:
            corona.volumetric_height, corona.volumetric_length, _ = cursor.read_floats(3)
        cursor.skip(5)
        return corona
