"""
Data structures for decoded level scenes
"""

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

import numpy as np


class Vec2(NamedTuple):
    u: float
    v: float


class Vec3(NamedTuple):
    x: float
    y: float
    z: float

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def normalized(self) -> 'Vec3':
        length = self.length_squared() ** 0.5
        if length == 0:
            return self
        return Vec3(self.x / length, self.y / length, self.z / length)


class Color(NamedTuple):
    """RGBA color, components in 0..1"""
    r: float
    g: float
    b: float
    a: float


class Mat3(NamedTuple):
    """3x3 rotation basis stored as rows: right, up, forward"""
    right: Vec3
    up: Vec3
    forward: Vec3


Mat3.IDENTITY = Mat3(Vec3(1.0, 0.0, 0.0), Vec3(0.0, 1.0, 0.0), Vec3(0.0, 0.0, 1.0))
ZERO_VEC3 = Vec3(0.0, 0.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0, 1.0)


class FaceFlags(IntFlag):
    """Per-face flag word (low 16 bits)"""
    SHOW_SKY = 0x01
    MIRRORED = 0x02
    LIQUID_SURFACE = 0x04
    IS_DETAIL = 0x08
    SCROLL_TEXTURE = 0x10
    FULL_BRIGHT = 0x20
    HAS_ALPHA = 0x40
    HAS_HOLES = 0x80
    LIGHTMAP_RESOLUTION_MASK = 0x0300
    IS_INVISIBLE = 0x2000


class SolidFlags(IntFlag):
    PORTAL = 0x1
    AIR = 0x2
    DETAIL = 0x4
    UNK_08 = 0x8
    EMITS_STEAM = 0x10
    GEOABLE = 0x20
    UNK_40 = 0x40
    UNK_200 = 0x200


class LightType(IntEnum):
    """Light type as stored in bits 4-5 of the light flags"""
    UNDEFINED = 0
    POINT = 1
    SPOT = 2
    TUBE = 3


class TriggerShape(IntEnum):
    SPHERE = 0
    BOX = 1


class TriggerActivatedBy(IntEnum):
    PLAYERS_ONLY = 0
    ALL_OBJECTS = 1
    LINKED_OBJECTS = 2
    AI_ONLY = 3
    PLAYER_VEHICLE_ONLY = 4
    GEO_MODS = 5


class TriggerTeam(IntEnum):
    NONE = -1
    TEAM_1 = 0
    TEAM_2 = 1


class PushRegionShape(IntEnum):
    SPHERE = 1
    AXIS_ALIGNED_BOX = 2
    ORIENTED_BOX = 3


class PushRegionFlags(IntFlag):
    MASS_INDEPENDENT = 0x01
    GROUNDED = 0x02
    GROW_TOWARDS_CENTER = 0x04
    GROW_TOWARDS_BOUNDARY = 0x08
    RADIAL = 0x10
    DOESNT_AFFECT_PLAYER = 0x20
    JUMP_PAD = 0x40


class ParticleEmitterShape(IntEnum):
    SPHERE = 0
    PLANE = 1


class EditorViewType(IntEnum):
    FREE_LOOK = 0
    TOP_DOWN = 1
    SIDE_VIEW = 2


@dataclass
class Face:
    """A polygon (or triangle) of a brush"""
    vertices: List[int] = field(default_factory=list)
    uvs: List[Vec2] = field(default_factory=list)
    texture_index: int = 0
    face_id: int = 0
    flags: int = 0
    smoothing_groups: int = 0
    scroll_u: float = 0.0
    scroll_v: float = 0.0

    @property
    def show_sky(self) -> bool:
        return bool(self.flags & FaceFlags.SHOW_SKY)

    @property
    def mirrored(self) -> bool:
        return bool(self.flags & FaceFlags.MIRRORED)

    @property
    def liquid_surface(self) -> bool:
        return bool(self.flags & FaceFlags.LIQUID_SURFACE)

    @property
    def is_detail(self) -> bool:
        return bool(self.flags & FaceFlags.IS_DETAIL)

    @property
    def scroll_texture(self) -> bool:
        return bool(self.flags & FaceFlags.SCROLL_TEXTURE)

    @property
    def full_bright(self) -> bool:
        return bool(self.flags & FaceFlags.FULL_BRIGHT)

    @property
    def has_alpha(self) -> bool:
        return bool(self.flags & FaceFlags.HAS_ALPHA)

    @property
    def has_holes(self) -> bool:
        return bool(self.flags & FaceFlags.HAS_HOLES)

    @property
    def is_invisible(self) -> bool:
        return bool(self.flags & FaceFlags.IS_INVISIBLE)

    @property
    def lightmap_resolution(self) -> int:
        return (self.flags & FaceFlags.LIGHTMAP_RESOLUTION_MASK) >> 8


@dataclass
class Solid:
    textures: List[str] = field(default_factory=list)
    faces: List[Face] = field(default_factory=list)
    flags: int = 0
    life: int = -1
    state: int = 0

    @property
    def is_geoable(self) -> bool:
        return bool(self.flags & SolidFlags.GEOABLE)


@dataclass
class Brush:
    """Static geometry or a single brush/mover"""
    uid: int = 0
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    vertices: List[Vec3] = field(default_factory=list)
    uvs: List[Vec2] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    solid: Solid = field(default_factory=Solid)


@dataclass
class Light:
    uid: int = 0
    class_name: str = ""
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    dynamic: bool = False
    fade: bool = False
    shadow_casting: bool = False
    enabled: bool = False
    type: LightType = LightType.UNDEFINED
    initial_state: int = 0
    runtime_shadow: bool = False
    color: Color = WHITE
    range: float = 0.0
    fov: float = 0.0
    fov_dropoff: float = 0.0
    intensity_at_max_range: float = 0.0
    dropoff_type: int = 0
    tube_width: float = 0.0
    on_intensity: float = 0.0
    on_time: float = 0.0
    on_time_variation: float = 0.0
    off_intensity: float = 0.0
    off_time: float = 0.0
    off_time_variation: float = 0.0


@dataclass
class Corona:
    uid: int = 0
    name: str = ""
    position: Vec3 = ZERO_VEC3
    orientation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    color: Color = WHITE
    corona_bitmap: str = ""
    cone_angle: float = 0.0
    intensity: float = 0.0
    radius_distance: float = 0.0
    radius_scale: float = 0.0
    diminish_distance: float = 0.0
    volumetric_bitmap: str = ""
    volumetric_height: float = 0.0
    volumetric_length: float = 0.0


@dataclass
class Event:
    uid: int = 0
    class_name: str = ""
    position: Vec3 = ZERO_VEC3
    script_name: str = ""
    hidden_in_editor: bool = False
    delay: float = 0.0
    bool1: bool = False
    bool2: bool = False
    int1: int = 0
    int2: int = 0
    float1: float = 0.0
    float2: float = 0.0
    str1: str = ""
    str2: str = ""
    links: List[int] = field(default_factory=list)
    has_rotation: bool = False
    rotation: Mat3 = Mat3.IDENTITY
    raw_color: int = 0
    unknown: Dict[str, object] = field(default_factory=dict)


@dataclass
class Trigger:
    uid: int = 0
    script_name: str = ""
    hidden_in_editor: bool = False
    shape: TriggerShape = TriggerShape.SPHERE
    resets_after: float = 0.0
    resets_times: int = 0
    use_key_is_required: bool = False
    key_name: str = ""
    weapon_activates: bool = False
    activated_by: int = TriggerActivatedBy.PLAYERS_ONLY
    is_npc: bool = False
    is_auto: bool = False
    in_vehicle: bool = False
    position: Vec3 = ZERO_VEC3
    sphere_radius: float = 0.0
    rotation: Mat3 = Mat3.IDENTITY
    box_height: float = 0.0
    box_width: float = 0.0
    box_depth: float = 0.0
    one_way: bool = False
    airlock_room_uid: int = -1
    attached_to_uid: int = -1
    use_clutter_uid: int = -1
    disabled: bool = False
    button_active_time: float = 0.0
    inside_time: float = 0.0
    team: int = TriggerTeam.NONE
    links: List[int] = field(default_factory=list)
    unknown: Dict[str, object] = field(default_factory=dict)


@dataclass
class Item:
    uid: int = 0
    class_name: str = ""
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    count: int = 0
    respawn_time: int = 0
    team_id: int = 0


@dataclass
class Clutter:
    uid: int = 0
    class_name: str = ""
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    skin: str = ""
    links: List[int] = field(default_factory=list)


@dataclass
class RespawnPoint:
    uid: int = 0
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    team: int = 0
    red_team: bool = False
    blue_team: bool = False
    bot: bool = False


@dataclass
class PushRegion:
    uid: int = 0
    class_name: str = ""
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    shape: int = PushRegionShape.SPHERE
    radius: float = 0.0
    extents: Vec3 = ZERO_VEC3
    strength: float = 0.0
    flags: int = 0
    turbulence: int = 0

    @property
    def jump_pad(self) -> bool:
        return bool(self.flags & PushRegionFlags.JUMP_PAD)

    @property
    def doesnt_affect_player(self) -> bool:
        return bool(self.flags & PushRegionFlags.DOESNT_AFFECT_PLAYER)

    @property
    def radial(self) -> bool:
        return bool(self.flags & PushRegionFlags.RADIAL)

    @property
    def grounded(self) -> bool:
        return bool(self.flags & PushRegionFlags.GROUNDED)

    @property
    def mass_independent(self) -> bool:
        return bool(self.flags & PushRegionFlags.MASS_INDEPENDENT)


@dataclass
class ClimbingRegion:
    uid: int = 0
    class_name: str = ""
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    type: int = 0
    extents: Vec3 = ZERO_VEC3


@dataclass
class Decal:
    uid: int = 0
    class_name: str = ""
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    extents: Vec3 = ZERO_VEC3
    texture: str = ""
    alpha: int = 255
    self_illuminated: bool = False
    tiling: int = 0
    scale: float = 1.0


@dataclass
class ParticleEmitter:
    uid: int = 0
    class_name: str = ""
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    shape: int = ParticleEmitterShape.SPHERE
    sphere_radius: float = 0.0
    plane_width: float = 0.0
    plane_depth: float = 0.0
    texture: str = ""
    spawn_delay: float = 0.0
    spawn_randomize: float = 0.0
    velocity: float = 0.0
    velocity_randomize: float = 0.0
    acceleration: float = 0.0
    decay: float = 0.0
    decay_randomize: float = 0.0
    radius: float = 0.0
    radius_randomize: float = 0.0
    growth_rate: float = 0.0
    gravity_multiplier: float = 0.0
    random_direction: float = 0.0
    particle_color: Color = WHITE
    fade_color: Color = WHITE
    emitter_flags: int = 0
    particle_flags: int = 0
    stickiness: int = 0
    bounciness: int = 0
    push_effect: int = 0
    swirliness: int = 0
    initially_on: bool = False
    time_on: float = 0.0
    time_on_randomize: float = 0.0
    time_off: float = 0.0
    time_off_randomize: float = 0.0
    active_distance: float = 0.0


@dataclass
class Keyframe:
    uid: int = 0
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY
    script_name: str = ""
    hidden_in_editor: bool = False
    pause_time: float = 0.0
    depart_travel_time: float = 0.0
    return_travel_time: float = 0.0
    acceleration_time: float = 0.0
    deceleration_time: float = 0.0
    event_uid: int = -1
    item_uid_1: int = -1
    item_uid_2: int = -1
    degrees_about_axis: float = 0.0


@dataclass
class MemberTransform:
    uid: int = 0
    position: Vec3 = ZERO_VEC3
    rotation: Mat3 = Mat3.IDENTITY


@dataclass
class MovingGroupData:
    keyframes: List[Keyframe] = field(default_factory=list)
    member_transforms: List[MemberTransform] = field(default_factory=list)
    is_door: bool = False
    rotate_in_place: bool = False
    starts_backwards: bool = False
    use_travel_time_as_speed: bool = False
    force_orient: bool = False
    no_player_collide: bool = False
    movement_type: int = 0
    starting_keyframe: int = 0
    start_sound: str = ""
    start_volume: float = 0.0
    looping_sound: str = ""
    looping_volume: float = 0.0
    stop_sound: str = ""
    stop_volume: float = 0.0
    close_sound: str = ""
    close_volume: float = 0.0


@dataclass
class Group:
    name: str = ""
    is_moving: bool = False
    moving_data: Optional[MovingGroupData] = None
    object_uids: List[int] = field(default_factory=list)
    brush_uids: List[int] = field(default_factory=list)


@dataclass
class Lightmap:
    """Raw 24-bit lightmap; pixels is a flat uint8 RGB buffer"""
    width: int = 0
    height: int = 0
    pixels: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.uint8))

    @property
    def is_complete(self) -> bool:
        return self.pixels.size == self.width * self.height * 3

    def as_image_array(self) -> np.ndarray:
        """Return pixels shaped (height, width, 3)"""
        return self.pixels.reshape((self.height, self.width, 3))


@dataclass
class WaypointList:
    name: str = ""
    indices: List[int] = field(default_factory=list)


@dataclass
class EditorView:
    view_type: int = EditorViewType.FREE_LOOK
    position: Tuple[float, ...] = ()
    rotation: Mat3 = Mat3.IDENTITY


@dataclass
class LevelInfo:
    unknown: int = 0
    name: str = ""
    author: str = ""
    date: str = ""
    has_movers: bool = False
    multiplayer: bool = False
    views: List[EditorView] = field(default_factory=list)


@dataclass
class LevelProperties:
    geomod_texture: str = ""
    hardness: int = 0
    ambient_color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    directional_ambient: bool = False
    fog_color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    fog_near: float = 0.0
    fog_far: float = 0.0
    sun_color: Optional[Tuple[int, int, int, int]] = None
    sun_yaw: float = 0.0
    sun_pitch: float = 0.0
    sun_intensity: float = 0.0
    sun_spread: float = 0.0
    hardlight_color: Optional[Tuple[int, int, int, int]] = None
    hardlight_intensity: int = 0
    lightmap_multiplier: float = 1.0


@dataclass
class Scene:
    """Everything decoded from one level container"""
    revision: int = 0
    level_name: str = ""
    mod_name: str = ""
    timestamp: int = 0
    brushes: List[Brush] = field(default_factory=list)
    lights: List[Light] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    triggers: List[Trigger] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)
    particle_emitters: List[ParticleEmitter] = field(default_factory=list)
    push_regions: List[PushRegion] = field(default_factory=list)
    climbing_regions: List[ClimbingRegion] = field(default_factory=list)
    decals: List[Decal] = field(default_factory=list)
    clutters: List[Clutter] = field(default_factory=list)
    movers: List[Brush] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    respawn_points: List[RespawnPoint] = field(default_factory=list)
    lightmaps: List[Lightmap] = field(default_factory=list)
    coronas: List[Corona] = field(default_factory=list)
    waypoint_lists: List[WaypointList] = field(default_factory=list)
    level_properties: Optional[LevelProperties] = None
    level_info: Optional[LevelInfo] = None
    median_baked_color: Optional[Tuple[int, int, int]] = None
    recommended_ambient: Optional[Tuple[int, int, int]] = None
    corona_light_count: int = 0

    @property
    def lightmap_multiplier(self) -> float:
        if self.level_properties is None:
            return 1.0
        return self.level_properties.lightmap_multiplier

    def all_uids(self) -> Iterator[int]:
        """Yield the UID of every entity that carries one"""
        uid_lists = (
            self.brushes, self.lights, self.events, self.triggers, self.items,
            self.particle_emitters, self.push_regions, self.climbing_regions,
            self.decals, self.clutters, self.movers, self.respawn_points, self.coronas,
        )
        for records in uid_lists:
            for record in records:
                yield record.uid
        for group in self.groups:
            if group.moving_data is not None:
                for keyframe in group.moving_data.keyframes:
                    yield keyframe.uid
