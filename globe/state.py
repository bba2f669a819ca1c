"""
Scene parameters and the plain records a generation pass produces.

SceneParams is the only input to generation. It is immutable: editing
surfaces build a new value on every change instead of mutating fields,
so the generator never observes a half-applied edit.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Literal, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

NodeShape = Literal["sphere", "box", "tetrahedron"]
ConnectionType = Literal["none", "horizontal", "vertical"]

NODE_SHAPES: tuple[str, ...] = ("sphere", "box", "tetrahedron")
CONNECTION_TYPES: tuple[str, ...] = ("none", "horizontal", "vertical")

# Declared (min, max) for every range-limited numeric field
_RANGES: dict[str, tuple[float, float]] = {
    "num_stripes": (0, 20),
    "ring_thickness": (0.01, 0.2),
    "wireframe_segments": (8, 48),
    "node_size": (0.01, 0.2),
    "node_interval": (1, 10),
    "polar_size_multiplier": (1.0, 5.0),
    "connection_thickness": (0.0, math.inf),
    "inner_sphere_ratio": (0.1, 0.8),
    "inner_sphere_connection_opacity": (0.0, 1.0),
}
_INT_FIELDS = {"num_stripes", "wireframe_segments", "node_interval"}
_ENUMS: dict[str, tuple[str, ...]] = {
    "node_shape": NODE_SHAPES,
    "connection_type": CONNECTION_TYPES,
}
_COLOR_FIELDS = ("equator_color", "pole_color", "inner_sphere_connection_color")
_BOOL_FIELDS = (
    "is_rotating",
    "show_wireframe",
    "show_nodes",
    "show_inner_sphere",
    "polar_size_variation",
    "polar_coloring",
    "inner_sphere_wireframe",
    "connect_to_inner_sphere",
)
_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0"}
_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def normalize_hex(value: str) -> str:
    """Normalize '#abc' / 'aabbcc' / '#AABBCC' to '#AABBCC'. Raises ValueError."""
    match = _HEX_RE.match(value.strip())
    if not match:
        raise ValueError(f"not a hex colour: {value!r}")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return "#" + digits.upper()


class SceneParams(BaseModel):
    """
    Every tunable parameter of the globe scene.

    Out-of-range numbers are clamped, unknown enum values and malformed
    colours fall back to the field default. Nothing here ever raises for
    bad input: a visible-but-valid scene is preferred over failure.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # Rotation is consumed by the host, not by generation
    is_rotating: bool = True
    rotation_speed: float = 0.1

    num_stripes: int = 8
    ring_thickness: float = 0.04

    show_wireframe: bool = False
    show_nodes: bool = False
    show_inner_sphere: bool = False
    wireframe_segments: int = 24

    node_size: float = 0.05
    node_interval: int = 1
    node_shape: NodeShape = "sphere"
    polar_size_variation: bool = False
    polar_size_multiplier: float = 3.0
    polar_coloring: bool = True
    equator_color: str = "#FFFFFF"
    pole_color: str = "#808080"

    connection_type: ConnectionType = "none"
    connection_thickness: float = 0.01

    inner_sphere_ratio: float = 0.3
    inner_sphere_wireframe: bool = True
    connect_to_inner_sphere: bool = False
    inner_sphere_connection_color: str = "#FFFFFF"
    inner_sphere_connection_opacity: float = 0.3

    # ── Validation ───────────────────────────────────────────────────

    @field_validator(*_RANGES, mode="before")
    @classmethod
    def _clamp_to_range(cls, value: Any, info: ValidationInfo) -> Any:
        name = info.field_name
        lo, hi = _RANGES[name]
        default = cls.model_fields[name].default
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning("%s=%r is not numeric; using default %r", name, value, default)
            return default
        if math.isnan(number):
            logger.warning("%s is NaN; using default %r", name, default)
            return default

        clamped = min(max(number, lo), hi)
        if math.isinf(clamped):
            logger.warning("%s=%r is unbounded; using default %r", name, value, default)
            return default
        if name in _INT_FIELDS:
            clamped = int(round(clamped))
        if clamped != number:
            logger.warning("%s=%r clamped to %r", name, value, clamped)
        return clamped

    @field_validator(*_ENUMS, mode="before")
    @classmethod
    def _known_choice(cls, value: Any, info: ValidationInfo) -> Any:
        name = info.field_name
        choices = _ENUMS[name]
        if isinstance(value, str) and value.strip().lower() in choices:
            return value.strip().lower()
        default = cls.model_fields[name].default
        logger.warning("%s=%r is not one of %s; using %r", name, value, choices, default)
        return default

    @field_validator(*_BOOL_FIELDS, mode="before")
    @classmethod
    def _valid_flag(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            word = value.strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
        default = cls.model_fields[info.field_name].default
        logger.warning("%s=%r is not a boolean; using %r", info.field_name, value, default)
        return default

    @field_validator("rotation_speed", mode="before")
    @classmethod
    def _finite_speed(cls, value: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = math.nan
        if isinstance(value, bool) or not math.isfinite(number):
            logger.warning("%s=%r is not a finite number; using %r", info.field_name, value, default)
            return default
        return number

    @field_validator(*_COLOR_FIELDS, mode="before")
    @classmethod
    def _valid_color(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str):
            try:
                return normalize_hex(value)
            except ValueError:
                pass
        default = cls.model_fields[info.field_name].default
        logger.warning("%s=%r is not a hex colour; using %r", info.field_name, value, default)
        return default

    # ── Conversions ──────────────────────────────────────────────────

    @property
    def radial_connections_enabled(self) -> bool:
        """Radial connections need the inner sphere to be visible."""
        return self.show_inner_sphere and self.connect_to_inner_sphere

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SceneParams:
        """Build params from snake_case or camelCase keys; unknown keys are ignored."""
        known = set(cls.model_fields) | {to_camel(name) for name in cls.model_fields}
        return cls.model_validate({k: v for k, v in d.items() if k in known})

    def replace(self, **changes: Any) -> SceneParams:
        """Return a new, re-validated value with ``changes`` applied."""
        by_alias = {to_camel(name): name for name in type(self).model_fields}
        changes = {by_alias.get(k, k): v for k, v in changes.items()}
        return self.from_dict({**self.to_dict(), **changes})


class Point3(NamedTuple):
    """A model-space position relative to the sphere centre."""
    x: float
    y: float
    z: float

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> Point3:
        n = self.length()
        if n == 0.0:
            return Point3(0.0, 0.0, 0.0)
        return Point3(self.x / n, self.y / n, self.z / n)

    def scaled(self, factor: float) -> Point3:
        return Point3(self.x * factor, self.y * factor, self.z * factor)

    def distance_to(self, other: Point3) -> float:
        return math.sqrt(
            (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2
        )


@dataclass(frozen=True)
class RingSpec:
    """One torus wrapped around the sphere at a fixed tilt."""
    index: int
    tilt_angle: float
    twist_angle: float
    major_radius: float
    minor_radius: float
    radial_segments: int
    tubular_segments: int


@dataclass(frozen=True)
class SurfaceNode:
    """A sampled surface point with its derived size and colour."""
    position: Point3
    normalized_polar_distance: float  # |y| / radius, in [0, 1]
    size: float
    color: str  # "#RRGGBB"


@dataclass(frozen=True)
class ConnectionSegment:
    start: Point3
    end: Point3
    color: str
    opacity: float
    width: float
    kind: str = "peer"  # "peer" | "radial"


@dataclass(frozen=True)
class SphereDescriptor:
    radius: float
    segments: int
    wireframe: bool
    color: str = "#FFFFFF"


@dataclass(frozen=True)
class SceneBundle:
    """
    Complete output of one generation pass.

    A value: the renderer owns whatever resources it derives from it,
    and releases them before accepting the next bundle.
    """
    params: SceneParams
    sphere_radius: float
    rings: tuple[RingSpec, ...] = ()
    outer_sphere: Optional[SphereDescriptor] = None
    inner_sphere: Optional[SphereDescriptor] = None
    nodes: tuple[SurfaceNode, ...] = ()
    node_shape: str = "sphere"
    peer_connections: tuple[ConnectionSegment, ...] = ()
    radial_connections: tuple[ConnectionSegment, ...] = ()
