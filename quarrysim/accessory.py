"""Accessory definitions and real-time controls for excavators and trucks."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

Vec3 = tuple[float, float, float]

EXCAVATOR_PARTS = ("bucket_jaw", "bucket_base", "stick", "boom", "swing")

# Each input step moves a desired value by this fraction per second of input.
_INPUT_RATE = 0.1


class Key(Enum):
    """Keyboard keys understood by the vehicle and accessory controls."""

    KEY_T = "KeyT"
    KEY_G = "KeyG"
    KEY_Y = "KeyY"
    KEY_H = "KeyH"
    KEY_U = "KeyU"
    KEY_J = "KeyJ"
    KEY_I = "KeyI"
    KEY_K = "KeyK"
    KEY_O = "KeyO"
    KEY_L = "KeyL"
    ARROW_UP = "ArrowUp"
    ARROW_DOWN = "ArrowDown"
    ARROW_LEFT = "ArrowLeft"
    ARROW_RIGHT = "ArrowRight"


def _lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def _divide(numerator: float, denominator: float) -> float:
    """Float division that yields inf or nan instead of raising on zero."""
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    sign = math.copysign(1.0, numerator) * math.copysign(1.0, denominator)
    return math.copysign(math.inf, sign)


def _remap(value: float, in_start: float, in_end: float,
           out_start: float, out_end: float) -> float:
    return _lerp(out_start, out_end, _divide(value - in_start, in_end - in_start))


@dataclass(frozen=True)
class Quat:
    """A rotation quaternion with the scalar part last."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @staticmethod
    def from_axis_angle(axis: Vec3, angle: float) -> Quat:
        """Rotation of ``angle`` radians about ``axis``, which should be unit length."""
        half = angle * 0.5
        s = math.sin(half)
        ax, ay, az = axis
        return Quat(ax * s, ay * s, az * s, math.cos(half))

    def rotate(self, vector: Vec3) -> Vec3:
        """Apply this rotation to a vector."""
        qx, qy, qz, w = self.x, self.y, self.z, self.w
        vx, vy, vz = vector
        # t = 2 * (q.xyz x v)
        tx = 2.0 * (qy * vz - qz * vy)
        ty = 2.0 * (qz * vx - qx * vz)
        tz = 2.0 * (qx * vy - qy * vx)
        # v + w * t + q.xyz x t
        return (
            vx + w * tx + (qy * tz - qz * ty),
            vy + w * ty + (qz * tx - qx * tz),
            vz + w * tz + (qx * ty - qy * tx),
        )


@dataclass
class ControlKnob:
    """A control value in [0, 1] that moves smoothly towards a desired value."""

    current_value: float = 0.0
    desired: float = 0.0

    def smooth_move(self, definition: RotationControlDef, dt: float) -> Quat:
        """Move the current value towards the desired one and return the new rotation."""
        t = min(dt * definition.sensitivity_lerp_mult, 1.0)
        self.current_value = _lerp(self.current_value, self.desired, t)
        return definition.remap_in_range(self.current_value)


@dataclass(frozen=True)
class RotationControlDef:
    """How one node of a model rotates.

    ``node_name`` names the node in the model and should be unique.
    ``sensitivity`` is how fast the desired value moves under input, and
    ``sensitivity_lerp_mult`` how fast the rotation follows it.
    """

    node_name: str
    axis: Vec3
    min_max_angle: Optional[tuple[float, float]] = None
    default_angle: float = 0.0
    sensitivity: float = 1.0
    sensitivity_lerp_mult: float = 1.0

    def clamp_angle(self, angle: float) -> float:
        """Clamp an angle to the allowed range, if there is one."""
        if self.min_max_angle is None:
            return angle
        low, high = self.min_max_angle
        if low > high or math.isnan(low) or math.isnan(high):
            raise ValueError(f"invalid angle range {self.min_max_angle!r}")
        return min(max(angle, low), high)

    def get_default_knob(self) -> ControlKnob:
        """Knob positioned at the default angle, expressed as a ratio of the range."""
        if self.min_max_angle is None:
            return ControlKnob(0.0, 0.0)
        low, high = self.min_max_angle
        value = _remap(self.default_angle, low, high, 0.0, 1.0)
        return ControlKnob(current_value=value, desired=value)

    def remap_in_range(self, rotation: float) -> Quat:
        """Rotation for a ratio in the angle range, or for a raw angle without a range."""
        if self.min_max_angle is None:
            return Quat.from_axis_angle(self.axis, rotation)
        low, high = self.min_max_angle
        return Quat.from_axis_angle(self.axis, _lerp(low, high, rotation))


@dataclass(frozen=True)
class LookAtDef:
    """Names a node that keeps facing another, optionally in both directions."""

    looker: str = ""
    target: str = ""
    both_ways: bool = False


@dataclass(frozen=True)
class ExcavatorDef:
    """Which nodes of an excavator model move, and how."""

    bucket_jaw: RotationControlDef
    bucket_base: RotationControlDef
    stick: RotationControlDef
    boom: RotationControlDef
    swing: RotationControlDef
    look_ats: tuple[LookAtDef, ...] = ()


_EXCAVATOR_KEYS: dict[Key, tuple[str, float]] = {
    Key.KEY_T: ("swing", 1.0),
    Key.KEY_G: ("swing", -1.0),
    Key.KEY_Y: ("boom", 1.0),
    Key.KEY_H: ("boom", -1.0),
    Key.KEY_U: ("stick", 1.0),
    Key.KEY_J: ("stick", -1.0),
    Key.KEY_I: ("bucket_base", 1.0),
    Key.KEY_K: ("bucket_base", -1.0),
    Key.KEY_O: ("bucket_jaw", 1.0),
    Key.KEY_L: ("bucket_jaw", -1.0),
}


def _clamp_unit(value: float) -> float:
    return min(max(value, 0.0), 1.0)


@dataclass
class ExcavatorControls:
    """Real-time knobs of an excavator; swing is an angle, the rest are ratios."""

    bucket_jaw: ControlKnob = field(default_factory=ControlKnob)
    bucket_base: ControlKnob = field(default_factory=ControlKnob)
    stick: ControlKnob = field(default_factory=ControlKnob)
    boom: ControlKnob = field(default_factory=ControlKnob)
    swing: ControlKnob = field(default_factory=ControlKnob)

    def integrate_inputs(self, elapsed: float, pressed: Iterable[Key],
                         definition: ExcavatorDef) -> None:
        """Move desired values according to the keys held during ``elapsed`` seconds."""
        for key in set(pressed):
            binding = _EXCAVATOR_KEYS.get(key)
            if binding is None:
                continue
            part, sign = binding
            sensitivity = getattr(definition, part).sensitivity
            getattr(self, part).desired += sign * _INPUT_RATE * elapsed * sensitivity

    def add(self, other: ExcavatorControls) -> None:
        """Add another set of desired values; all but swing stay within [0, 1]."""
        self.swing.desired += other.swing.desired
        for part in ("boom", "stick", "bucket_base", "bucket_jaw"):
            knob = getattr(self, part)
            knob.desired = _clamp_unit(knob.desired + getattr(other, part).desired)

    def propagate(self, definition: ExcavatorDef, dt: float) -> dict[str, Quat]:
        """Advance every knob by ``dt`` and return the rotation of each part."""
        return {
            part: getattr(self, part).smooth_move(getattr(definition, part), dt)
            for part in EXCAVATOR_PARTS
        }


@dataclass(frozen=True)
class TruckDef:
    """Which nodes of a truck model move, and how."""

    main_dump: RotationControlDef


@dataclass
class TruckControls:
    """Real-time knobs of a truck: the dump angle as a ratio of its range."""

    main_dump: float = 0.0

    def integrate_inputs(self, elapsed: float, pressed: Iterable[Key],
                         definition: TruckDef) -> None:
        """Move the dump according to the keys held during ``elapsed`` seconds."""
        step = _INPUT_RATE * elapsed * definition.main_dump.sensitivity
        for key in set(pressed):
            if key is Key.KEY_T:
                self.main_dump += step
            elif key is Key.KEY_G:
                self.main_dump -= step

    def add(self, other: TruckControls) -> None:
        """Add another dump value, keeping the result within [0, 1]."""
        self.main_dump = _clamp_unit(self.main_dump + other.main_dump)

    def propagate(self, definition: TruckDef) -> Quat:
        """Rotation of the dump for the current control value."""
        return definition.main_dump.remap_in_range(self.main_dump)