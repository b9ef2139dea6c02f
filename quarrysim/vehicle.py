"""Raycast vehicle parameters, wheel set-up and driving inputs."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Optional

from .accessory import Key

Vec3 = tuple[float, float, float]

_ZERO: Vec3 = (0.0, 0.0, 0.0)
_STEERING_STEP = 0.7


class VehicleType(Enum):
    """The kinds of vehicles in the simulation."""

    BULLDOZER = "Bulldozer"
    EXCAVATOR = "Excavator"
    TRUCK = "Truck"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WheelTuning:
    """Parameters affecting the physical behaviour of a wheel.

    Raise ``suspension_stiffness`` if the suspension does not push the
    vehicle enough, and ``suspension_damping`` if it overshoots. A larger
    ``friction_slip`` gives more instantaneous braking.
    """

    suspension_stiffness: float = 5.88
    suspension_compression: float = 0.83
    suspension_damping: float = 0.88
    max_suspension_travel: float = 5.0
    side_friction_stiffness: float = 1.0
    friction_slip: float = 10.5
    max_suspension_force: float = 6000.0


@dataclass
class Wheel:
    """One wheel of a raycast vehicle, in chassis space."""

    chassis_connection_point: Vec3
    direction_cs: Vec3
    axle_cs: Vec3
    suspension_rest_length: float
    radius: float
    tuning: WheelTuning
    brake: float = 0.0
    engine_force: float = 0.0
    steering: float = 0.0


@dataclass(frozen=True)
class VehicleControllerParameters:
    """Parameters to build a :class:`VehicleController`.

    ``wheel_brake`` holds the front then the back brake. A crawler does not
    steer; turning applies engine force on one side only, as for tracks.
    """

    wheel_positions: tuple[Vec3, Vec3, Vec3, Vec3] = (_ZERO, _ZERO, _ZERO, _ZERO)
    wheel_tuning: WheelTuning = field(default_factory=WheelTuning)
    suspension_rest_length: float = 0.0
    wheel_radius: float = 0.5
    crawler: bool = False
    wheel_brake: tuple[float, float] = (0.25, 0.25)
    engine_force: float = 20.0

    def __post_init__(self) -> None:
        if len(self.wheel_positions) != 4:
            raise ValueError("a vehicle needs exactly 4 wheel positions")
        if len(self.wheel_brake) != 2:
            raise ValueError("wheel_brake needs a front and a back value")

    @staticmethod
    def empty() -> VehicleControllerParameters:
        """Parameters with all wheels at the origin."""
        return VehicleControllerParameters()

    @staticmethod
    def default() -> VehicleControllerParameters:
        """Parameters of a small reference vehicle."""
        hw, hh = 0.3, 0.15
        return VehicleControllerParameters.empty().with_wheel_positions_for_half_size(
            (hw, hh, hw), _ZERO
        )

    def with_wheel_positions_for_half_size(
        self, half_size: Vec3, offset: Vec3
    ) -> VehicleControllerParameters:
        """Place the wheels at the corners of a box of the given half size."""
        width, length, height = half_size
        ox, oy, oz = offset
        corners = (
            (-width * 1.5, length, -height),
            (width * 1.5, length, -height),
            (-width * 1.5, -length, -height),
            (width * 1.5, -length, -height),
        )
        positions = tuple((x + ox, y + oy, z + oz) for x, y, z in corners)
        return replace(
            self,
            wheel_positions=positions,
            suspension_rest_length=height,
            wheel_radius=height / 2.0,
        )

    def with_wheel_tuning(self, wheel_tuning: WheelTuning) -> VehicleControllerParameters:
        return replace(self, wheel_tuning=wheel_tuning)

    def with_crawler(self, is_crawler: bool) -> VehicleControllerParameters:
        return replace(self, crawler=is_crawler)


def _signum(value: float) -> float:
    if math.isnan(value):
        return math.nan
    return math.copysign(1.0, value)


class VehicleController:
    """Wheel state of a raycast vehicle, driven by keyboard inputs."""

    def __init__(
        self, parameters: VehicleControllerParameters, chassis: Optional[Any] = None
    ) -> None:
        self.chassis = chassis
        self.index_up_axis = 1
        self.index_forward_axis = 0
        if not parameters.crawler:
            self.index_up_axis = 2
            self.index_forward_axis = 1
        self.wheels = [
            Wheel(
                chassis_connection_point=position,
                direction_cs=(0.0, 0.0, -1.0),
                axle_cs=(1.0, 0.0, 0.0),
                suspension_rest_length=parameters.suspension_rest_length,
                radius=parameters.wheel_radius,
                tuning=parameters.wheel_tuning,
                brake=parameters.wheel_brake[number // 2],
            )
            for number, position in enumerate(parameters.wheel_positions)
        ]

    def _integrate_actions_crawler(
        self, pressed: set[Key], parameters: VehicleControllerParameters
    ) -> None:
        base = right = left = 0.0
        for key in pressed:
            if key is Key.ARROW_RIGHT:
                left += parameters.engine_force
            elif key is Key.ARROW_LEFT:
                right += parameters.engine_force
            elif key is Key.ARROW_UP:
                base += parameters.engine_force
            elif key is Key.ARROW_DOWN:
                base -= parameters.engine_force
        sign = _signum(base)
        left_force = base + left * sign
        right_force = base + right * sign
        # Wheels are front-left, front-right, back-left, back-right.
        for wheel, force in zip(
            self.wheels, (left_force, right_force, left_force, right_force)
        ):
            wheel.engine_force = force

    def integrate_actions(
        self, pressed: Iterable[Key], parameters: VehicleControllerParameters
    ) -> None:
        """Set engine force and steering from the keys currently held."""
        keys = set(pressed)
        if parameters.crawler:
            self._integrate_actions_crawler(keys, parameters)
            return
        engine_force = 0.0
        steering_angle = 0.0
        for key in keys:
            if key is Key.ARROW_RIGHT:
                steering_angle -= _STEERING_STEP
            elif key is Key.ARROW_LEFT:
                steering_angle += _STEERING_STEP
            elif key is Key.ARROW_UP:
                engine_force += parameters.engine_force
            elif key is Key.ARROW_DOWN:
                engine_force -= parameters.engine_force
        # Front wheels are powered and steering.
        for wheel in self.wheels[:2]:
            wheel.engine_force = engine_force
            wheel.steering = steering_angle

    def stop(self) -> None:
        """Cut engine force and straighten every wheel."""
        for wheel in self.wheels:
            wheel.engine_force = 0.0
            wheel.steering = 0.0