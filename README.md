# quarrysim

Tools for preparing and driving a quarry simulation: loading rock survey data
from CSV, turning it into a terrain heightmap and triangle mesh, storing
excavator and truck accessory definitions as RON text, and modelling the
controls of excavators, dump trucks and four-wheeled vehicles. The package has
no dependencies outside the standard library.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Rock data and terrain

`quarrysim.rocks` reads two CSV files with a header row (extra columns are
ignored):

- broken rocks: columns `x`, `y`, `z`, `id` → `BrokenRock`
- unbroken rock blocks: columns `x`, `y`, `z`, `dx`, `dy`, `dz`, `id`
  (block centre and size) → `UnbrokenRock`

A missing column, a row with the wrong number of fields, an invalid number or
an `id` outside the unsigned 32-bit range raises `ValueError`.

```python
from quarrysim.rocks import load_all_rocks, generate_heightmap

rocks, blocks = load_all_rocks("unbroken.csv", "broken.csv")
heights, (dim_x, dim_y) = generate_heightmap(blocks, 1.0)
```

`load_broken_rocks` and `load_unbroken_rocks` read one file each.
`min_max_bounds` gives the component-wise minimum and maximum of the unbroken
block centres. `load_all_rocks` uses that minimum to shift the data: the broken
rocks, returned as `RockData` (a `translation` triple and the rock id as
`metadata`), are moved by the whole minimum corner; the unbroken blocks are
moved along z only.

`generate_heightmap(blocks, sampling_interval)` samples the top surface of the
blocks on a regular grid. It returns a flat list of heights, with x varying
fastest (cell `(i, j)` at index `i + j * dim_x`), and the grid dimensions
`(dim_x, dim_y)`. Cells no block covers hold the lowest block bottom.

`quarrysim.heightfield` turns a heightmap into a triangle mesh:

```python
from quarrysim.heightfield import to_mapdef_alternative

mapdef = to_mapdef_alternative(rocks, heights, (dim_x, dim_y))
mapdef.floor_vtx   # vertex positions, z up, spanning [0, dim_x] x [0, dim_y]
mapdef.floor_idx   # triangles as index triples
mapdef.rocks       # SebRock entries with unit size
```

`heightfield_to_trimesh(heights, nrows, ncols, scale)` gives the raw mesh of a
height grid centred on the origin (heights along y, two triangles per cell).
It raises `ValueError` for a grid smaller than 2×2 or a height list of the
wrong length.

## Accessory controls

`quarrysim.accessory` models the moving parts of vehicles. A
`RotationControlDef` describes one joint: its node name, rotation axis,
optional `(min, max)` angle limits, default angle and sensitivities.
`clamp_angle`, `get_default_knob` and `remap_in_range` work within those
limits. A `ControlKnob` holds a current and a desired value; `smooth_move`
eases the current value towards the desired one and returns the joint's
rotation as a `Quat` (which can `rotate` a vector).

`ExcavatorDef` groups the swing, boom, stick, bucket base and bucket jaw joints
plus a tuple of `LookAtDef` pairs; `ExcavatorControls` holds one knob for each
joint. `TruckDef` and `TruckControls` do the same for a truck's dump body.

```python
from quarrysim.accessory import Key

controls.integrate_inputs(dt, {Key.KEY_Y, Key.KEY_T}, excavator_def)
rotations = controls.propagate(excavator_def, dt)   # {"boom": Quat, ...}
```

Excavator keys: T/G swing, Y/H boom, U/J stick, I/K bucket base, O/L bucket
jaw. Truck keys: T/G dump. `add` combines two sets of controls, keeping every
value except the excavator swing within 0 to 1. `TruckControls.propagate`
returns the dump rotation.

## Reading and writing definitions

`quarrysim.defs_io` stores excavator and truck definitions as RON text:

```python
from quarrysim.defs_io import save_def, load_excavator_def, default_excavator_controls

save_def(excavator_def, "excavator.excavatordef.ron")
excavator_def = load_excavator_def("excavator.excavatordef.ron")
controls = default_excavator_controls(excavator_def)
```

`def_to_ron`, `excavator_def_from_ron` and `truck_def_from_ron` work on
strings; `load_truck_def` and `default_truck_controls` cover trucks. An
unreadable file or malformed input raises `DefLoadError`.

## Wheeled vehicles

`quarrysim.vehicle` holds the drive model of a four-wheeled vehicle:

```python
from quarrysim.accessory import Key
from quarrysim.vehicle import VehicleController, VehicleControllerParameters

params = VehicleControllerParameters.default().with_crawler(True)
controller = VehicleController(params)
controller.integrate_actions({Key.ARROW_UP}, params)
controller.wheels[0].engine_force
controller.stop()
```

`VehicleControllerParameters.empty()` puts all wheels at the origin;
`with_wheel_positions_for_half_size`, `with_wheel_tuning` and `with_crawler`
return modified copies. In normal mode the arrow keys power and steer the
front wheels; in crawler mode there is no steering and turning adds engine
force to one side only. `WheelTuning` carries the suspension and friction
settings, `Wheel` the state of each wheel, and `VehicleType` names the
supported vehicles: bulldozer, excavator and truck.

## What the package does not do

There is no physics engine, rendering or scene handling: `VehicleController`
only sets engine force, steering and brake values on its wheels, and the
accessory controls only compute rotations. There is no command-line tool;
converting survey CSV files into map files is done by calling the functions
above from Python.