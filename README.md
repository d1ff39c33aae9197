# relhydro

Building blocks for relativistic hydrodynamics of heavy-ion collisions:

- **Tabulated equations of state.** Each one maps the energy density `e` and the charge densities `nb`, `nq` and `ns` to temperature, chemical potentials and pressure.
- **Hypersurface finding.** This finds the surface elements where a field crosses a given value inside one grid cell in 2D, 3D or 4D. It gives their centroids and outward normals, which point towards lower values. It is typically used to find the freeze-out surface.

The package needs only the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Equations of state

All equations of state derive from `relhydro.eos_grid.EquationOfState` and share one interface:

- `eos(e, nb, nq, ns)` returns a frozen `ThermoState` with the fields `T`, `mub`, `muq`, `mus` and `p`.
- `p(e, nb, nq, ns)` returns the pressure alone.

| Class | Module | Table data |
|---|---|---|
| `EoS1f` | `relhydro.eos_grid` | One file on an (e, nb) grid. `eosranges()` returns the header as `EosRanges`. |
| `EoS3f` | `relhydro.eos_grid` | One file on an (e, nb, nq, ns) grid. The header parameters are checked against the ones you pass in. |
| `EoSChiral` | `relhydro.eos_chiral` | Two `ChiralTable`s, big and small. An ideal gas is used beyond both. |
| `EoSCMFe` | `relhydro.eos_cmfe` | Two `CMFeTable`s, big and small. `NAN` entries are allowed, and an ideal gas is used beyond both. |
| `EoSCMF` | `relhydro.eos_cmf` | One file on a (T, nb) grid. The energy density is inverted to a temperature with `get_temp`. |
| `EoSAZH` | `relhydro.eos_azh` | A directory holding six `AZHTable` files (`aa1_p.dat`, `aa2_p.dat`, `aa1_t.dat`, `aa2_t.dat`, `aa1_mb.dat`, `aa2_mb.dat`). |
| `EoSHadron` | `relhydro.eos_hadron` | One file on logarithmic (e, nb, nq) grids with a status flag per point. |

Example with a single table:

```python
from relhydro.eos_grid import EoS1f

eos = EoS1f("eos/table.dat")
state = eos.eos(1.0, 0.1, 0.0, 0.0)
print(state.T, state.mub, state.p)
pressure = eos.p(1.0, 0.1, 0.0, 0.0)
```

The two-table equations of state take either table objects or file names. The defaults are paths under `eos/`, relative to the working directory.

```python
from relhydro.eos_chiral import ChiralTable, EoSChiral

eos = EoSChiral(
    ChiralTable("eos/chiraleos.dat", 2001, 401),
    ChiralTable("eos/chiralsmall.dat", 201, 201),
)
```

Malformed or inconsistent tables raise `ValueError`. This covers a file that ends early, an `EoS3f` header that does not match the given parameters, and an `EoSHadron` table whose ranges disagree with its header. Reading a table logs a summary through the `logging` module.

## Surface finding

`relhydro.cornelius.Cornelius` works on one cell at a time. You give it the dimension, the surface value and the cell size:

```python
from relhydro.cornelius import Cornelius

finder = Cornelius(2, 0.5, [1.0, 1.0])
count = finder.find_surface_2d([[1.0, 0.0], [1.0, 0.0]])
for centroid, normal in zip(finder.centroids(), finder.normals()):
    print(centroid, normal)
```

- `find_surface_2d`, `find_surface_3d` and `find_surface_4d` take nested 2×…×2 corner values and return the number of elements found.
- `centroids()` and `normals()` give vectors in the dimension of the problem.
- `centroids_4d()` and `normals_4d()` give four components, with the unused leading ones set to zero.
- `centroid_elem(i, j)` and `normal_elem(i, j)` pick single components. They raise `IndexError` if the component does not exist.
- Calling a finder for a dimension other than the initialised one raises `RuntimeError`. `init(dim, value0, dx)` re-initialises the finder.

To write the triangles that build each 3D polygon to a text file, open the file with `init_print`. Then use `find_surface_3d_print(cube, pos)`, where `pos` is the absolute position of the cell's first corner. `Cornelius` is a context manager; `close()` closes the file.

```python
with Cornelius(3, 0.5, [1.0, 1.0, 1.0]) as finder:
    finder.init_print("triangles.txt")
    finder.find_surface_3d_print(cube, [0.0, 10.0, 20.0, 30.0])
```

The pieces the finder is built from can also be used directly:

- `relhydro.surface_cubes`: `Square` and `Cube`.
- `relhydro.cornelius`: `Hypercube`.
- `relhydro.surface_elements`: `Line`, `Polygon` and `Polyhedron`, all with `centroid()` and `normal()`.

## What the package does not do

The package does not evolve a fluid. It has no hydro cells or grid, no time stepping, no initial conditions and no command-line program. The equations of state and the surface finder are libraries for use from your own code. The equation-of-state tables themselves are not included.