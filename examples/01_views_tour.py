import numpy as np

from sliceview import ALL, NEWAXIS, DenseArray, Keep, Range, noalias, view

# A (3, 4) row-major grid holding 1..12
grid = DenseArray(np.arange(1, 13).reshape(3, 4))

# Row 1, columns 1..3
row = view(grid, 1, Range(1, 4))
print("row:", list(row), "shape:", row.shape, "layout:", row.layout.value)

# Insert an axis and pick a column; strides of length-1 axes are 0
column = view(grid, ALL, NEWAXIS, 2)
print("column:", list(column), "strides:", column.strides)

# Selector strings go through the same machinery
corners = view(grid, "keep(0, -1), keep(0, -1)")
print("corners:", np.asarray(corners).tolist(), "kind:", corners.kind.value)

# Views of views resolve down to the grid
inner = view(grid, Range(None, None, -1))
outer = view(inner, 0, Range(0, 4, 2))
print("nested:", list(outer), "base index of (1,):", outer.base_index((1,)))

# Writes go through to the grid; the copy is alias safe by default
view(grid, Range(1, 3))[...] = view(grid, Range(0, 2))
print("after overlapping copy:\n", np.asarray(grid))

# noalias skips the temporary for non-overlapping operands
noalias(view(grid, 0))[...] = view(grid, 2)
view(grid, Keep(1), ALL).fill(0)
print("final:\n", np.asarray(grid))
