import numpy as np

from sliceview import ALL, DenseArray, Drop, Range, view

# A fake 8x8 RGB image stored column-major
pixels = np.arange(8 * 8 * 3, dtype=np.float32).reshape(8, 8, 3)
image = DenseArray(pixels, layout="column_major")

# Every other pixel of the green channel
green = view(image, Range(0, 8, 2), Range(0, 8, 2), 1)
print("green tile:", green.shape, green.layout.value)

# Top-left quadrant, channels without blue
quadrant = view(image, Range(0, 4), Range(0, 4), Drop(2))
print("quadrant:", quadrant.shape, quadrant.kind.value)

# Column-major enumeration follows the memory order of the quadrant rows
first = list(view(image, Range(0, 2), 0, 0).elements("column_major"))
print("first column pixels:", first)

# Darken the red channel in place
red = view(image, ALL, ALL, 0)
red[...] = np.asarray(red) * 0.5
print("mean red:", float(np.asarray(red).mean()))
