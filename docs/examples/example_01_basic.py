"""# Basic Example.

This example walks through building a Toeplitz matrix, reading and writing
its entries, and traversing it with cursors.

First, the imports.
"""

from torch import manual_seed, rand

from compact_toeplitz.structures.iterators import iterate
from compact_toeplitz.structures.toeplitz import ToeplitzMatrix

manual_seed(0)  # make deterministic

# %%
#
# ## Construction
#
# A Toeplitz matrix is fully described by its first row and its first column.
# Both must agree on the top left entry:

mat = ToeplitzMatrix.from_row_col([1.0, 2.0, 3.0, 4.0], [1.0, 5.0, 6.0])
print(mat.to_dense())

# %%
#
# Instead of `3 * 4 = 12` entries, only one value per diagonal is stored,
# ordered from the bottom left to the top right entry:

print(mat.data)

# %%
#
# ## Element Access
#
# Reading an entry looks up the value of its diagonal. Writing an entry
# therefore changes its entire diagonal:

print(mat[1, 2])
mat[1, 2] = -1.0
print(mat.to_dense())

# %%
#
# ## Traversal
#
# Cursors walk along rows (`begin1`, `end1`) or columns (`begin2`, `end2`). From
# every position, a cursor can produce cursors along the other axis:

for row in iterate(mat.begin1(readonly=True), mat.end1(readonly=True)):
    print([col.value.item() for col in iterate(row.begin(), row.end())])

# %%
#
# Reverse cursors walk backwards:

for col in iterate(mat.rbegin2(), mat.rend2()):
    print(col.index2, [row.value.item() for row in iterate(col.begin(), col.end())])

# %%
#
# ## Resizing
#
# Keeping the values is only possible if the number of diagonals stays the same.
# The diagonal values are then reinterpreted under the new shape:

mat.resize(4, 3)
print(mat.to_dense())

# %%
#
# ## Conversion From Dense Matrices
#
# Dense matrices that are not Toeplitz are projected by averaging their
# diagonals (this triggers a warning):

dense = rand(3, 5)
print(ToeplitzMatrix.from_dense(dense).to_dense())
