#!/usr/bin/env python3

from stacklib.core import errors
from stacklib.core.layout import GridSpec
from stacklib.core.layout import MIN_CELL_SIZE

#============================================

def resolve_cell_size(grid: GridSpec, items) -> tuple:
	"""
	Decide the shared cell size for contain/cover grids.

	Explicit cell dimensions win; each missing one falls back to the
	first item's native dimension on its own. Tight grids have no shared
	cell and return None.

	Args:
		grid: Validated grid settings.
		items: Ordered Items, at least one.

	Returns:
		tuple: (cell_width, cell_height), or None for tight.
	"""
	items = tuple(items)
	if len(items) == 0:
		raise errors.EmptyInput("no items to size cells from")
	if grid.fit_mode == 'tight':
		return None
	first = items[0]
	cell_w = grid.cell_width
	if cell_w is None:
		cell_w = first.width
	cell_h = grid.cell_height
	if cell_h is None:
		cell_h = first.height
	if cell_w < MIN_CELL_SIZE:
		raise errors.InvalidConfig(f"cell width must be >= {MIN_CELL_SIZE}, got {cell_w}")
	if cell_h < MIN_CELL_SIZE:
		raise errors.InvalidConfig(f"cell height must be >= {MIN_CELL_SIZE}, got {cell_h}")
	return (cell_w, cell_h)
