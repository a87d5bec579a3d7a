#!/usr/bin/env python3

"""
Grid layout planning for rows x cols canvases.

Items fill the grid in row-major order. The planner only computes canvas
size and top-left offsets; scaling, padding and cropping happen in ffmpeg.
"""

import dataclasses
from stacklib.core import errors

#============================================

FIT_MODES = ('tight', 'contain', 'cover')
ALIGNMENTS = ('left', 'center', 'right')
MIN_CELL_SIZE = 2

#============================================

def _is_int(value) -> bool:
	return isinstance(value, int) and not isinstance(value, bool)

#============================================

@dataclasses.dataclass(frozen=True)
class Item():
	path: str
	width: int
	height: int

	def __post_init__(self):
		if self.width <= 0 or self.height <= 0:
			raise errors.ProbeError(
				f"non-positive dimensions {self.width}x{self.height}: {self.path}"
			)

#============================================

@dataclasses.dataclass(frozen=True)
class GridSpec():
	rows: int
	cols: int
	gutter: int = 0
	align: str = 'left'
	fit_mode: str = 'tight'
	cell_width: int = None
	cell_height: int = None

	def __post_init__(self):
		if not _is_int(self.rows) or self.rows < 1:
			raise errors.InvalidConfig("rows must be >= 1")
		if not _is_int(self.cols) or self.cols < 1:
			raise errors.InvalidConfig("cols must be >= 1")
		if not _is_int(self.gutter) or self.gutter < 0:
			raise errors.InvalidConfig("gutter must be >= 0")
		if self.align not in ALIGNMENTS:
			raise errors.InvalidConfig(f"align must be {'|'.join(ALIGNMENTS)}")
		if self.fit_mode not in FIT_MODES:
			raise errors.InvalidConfig(f"fit mode must be {'|'.join(FIT_MODES)}")
		for (name, value) in (('cell width', self.cell_width), ('cell height', self.cell_height)):
			if value is None:
				continue
			if not _is_int(value) or value < MIN_CELL_SIZE:
				raise errors.InvalidConfig(f"{name} must be >= {MIN_CELL_SIZE}")

	#============================
	@property
	def capacity(self) -> int:
		return self.rows * self.cols

	#============================
	def cell_index(self, index: int) -> tuple:
		"""Return (row, col) for a row-major item index."""
		return (index // self.cols, index % self.cols)

#============================================

@dataclasses.dataclass(frozen=True)
class PlacedItem():
	item: Item
	render_width: int
	render_height: int
	x: int
	y: int

#============================================

@dataclasses.dataclass(frozen=True)
class CanvasPlan():
	width: int
	height: int
	placed: tuple

	#============================
	def to_dict(self) -> dict:
		placed = []
		for entry in self.placed:
			placed.append({
				'source': entry.item.path,
				'native': [entry.item.width, entry.item.height],
				'render': [entry.render_width, entry.render_height],
				'offset': [entry.x, entry.y],
			})
		return {
			'canvas': [self.width, self.height],
			'items': placed,
		}

#============================================

def plan_layout(grid: GridSpec, items, cell_size: tuple = None) -> CanvasPlan:
	"""
	Compute the canvas size and the placement of every item.

	Args:
		grid: Validated grid settings.
		items: Ordered Items; anything past grid.capacity is dropped.
		cell_size: (width, height) for contain/cover, ignored for tight.

	Returns:
		CanvasPlan: Canvas size plus placements in row-major order.
	"""
	items = tuple(items)[:grid.capacity]
	if len(items) == 0:
		raise errors.EmptyInput("no items to lay out")
	if grid.fit_mode == 'tight':
		return _plan_tight(grid, items)
	if cell_size is None:
		raise errors.InvalidConfig(f"{grid.fit_mode} mode requires a cell size")
	return _plan_cells(grid, items, cell_size)

#============================================

def _plan_cells(grid: GridSpec, items: tuple, cell_size: tuple) -> CanvasPlan:
	(cell_w, cell_h) = cell_size
	gutter = grid.gutter
	canvas_w = grid.cols * cell_w + gutter * (grid.cols - 1)
	canvas_h = grid.rows * cell_h + gutter * (grid.rows - 1)
	placed = []
	for index, item in enumerate(items):
		(row, col) = grid.cell_index(index)
		x = col * (cell_w + gutter)
		y = row * (cell_h + gutter)
		placed.append(PlacedItem(item, cell_w, cell_h, x, y))
	return CanvasPlan(canvas_w, canvas_h, tuple(placed))

#============================================

def _plan_tight(grid: GridSpec, items: tuple) -> CanvasPlan:
	gutter = grid.gutter
	rows = []
	for row in range(grid.rows):
		rows.append(items[row * grid.cols:(row + 1) * grid.cols])
	row_widths = []
	row_heights = []
	for row_items in rows:
		width = sum(item.width for item in row_items)
		if len(row_items) > 1:
			width += gutter * (len(row_items) - 1)
		height = max((item.height for item in row_items), default=0)
		row_widths.append(width)
		row_heights.append(height)
	canvas_w = max(row_widths)
	canvas_h = sum(row_heights) + gutter * (grid.rows - 1)
	placed = []
	y = 0
	for row, row_items in enumerate(rows):
		x = _row_start(grid.align, canvas_w, row_widths[row])
		for item in row_items:
			# rows align to their top edge; shorter items are not re-centered
			placed.append(PlacedItem(item, item.width, item.height, x, y))
			x += item.width + gutter
		y += row_heights[row] + gutter
	return CanvasPlan(canvas_w, canvas_h, tuple(placed))

#============================================

def _row_start(align: str, canvas_w: int, row_w: int) -> int:
	if align == 'center':
		return (canvas_w - row_w) // 2
	if align == 'right':
		return canvas_w - row_w
	return 0
