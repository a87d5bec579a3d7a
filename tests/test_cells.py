
import os
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from stacklib.core import errors
from stacklib.core.cells import resolve_cell_size
from stacklib.core.layout import GridSpec
from stacklib.core.layout import Item

#============================================

class CellPolicyTest(unittest.TestCase):
	def setUp(self) -> None:
		self.items = [Item("a.png", 640, 360), Item("b.png", 100, 900)]

	#============================================
	def test_tight_has_no_cell(self) -> None:
		grid = GridSpec(rows=1, cols=2, fit_mode='tight', cell_width=50)
		self.assertIsNone(resolve_cell_size(grid, self.items))

	#============================================
	def test_first_item_fallback(self) -> None:
		grid = GridSpec(rows=1, cols=2, fit_mode='contain')
		self.assertEqual(resolve_cell_size(grid, self.items), (640, 360))

	#============================================
	def test_explicit_cell_wins(self) -> None:
		grid = GridSpec(rows=1, cols=2, fit_mode='cover',
			cell_width=320, cell_height=240)
		self.assertEqual(resolve_cell_size(grid, self.items), (320, 240))

	#============================================
	def test_each_dimension_falls_back_alone(self) -> None:
		grid = GridSpec(rows=1, cols=2, fit_mode='contain', cell_width=320)
		self.assertEqual(resolve_cell_size(grid, self.items), (320, 360))
		grid = GridSpec(rows=1, cols=2, fit_mode='contain', cell_height=200)
		self.assertEqual(resolve_cell_size(grid, self.items), (640, 200))

	#============================================
	def test_degenerate_first_item_rejected(self) -> None:
		grid = GridSpec(rows=1, cols=1, fit_mode='contain')
		with self.assertRaises(errors.InvalidConfig):
			resolve_cell_size(grid, [Item("thin.png", 1, 100)])

	#============================================
	def test_empty_items(self) -> None:
		grid = GridSpec(rows=1, cols=1, fit_mode='contain')
		with self.assertRaises(errors.EmptyInput):
			resolve_cell_size(grid, [])

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
