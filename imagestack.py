#!/usr/bin/env python3

"""
Stack images into an N x M grid (tight/contain/cover) using ffmpeg.

Examples:
	imagestack.py -n 2 -m 1 ./imgs --fit-mode tight --bg-color white
	imagestack.py -n 2 -m 1 ./imgs --fit-mode cover --cell-width 5120 \
		--cell-height 756 --align center
"""

import argparse
import sys
from stacklib.core import cli

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Stack images into an N x M grid using ffmpeg")
	cli.add_grid_arguments(parser)
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_tool('image', args))


if __name__ == '__main__':
	main()
