#!/usr/bin/env python3

"""
Convert PNG images to same-name JPEGs.

Examples:
	smalljpg.py image.png
	smalljpg.py -q 5 ./screenshots
"""

import argparse
import sys
from stacklib.core import cli
from stacklib.core import tools

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Convert PNG images to JPEG using ffmpeg")
	parser.add_argument('inputs', nargs='+', metavar='INPUT_PATH',
		help='PNG files and/or directories (searched recursively)')
	parser.add_argument('-q', '--quality', dest='quality', type=int, default=4,
		help='JPEG quality 2..31, lower is better (default 4)')
	parser.add_argument('--quiet', dest='quiet', action='store_true',
		help='only show ffmpeg errors')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_batch_tool(tools.plan_jpeg, args))


if __name__ == '__main__':
	main()
