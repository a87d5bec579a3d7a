#!/usr/bin/env python3

"""
Flip MP4 videos horizontally and/or vertically.

Examples:
	mp4flip.py --vflip --fps 30 video.mp4
	mp4flip.py --hflip --vflip --unmute -c 20 -p slow video.mp4
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
		description="Flip MP4 videos using ffmpeg")
	parser.add_argument('--hflip', dest='hflip', action='store_true',
		help='mirror left to right')
	parser.add_argument('--vflip', dest='vflip', action='store_true',
		help='flip top to bottom')
	cli.add_encode_arguments(parser)
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_batch_tool(tools.plan_flip, args))


if __name__ == '__main__':
	main()
