#!/usr/bin/env python3

"""
Extract a single frame from an MP4 into a JPEG.

Examples:
	mp4frame.py --time 12.5 input.mp4
	mp4frame.py --frame 300 --max-width 1920 --max-height 1080 input.mp4
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
		description="Extract one frame from an MP4 using ffmpeg")
	parser.add_argument('input', metavar='INPUT_MP4',
		help='video file')
	pick_group = parser.add_mutually_exclusive_group(required=True)
	pick_group.add_argument('--time', dest='time',
		help='timestamp, seconds or HH:MM:SS(.ms)')
	pick_group.add_argument('--frame', dest='frame', type=int,
		help='zero-based frame index')
	parser.add_argument('-o', '--output', dest='output',
		help='output JPEG (default: next to the input)')
	parser.add_argument('--max-width', dest='max_width', type=int,
		help='downscale to at most this width')
	parser.add_argument('--max-height', dest='max_height', type=int,
		help='downscale to at most this height')
	parser.add_argument('--jpeg-quality', dest='jpeg_quality', type=int, default=3,
		help='2 (best) .. 31 (worst), default 3')
	parser.add_argument('--quiet', dest='quiet', action='store_true',
		help='only show ffmpeg errors')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_batch_tool(tools.plan_frame, args))


if __name__ == '__main__':
	main()
