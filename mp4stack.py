#!/usr/bin/env python3

"""
Spatially stack many videos into an N x M grid using ffmpeg.

Examples:
	mp4stack.py -n 2 -m 3 ./clips
	mp4stack.py -n 2 -m 2 -i ./clips --fit-duration longest --audio mix
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
		description="Stack videos into an N x M grid using ffmpeg")
	cli.add_grid_arguments(parser)
	parser.add_argument('--fps', dest='fps', type=int,
		help='output frame rate (default 30)')
	parser.add_argument('--crf', dest='crf', type=int,
		help='libx264 quality, 0..51 (default 23)')
	parser.add_argument('--preset', dest='preset',
		help='libx264 preset (default medium)')
	parser.add_argument('--fit-duration', dest='fit_duration',
		choices=('shortest', 'longest'),
		help='stop at the shortest input, or freeze shorter tiles to the longest')
	parser.add_argument('--audio', dest='audio', choices=('first', 'mix', 'none'),
		help='keep the first audio track, mix all, or drop audio (default)')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_tool('video', args))


if __name__ == '__main__':
	main()
