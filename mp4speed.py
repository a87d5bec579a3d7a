#!/usr/bin/env python3

"""
Speed up or slow down MP4 playback, video and audio together.

Examples:
	mp4speed.py -n 2 --fps 30 video.mp4
	mp4speed.py -n 0.5 --unmute ./clips
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
		description="Change MP4 playback speed using ffmpeg")
	parser.add_argument('-n', '--speed', dest='speed', required=True,
		help='speed factor > 0, e.g. 2, 1.5, 0.5')
	cli.add_encode_arguments(parser)
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_batch_tool(tools.plan_speed, args))


if __name__ == '__main__':
	main()
