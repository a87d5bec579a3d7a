#!/usr/bin/env python3

"""
Concatenate MP4s in time, matching the first clip's resolution.

Examples:
	mp4concat.py --fps 30 a.mp4 b.mp4 c.mp4
	mp4concat.py --unmute ./clips
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
		description="Concatenate MP4 files in time using ffmpeg")
	cli.add_encode_arguments(parser)
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_batch_tool(tools.plan_concat, args))


if __name__ == '__main__':
	main()
