#!/usr/bin/env python3

"""
Trim MP4s to [start, end) or [start, start+duration).

Examples:
	mp4trim.py -s 12.5 -e 20 video.mp4
	mp4trim.py -s 00:01:00 -d 30 --copy --audio ./clips
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
		description="Trim MP4 files using ffmpeg")
	parser.add_argument('-s', '--start', dest='start', required=True,
		help='start time, seconds or HH:MM:SS(.ms)')
	span_group = parser.add_mutually_exclusive_group(required=True)
	span_group.add_argument('-e', '--end', dest='end',
		help='end time, seconds or HH:MM:SS(.ms)')
	span_group.add_argument('-d', '--duration', dest='duration',
		help='duration, seconds or HH:MM:SS(.ms)')
	mode_group = parser.add_mutually_exclusive_group()
	mode_group.add_argument('--copy', dest='mode', action='store_const', const='copy',
		help='stream copy, cuts snap to keyframes')
	mode_group.add_argument('--reencode', dest='mode', action='store_const',
		const='reencode', help='frame accurate H.264 re-encode (default)')
	parser.set_defaults(mode='reencode')
	parser.add_argument('-a', '--audio-bitrate', dest='audio_bitrate', default='128k',
		help='AAC bitrate when keeping audio (default 128k)')
	parser.add_argument('--audio', dest='audio', action='store_true',
		help='keep audio (default drops it)')
	parser.add_argument('--fps', dest='fps', type=int, default=30,
		help='output frame rate for --reencode (default 30)')
	cli.add_encode_arguments(parser, fps=False, audio_toggle=False)
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_batch_tool(tools.plan_trim, args))


if __name__ == '__main__':
	main()
