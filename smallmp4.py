#!/usr/bin/env python3

"""
Shrink MP4 files by CRF, or by two-pass encoding to a target size.

Examples:
	smallmp4.py --crf 26 --max-width 1920 --fps 30 video.mp4
	smallmp4.py --target-mb 50 movie.mp4
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
		description="Shrink MP4 files using ffmpeg")
	cli.add_encode_arguments(parser, audio_toggle=False)
	parser.add_argument('--out-dir', dest='output_dir',
		help='same as --output-dir')
	parser.add_argument('--max-width', dest='max_width', type=int,
		help='cap output width, keeping the aspect ratio')
	parser.add_argument('--max-height', dest='max_height', type=int,
		help='cap output height, keeping the aspect ratio')
	parser.add_argument('--copy-audio', dest='copy_audio', action='store_true',
		help='copy the audio stream instead of re-encoding')
	parser.add_argument('--audio-bitrate', dest='audio_bitrate', default='128k',
		help='AAC bitrate for audio re-encode (default 128k)')
	size_group = parser.add_mutually_exclusive_group()
	size_group.add_argument('--target-mb', dest='target_mb', type=float,
		help='target file size in megabytes (two-pass)')
	size_group.add_argument('--vbitrate', dest='vbitrate',
		help='target video bitrate such as 1500k (two-pass)')
	parser.add_argument('--dry-run', dest='dry_run', action='store_true',
		help='print the ffmpeg commands, do not encode')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_batch_tool(tools.plan_shrink, args))


if __name__ == '__main__':
	main()
