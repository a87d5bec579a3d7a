#!/usr/bin/env python3

"""
Convert WEBM videos to same-name MP4s (H.264 + AAC).

Examples:
	webm2mp4.py clip.webm
	webm2mp4.py --video-codec h264_nvenc ./recordings
"""

import argparse
import sys
from stacklib.core import cli
from stacklib.core import tools
from stacklib.media.ffmpeg_tools import VIDEO_CODECS

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Convert WEBM videos to MP4 using ffmpeg")
	parser.add_argument('inputs', nargs='+', metavar='INPUT_PATH',
		help='WEBM files and/or directories (searched recursively)')
	parser.add_argument('-c', '--crf', dest='crf', type=int, default=23,
		help='quality, 0..51, lower is better (default 23)')
	parser.add_argument('-p', '--preset', dest='preset', default='medium',
		help='encoder preset (default medium)')
	parser.add_argument('-a', '--audio-bitrate', dest='audio_bitrate', default='128k',
		help='AAC bitrate (default 128k)')
	parser.add_argument('--video-codec', dest='video_codec', choices=VIDEO_CODECS,
		default='libx264', help='libx264 (CPU) or h264_nvenc (NVIDIA)')
	parser.add_argument('--quiet', dest='quiet', action='store_true',
		help='only show ffmpeg errors')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	sys.exit(cli.run_batch_tool(tools.plan_webm, args))


if __name__ == '__main__':
	main()
