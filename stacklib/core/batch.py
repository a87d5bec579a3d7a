#!/usr/bin/env python3

"""
Shared plumbing for the per-file tools: input collection, output naming,
option checks and the job loop.
"""

import dataclasses
import glob
import os
import re
import shlex
from stacklib.core import errors
from stacklib.core import utils
from stacklib.core.config import KNOWN_PRESETS
from stacklib.media import ffmpeg_render

#============================================

TIMESTAMP_RE = re.compile(r'^(\d+(\.\d+)?|(\d+:)?\d{1,2}:\d{1,2}(\.\d+)?)$')
BITRATE_RE = re.compile(r'^[0-9]+k$')

#============================================

@dataclasses.dataclass(frozen=True)
class Job():
	"""
	One output file and the ffmpeg runs that produce it.

	Only the last command writes outfile; earlier ones (two-pass
	encoding) write scratch data under passlog.
	"""
	outfile: str
	commands: tuple
	info: str
	passlog: str = None

#============================================

def collect_inputs(paths: list, exts: tuple) -> list:
	"""
	Expand files and directories into media paths.

	Files keep their command-line order; directories are searched
	recursively and their matches sorted by path.

	Args:
		paths: Files and/or directories.
		exts: Lowercase extensions to accept.

	Returns:
		list: Matching file paths.
	"""
	files = []
	for path in paths:
		if os.path.isdir(path):
			found = []
			for (root, _, names) in os.walk(path):
				for name in names:
					if os.path.splitext(name)[1].lower().lstrip('.') in exts:
						found.append(os.path.join(root, name))
			files += sorted(found)
		elif os.path.isfile(path):
			if os.path.splitext(path)[1].lower().lstrip('.') in exts:
				files.append(path)
			else:
				utils.print_warning(f"skipping non-{'/'.join(exts).upper()} file: {path}")
		else:
			utils.print_warning(f"path not found or unsupported: {path}")
	if len(files) == 0:
		raise errors.EmptyInput(f"no {'/'.join(exts).upper()} files found to process")
	return files

#============================================

def output_path(source: str, suffix: str, output_dir: str = None,
	ext: str = '.mp4') -> str:
	"""Name an output after its source: clip.mp4 -> clip_suffix.mp4."""
	name = os.path.splitext(os.path.basename(source))[0]
	out_dir = output_dir
	if out_dir is None:
		out_dir = os.path.dirname(source)
	return os.path.join(out_dir, f"{name}{suffix}{ext}")

#============================================

def time_label(value: str) -> str:
	return value.replace(':', '-').replace('.', '-')

#============================================

def check_timestamp(value: str, flag: str) -> str:
	if not TIMESTAMP_RE.match(value):
		raise errors.InvalidConfig(f"{flag} must be seconds or HH:MM:SS(.ms), got: {value}")
	return value

#============================================

def check_encode_options(crf: int, preset: str, fps: float = None) -> None:
	if crf < 0 or crf > 51:
		raise errors.InvalidConfig(f"--crf must be 0..51, got: {crf}")
	if preset not in KNOWN_PRESETS:
		utils.print_warning(f"unusual preset '{preset}'")
	if fps is not None and fps <= 0:
		raise errors.InvalidConfig(f"--fps must be > 0, got: {fps}")
	return

#============================================

def check_audio_bitrate(audio_bitrate: str) -> None:
	if not BITRATE_RE.match(audio_bitrate):
		utils.print_warning(f"audio bitrate '{audio_bitrate}' not like '128k'")
	return

#============================================

def run_jobs(jobs: list, dry_run: bool = False) -> int:
	"""
	Run every job in order, stopping at the first failure.

	Returns:
		int: Number of jobs processed.
	"""
	for job in jobs:
		utils.print_info(job.info)
		if dry_run:
			for cmd in job.commands:
				print(f"CMD: '{shlex.join(cmd)}'")
			continue
		os.makedirs(os.path.dirname(os.path.abspath(job.outfile)), exist_ok=True)
		try:
			for cmd in job.commands[:-1]:
				utils.runCmd(cmd)
			ffmpeg_render.render(job.commands[-1], job.outfile)
		finally:
			if job.passlog is not None:
				for path in glob.glob(glob.escape(job.passlog) + "*"):
					os.remove(path)
		print(f"[OK] Wrote: {job.outfile}")
	utils.print_info(f"Done. Processed {len(jobs)} file(s).")
	return len(jobs)
