#!/usr/bin/env python3

import os
import shlex
import shutil
import subprocess
import sys
from stacklib.core import errors

#============================================

_QUIET_MODE = False

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)
	return

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def ffmpeg_loglevel() -> str:
	if is_quiet_mode():
		return "error"
	return "info"

#============================================

def print_info(msg: str) -> None:
	if is_quiet_mode():
		return
	print(f"[INFO] {msg}")
	return

#============================================

def print_warning(msg: str) -> None:
	sys.stderr.write(f"[WARN] {msg}\n")
	return

#============================================

def runCmd(cmd: list, msg: bool = True) -> subprocess.CompletedProcess:
	"""
	Run an external command, raising RenderError on a non-zero exit.

	Args:
		cmd: Command list to execute.
		msg: Echo the command before running it.

	Returns:
		subprocess.CompletedProcess: Completed process with text output.
	"""
	showcmd = shlex.join(cmd)
	if msg and not is_quiet_mode():
		print(f"CMD: '{showcmd}'")
	proc = subprocess.run(cmd, capture_output=True, text=True)
	if proc.returncode != 0:
		stderr_text = proc.stderr.strip()
		raise errors.RenderError(f"command failed: {showcmd}\n{stderr_text}")
	return proc

#============================================

def check_dependency(cmd_name: str) -> None:
	if shutil.which(cmd_name) is None:
		raise errors.StackError(f"{cmd_name} not found in PATH")
	return

#============================================

def parse_extensions(raw_exts) -> tuple:
	"""
	Normalize an extension list into lowercase names without dots.

	Args:
		raw_exts: Comma separated string or list of strings.

	Returns:
		tuple: Extension names, e.g. ('png', 'jpg').
	"""
	if isinstance(raw_exts, str):
		parts = raw_exts.split(',')
	elif isinstance(raw_exts, (list, tuple)):
		parts = [str(part) for part in raw_exts]
	else:
		raise errors.InvalidConfig("exts must be a comma separated string or list")
	exts = []
	for part in parts:
		ext = part.strip().lower().lstrip('.')
		if ext == "" or ext in exts:
			continue
		exts.append(ext)
	if len(exts) == 0:
		raise errors.InvalidConfig("exts must name at least one extension")
	return tuple(exts)

#============================================

def gather_files(input_dir: str, exts: tuple, limit: int, exclude=()) -> list:
	"""
	List matching files directly inside input_dir, sorted by name.

	Args:
		input_dir: Directory to scan (not recursive).
		exts: Lowercase extensions to accept.
		limit: Maximum number of files to keep.
		exclude: Paths to leave out, such as the output of an earlier run.

	Returns:
		list: File paths, at most limit long.
	"""
	excluded = set(os.path.abspath(path) for path in exclude)
	files = []
	for name in sorted(os.listdir(input_dir)):
		path = os.path.join(input_dir, name)
		if not os.path.isfile(path) or os.path.abspath(path) in excluded:
			continue
		ext = os.path.splitext(name)[1].lower().lstrip('.')
		if ext not in exts:
			continue
		files.append(path)
	if len(files) == 0:
		raise errors.EmptyInput(
			f"no input files found in: {input_dir} (exts: {','.join(exts)})"
		)
	return files[:limit]
