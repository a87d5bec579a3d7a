#!/usr/bin/env python3

import json
from tqdm import tqdm
import PIL.Image
from stacklib.core import errors
from stacklib.core import utils
from stacklib.core.layout import Item

#============================================

def _ffprobe_json(cmd: list) -> dict:
	try:
		proc = utils.runCmd(cmd, msg=False)
	except errors.RenderError as exc:
		raise errors.ProbeError(str(exc)) from exc
	try:
		data = json.loads(proc.stdout)
	except ValueError as exc:
		raise errors.ProbeError(f"unparseable ffprobe output: {cmd[-1]}") from exc
	if not isinstance(data, dict):
		raise errors.ProbeError(f"unparseable ffprobe output: {cmd[-1]}")
	return data

#============================================

def _ffprobe_dimensions(path: str) -> tuple:
	cmd = [
		"ffprobe", "-v", "error",
		"-select_streams", "v:0",
		"-show_entries", "stream=width,height",
		"-of", "json",
		path,
	]
	data = _ffprobe_json(cmd)
	streams = data.get("streams", [])
	if len(streams) == 0:
		raise errors.ProbeError(f"no video stream found: {path}")
	try:
		width = int(streams[0].get("width", 0))
		height = int(streams[0].get("height", 0))
	except (TypeError, ValueError) as exc:
		raise errors.ProbeError(f"unparseable dimensions: {path}") from exc
	if width <= 0 or height <= 0:
		raise errors.ProbeError(f"invalid dimensions {width}x{height}: {path}")
	return (width, height)

#============================================

def _pillow_dimensions(path: str) -> tuple:
	try:
		with PIL.Image.open(path) as image:
			(width, height) = image.size
	except (OSError, ValueError, PIL.Image.DecompressionBombError) as exc:
		raise errors.ProbeError(f"probe size failed: {path}") from exc
	if width <= 0 or height <= 0:
		raise errors.ProbeError(f"invalid dimensions {width}x{height}: {path}")
	return (width, height)

#============================================

def probe_dimensions(path: str) -> tuple:
	"""
	Return the native (width, height) of an image or video.

	ffprobe is tried first; Pillow is the fallback for stills ffprobe
	cannot read.

	Args:
		path: Media file path.

	Returns:
		tuple: (width, height) as positive ints.
	"""
	try:
		return _ffprobe_dimensions(path)
	except errors.ProbeError as ffprobe_exc:
		try:
			return _pillow_dimensions(path)
		except errors.ProbeError:
			raise ffprobe_exc

#============================================

def probe_duration(path: str) -> float:
	cmd = [
		"ffprobe", "-v", "error",
		"-show_entries", "format=duration",
		"-of", "json",
		path,
	]
	data = _ffprobe_json(cmd)
	duration = data.get("format", {}).get("duration")
	if duration is None:
		return 0.0
	try:
		return float(duration)
	except ValueError:
		return 0.0

#============================================

def probe_has_audio(path: str) -> bool:
	cmd = [
		"ffprobe", "-v", "error",
		"-select_streams", "a",
		"-show_entries", "stream=index",
		"-of", "json",
		path,
	]
	data = _ffprobe_json(cmd)
	return len(data.get("streams", [])) > 0

#============================================

def probe_frame_rate(path: str) -> float:
	"""
	Return the first video stream's frame rate, or 0.0 when unknown.
	"""
	cmd = [
		"ffprobe", "-v", "error",
		"-select_streams", "v:0",
		"-show_entries", "stream=r_frame_rate",
		"-of", "json",
		path,
	]
	data = _ffprobe_json(cmd)
	streams = data.get("streams", [])
	if len(streams) == 0:
		return 0.0
	text = str(streams[0].get("r_frame_rate", ""))
	(num, _, den) = text.partition("/")
	try:
		if den != "" and float(den) > 0:
			return float(num) / float(den)
		return float(num)
	except ValueError:
		return 0.0

#============================================

def probe_items(paths: list) -> tuple:
	"""
	Probe every path in order and return the Items.
	"""
	if utils.is_quiet_mode():
		iter_paths = paths
	else:
		iter_paths = tqdm(paths, desc="probe", unit="file")
	items = []
	for path in iter_paths:
		(width, height) = probe_dimensions(path)
		items.append(Item(path, width, height))
	return tuple(items)
