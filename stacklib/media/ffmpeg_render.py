#!/usr/bin/env python3

import os
import time
from stacklib.core import errors
from stacklib.core import utils
from stacklib.core.compositor import RenderPlan

#============================================

ALPHA_IMAGE_EXTS = ('.png', '.webp', '.tif', '.tiff')
AUDIO_MODES = ('first', 'mix', 'none')
FIT_DURATIONS = ('shortest', 'longest')

#============================================

def build_image_command(render: RenderPlan, outfile: str) -> list:
	"""
	Build the ffmpeg argv that composites stills onto one canvas image.
	"""
	cmd = ["ffmpeg", "-v", utils.ffmpeg_loglevel(), "-y"]
	cmd += ["-f", "lavfi", "-i", render.canvas.source(rate=1)]
	for source in render.sources():
		cmd += ["-loop", "1", "-t", "1", "-i", source]
	cmd += ["-filter_complex", render.filter_complex()]
	cmd += ["-map", render.final_label(), "-frames:v", "1", "-f", "image2"]
	if os.path.splitext(outfile)[1].lower() in ALPHA_IMAGE_EXTS:
		cmd += ["-pix_fmt", "rgba"]
	cmd.append(outfile)
	return cmd

#============================================

def build_video_command(render: RenderPlan, outfile: str, crf: int = 23,
	preset: str = 'medium', fit_duration: str = 'shortest',
	audio_mode: str = 'none', audio_inputs: list = None) -> list:
	"""
	Build the ffmpeg argv that stacks clips into one video.

	Args:
		render: Compositing operations with media 'video'.
		outfile: Output video path.
		crf: libx264 constant rate factor.
		preset: libx264 preset.
		fit_duration: 'shortest' or 'longest'.
		audio_mode: 'first', 'mix' or 'none'.
		audio_inputs: Plan-order indexes of tiles that carry audio.

	Returns:
		list: ffmpeg argv.
	"""
	if fit_duration not in FIT_DURATIONS:
		raise errors.InvalidConfig(f"fit duration must be {'|'.join(FIT_DURATIONS)}")
	if audio_mode not in AUDIO_MODES:
		raise errors.InvalidConfig(f"audio must be {'|'.join(AUDIO_MODES)}")
	if audio_inputs is None:
		audio_inputs = []
	filter_parts = render.filter_parts()
	# libx264 with yuv420p rejects odd canvas sizes
	stack_out = "[stackout]"
	filter_parts.append(f"{render.final_label()}"
		"pad=ceil(iw/2)*2:ceil(ih/2)*2,format=yuv420p"
		f"{stack_out}")
	audio_maps = []
	if audio_mode == 'first' and len(audio_inputs) > 0:
		audio_maps = ["-map", f"{audio_inputs[0] + 1}:a", "-c:a", "aac"]
	elif audio_mode == 'mix' and len(audio_inputs) > 0:
		amix_in = "".join(f"[{index + 1}:a]" for index in audio_inputs)
		amix_out = "[amixed]"
		filter_parts.append(f"{amix_in}amix=inputs={len(audio_inputs)}"
			f":dropout_transition=0:normalize=0{amix_out}")
		audio_maps = ["-map", amix_out, "-c:a", "aac"]
	else:
		audio_maps = ["-an"]
	cmd = ["ffmpeg", "-v", utils.ffmpeg_loglevel(), "-y"]
	cmd += ["-f", "lavfi", "-i", render.canvas.source(rate=render.fps)]
	for source in render.sources():
		cmd += ["-i", source]
	cmd += ["-filter_complex", ";".join(filter_parts)]
	cmd += ["-map", stack_out, "-c:v", "libx264", "-crf", str(crf),
		"-preset", preset, "-movflags", "+faststart"]
	cmd += audio_maps
	if fit_duration == 'shortest':
		cmd.append("-shortest")
	cmd += ["-map_metadata", "-1", "-pix_fmt", "yuv420p", outfile]
	return cmd

#============================================

def _partial_path(outfile: str) -> str:
	out_dir = os.path.dirname(os.path.abspath(outfile))
	(name, ext) = os.path.splitext(os.path.basename(outfile))
	return os.path.join(out_dir, f".{name}.{os.getpid()}.partial{ext}")

#============================================

def render(cmd: list, outfile: str) -> str:
	"""
	Run a prepared ffmpeg command and move its result onto outfile.

	ffmpeg writes to a hidden file next to outfile, which replaces
	outfile only once it exists and is non-empty. A failed run leaves
	any earlier outfile untouched.

	Args:
		cmd: ffmpeg argv whose last element is outfile.
		outfile: Final output path.

	Returns:
		str: outfile.
	"""
	if len(cmd) == 0 or cmd[-1] != outfile:
		raise ValueError(f"command does not write {outfile}")
	t0 = time.time()
	partial = _partial_path(outfile)
	try:
		utils.runCmd(cmd[:-1] + [partial])
		if not os.path.isfile(partial) or os.path.getsize(partial) == 0:
			raise errors.RenderError(f"ffmpeg produced no output: {outfile}")
		os.replace(partial, outfile)
	finally:
		if os.path.exists(partial):
			os.remove(partial)
	utils.print_info(f"Complete in {int(time.time() - t0)} seconds")
	return outfile
