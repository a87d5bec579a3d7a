#!/usr/bin/env python3

"""
Job planners for the per-file tools.

Each planner checks its options before touching any media, collects
inputs, probes what it needs, and returns the Jobs to run.
"""

import argparse
import math
import os
import re
from stacklib.core import batch
from stacklib.core import errors
from stacklib.core import utils
from stacklib.media import ffmpeg_tools
from stacklib.media import ffprobe

#============================================

DEFAULT_FPS = 30.0
MP4_EXTS = ('mp4',)

#============================================

def _output_fps(forced_fps: float, path: str) -> float:
	if forced_fps is not None:
		return forced_fps
	rate = ffprobe.probe_frame_rate(path)
	if rate <= 0:
		return DEFAULT_FPS
	return rate

#============================================

def _parse_speed(raw: str) -> float:
	try:
		speed = float(raw)
	except ValueError as exc:
		raise errors.InvalidConfig(f"--speed must be a number, got: {raw}") from exc
	if not math.isfinite(speed) or speed <= 0:
		raise errors.InvalidConfig(f"--speed must be > 0, got: {raw}")
	return speed

#============================================

def plan_concat(args: argparse.Namespace) -> list:
	batch.check_encode_options(args.crf, args.preset, args.fps)
	utils.check_dependency("ffmpeg")
	utils.check_dependency("ffprobe")
	files = batch.collect_inputs(args.inputs, MP4_EXTS)
	outfile = batch.output_path(files[0], "_concat", args.output_dir)
	# an earlier run's output sits next to its inputs
	files = [path for path in files if os.path.abspath(path) != os.path.abspath(outfile)]
	if len(files) < 2:
		raise errors.EmptyInput("need at least two MP4 files to concatenate")
	(width, height) = ffprobe.probe_dimensions(files[0])
	fps = _output_fps(args.fps, files[0])
	audio = False
	if args.unmute:
		audio = all(ffprobe.probe_has_audio(path) for path in files)
		if not audio:
			utils.print_warning("not every input has audio; concatenating video only")
	cmd = ffmpeg_tools.build_concat_command(files, outfile, width, height, fps,
		audio=audio, crf=args.crf, preset=args.preset)
	info = (f"Concatenating {len(files)} file(s): {width}x{height} "
		f"fps={ffmpeg_tools.format_rate(fps)} audio={audio} "
		f"preset={args.preset} crf={args.crf}")
	return [batch.Job(outfile, (cmd,), info)]

#============================================

def plan_speed(args: argparse.Namespace) -> list:
	speed = _parse_speed(args.speed)
	batch.check_encode_options(args.crf, args.preset, args.fps)
	utils.check_dependency("ffmpeg")
	utils.check_dependency("ffprobe")
	files = batch.collect_inputs(args.inputs, MP4_EXTS)
	fps = _output_fps(args.fps, files[0])
	label = args.speed.strip().replace('.', '-')
	jobs = []
	for source in files:
		outfile = batch.output_path(source, f"_speed{label}", args.output_dir)
		audio = bool(args.unmute) and ffprobe.probe_has_audio(source)
		cmd = ffmpeg_tools.build_speed_command(source, outfile, speed, fps,
			audio=audio, crf=args.crf, preset=args.preset)
		info = (f"Speeding x{args.speed}: {source} -> {outfile} (audio={audio}, "
			f"crf={args.crf}, preset={args.preset}, fps={ffmpeg_tools.format_rate(fps)})")
		jobs.append(batch.Job(outfile, (cmd,), info))
	return jobs

#============================================

def plan_flip(args: argparse.Namespace) -> list:
	if not args.hflip and not args.vflip:
		raise errors.InvalidConfig("specify at least one of --hflip or --vflip")
	batch.check_encode_options(args.crf, args.preset, args.fps)
	utils.check_dependency("ffmpeg")
	utils.check_dependency("ffprobe")
	files = batch.collect_inputs(args.inputs, MP4_EXTS)
	fps = _output_fps(args.fps, files[0])
	suffix = "_" + ffmpeg_tools.flip_label(args.hflip, args.vflip)
	jobs = []
	for source in files:
		outfile = batch.output_path(source, suffix, args.output_dir)
		audio = bool(args.unmute) and ffprobe.probe_has_audio(source)
		cmd = ffmpeg_tools.build_flip_command(source, outfile, args.hflip, args.vflip,
			fps, audio=audio, crf=args.crf, preset=args.preset)
		info = (f"Flip: H={int(args.hflip)} V={int(args.vflip)} "
			f"fps={ffmpeg_tools.format_rate(fps)} audio={audio} in={source}")
		jobs.append(batch.Job(outfile, (cmd,), info))
	return jobs

#============================================

def plan_trim(args: argparse.Namespace) -> list:
	start = batch.check_timestamp(args.start, "--start")
	end = None
	duration = None
	if args.end is not None:
		end = batch.check_timestamp(args.end, "--end")
		end_label = batch.time_label(end)
	else:
		duration = batch.check_timestamp(args.duration, "--duration")
		end_label = "dur" + batch.time_label(duration)
	if args.mode == 'reencode':
		if args.fps < 1:
			raise errors.InvalidConfig(f"--fps must be >= 1, got: {args.fps}")
		batch.check_encode_options(args.crf, args.preset)
		batch.check_audio_bitrate(args.audio_bitrate)
	elif args.fps != int(DEFAULT_FPS):
		utils.print_info("--fps is ignored in --copy mode")
	utils.check_dependency("ffmpeg")
	files = batch.collect_inputs(args.inputs, MP4_EXTS)
	suffix = f"_trim_{batch.time_label(start)}_{end_label}"
	jobs = []
	for source in files:
		outfile = batch.output_path(source, suffix, args.output_dir)
		cmd = ffmpeg_tools.build_trim_command(source, outfile, start, end=end,
			duration=duration, mode=args.mode, fps=args.fps, audio=args.audio,
			crf=args.crf, preset=args.preset, audio_bitrate=args.audio_bitrate)
		info = (f"Trimming: {source} -> {outfile} (mode={args.mode}, start={start}, "
			f"end={end or '-'}, duration={duration or '-'}, audio={args.audio})")
		jobs.append(batch.Job(outfile, (cmd,), info))
	return jobs

#============================================

def plan_frame(args: argparse.Namespace) -> list:
	if not os.path.isfile(args.input):
		raise errors.InvalidConfig(f"need an input MP4 file: {args.input}")
	if args.time is not None:
		batch.check_timestamp(args.time, "--time")
	if args.frame is not None and args.frame < 0:
		raise errors.InvalidConfig("--frame must be a non-negative integer")
	if args.jpeg_quality < 2 or args.jpeg_quality > 31:
		raise errors.InvalidConfig("--jpeg-quality must be in [2,31]")
	for (flag, value) in (('--max-width', args.max_width), ('--max-height', args.max_height)):
		if value is not None and value < 1:
			raise errors.InvalidConfig(f"{flag} must be >= 1")
	utils.check_dependency("ffmpeg")
	outfile = args.output
	if outfile is None:
		if args.time is not None:
			label = re.sub(r'[^0-9A-Za-z_.-]+', '-', args.time)
			outfile = batch.output_path(args.input, f"_t{label}", ext='.jpg')
		else:
			outfile = batch.output_path(args.input, f"_n{args.frame}", ext='.jpg')
	cmd = ffmpeg_tools.build_frame_command(args.input, outfile, time=args.time,
		frame=args.frame, max_width=args.max_width, max_height=args.max_height,
		jpeg_quality=args.jpeg_quality)
	info = f"Frame grab: {args.input} -> {outfile}"
	return [batch.Job(outfile, (cmd,), info)]

#============================================

def plan_jpeg(args: argparse.Namespace) -> list:
	if args.quality < 2 or args.quality > 31:
		utils.print_warning(f"quality {args.quality} is unusual (expected 2..31)")
	utils.check_dependency("ffmpeg")
	files = batch.collect_inputs(args.inputs, ('png',))
	jobs = []
	for source in files:
		outfile = batch.output_path(source, "", ext='.jpg')
		cmd = ffmpeg_tools.build_jpeg_command(source, outfile, quality=args.quality)
		info = f"Converting: {source} -> {outfile} (q={args.quality})"
		jobs.append(batch.Job(outfile, (cmd,), info))
	return jobs

#============================================

def plan_shrink(args: argparse.Namespace) -> list:
	"""
	Shrink MP4s by CRF, or by two-pass bitrate when a target is given.
	"""
	batch.check_encode_options(args.crf, args.preset, args.fps)
	batch.check_audio_bitrate(args.audio_bitrate)
	if args.target_mb is not None and args.target_mb <= 0:
		raise errors.InvalidConfig("--target-mb must be > 0")
	if args.vbitrate is not None and not re.match(r'^[0-9]+[kKmM]?$', args.vbitrate):
		raise errors.InvalidConfig(f"--vbitrate must look like 1500k, got: {args.vbitrate}")
	for (flag, value) in (('--max-width', args.max_width), ('--max-height', args.max_height)):
		if value is not None and value < 2:
			raise errors.InvalidConfig(f"{flag} must be >= 2")
	utils.check_dependency("ffmpeg")
	utils.check_dependency("ffprobe")
	files = batch.collect_inputs(args.inputs, MP4_EXTS)
	video_filter = ffmpeg_tools.shrink_filters(args.max_width, args.max_height, args.fps)
	two_pass = args.target_mb is not None or args.vbitrate is not None
	jobs = []
	for source in files:
		outfile = batch.output_path(source, "_small", args.output_dir)
		info = f"Compressing {source} -> {outfile}"
		if not two_pass:
			cmd = ffmpeg_tools.build_shrink_command(source, outfile, video_filter,
				crf=args.crf, preset=args.preset, copy_audio=args.copy_audio,
				audio_bitrate=args.audio_bitrate)
			jobs.append(batch.Job(outfile, (cmd,), info))
			continue
		video_bitrate = args.vbitrate
		if video_bitrate is None:
			duration = ffprobe.probe_duration(source)
			video_bitrate = str(ffmpeg_tools.target_video_bitrate(args.target_mb, duration))
		name = os.path.splitext(os.path.basename(outfile))[0]
		passlog = os.path.join(os.path.dirname(os.path.abspath(outfile)), f".{name}-2pass")
		commands = ffmpeg_tools.build_shrink_two_pass(source, outfile, video_filter,
			video_bitrate, passlog, copy_audio=args.copy_audio,
			audio_bitrate=args.audio_bitrate)
		jobs.append(batch.Job(outfile, tuple(commands), f"{info} (2-pass, b:v={video_bitrate})",
			passlog=passlog))
	return jobs

#============================================

def plan_webm(args: argparse.Namespace) -> list:
	batch.check_encode_options(args.crf, args.preset)
	batch.check_audio_bitrate(args.audio_bitrate)
	utils.check_dependency("ffmpeg")
	files = batch.collect_inputs(args.inputs, ('webm',))
	jobs = []
	for source in files:
		outfile = batch.output_path(source, "", ext='.mp4')
		cmd = ffmpeg_tools.build_webm_command(source, outfile, crf=args.crf,
			preset=args.preset, audio_bitrate=args.audio_bitrate,
			video_codec=args.video_codec)
		info = (f"Converting: {source} -> {outfile} (crf={args.crf}, "
			f"preset={args.preset}, aac={args.audio_bitrate}, vcodec={args.video_codec})")
		jobs.append(batch.Job(outfile, (cmd,), info))
	return jobs
