#!/usr/bin/env python3

"""
ffmpeg argv builders for the single-file tools: concat, speed, flip,
trim, frame grab, PNG to JPEG, MP4 shrink and WEBM to MP4.

Every builder returns an argv list whose last element is the output
path, so ffmpeg_render.render() can redirect it to a partial file.
"""

import os
from stacklib.core import errors
from stacklib.core import utils

#============================================

VIDEO_CODECS = ('libx264', 'h264_nvenc')
TRIM_MODES = ('reencode', 'copy')
MP4_TAIL = ["-movflags", "+faststart", "-map_metadata", "-1"]

#============================================

def format_rate(value: float) -> str:
	"""Print a rate without trailing zeros, 30.0 -> '30'."""
	text = f"{float(value):.6f}".rstrip('0').rstrip('.')
	return text

#============================================

def _base_cmd() -> list:
	return ["ffmpeg", "-v", utils.ffmpeg_loglevel(), "-y"]

#============================================

def _x264_args(crf: int, preset: str) -> list:
	return ["-c:v", "libx264", "-crf", str(crf), "-preset", preset]

#============================================

def scale_cap_filters(max_width: int = None, max_height: int = None) -> list:
	"""
	Downscale filters that keep the aspect ratio.

	Both caps letterbox to exactly max_width x max_height; a single cap
	only shrinks the matching side.
	"""
	if max_width is not None and max_height is not None:
		return [f"scale={max_width}:{max_height}:force_original_aspect_ratio=decrease",
			f"pad={max_width}:{max_height}:(ow-iw)/2:(oh-ih)/2"]
	if max_width is not None:
		return [f"scale='min(iw,{max_width})':-2"]
	if max_height is not None:
		return [f"scale=-2:'min(ih,{max_height})'"]
	return []

#============================================

def build_concat_command(sources: list, outfile: str, width: int, height: int,
	fps: float, audio: bool = False, crf: int = 23, preset: str = 'medium') -> list:
	"""
	Concatenate clips in time, letterboxing each to width x height.

	Args:
		sources: Clip paths in playback order.
		outfile: Output MP4 path.
		width: Target width, normally the first clip's.
		height: Target height, normally the first clip's.
		fps: Constant output frame rate.
		audio: Concatenate audio too; every source must have a track.
		crf: libx264 constant rate factor.
		preset: libx264 preset.

	Returns:
		list: ffmpeg argv.
	"""
	if len(sources) < 2:
		raise errors.EmptyInput("need at least two clips to concatenate")
	rate = format_rate(fps)
	filter_parts = []
	video_labels = ""
	audio_labels = ""
	for index in range(len(sources)):
		filter_parts.append(f"[{index}:v]settb=AVTB,setpts=PTS-STARTPTS,"
			f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
			f"pad={width}:{height}:((ow-iw)/2):((oh-ih)/2):color=black,"
			f"setsar=1,fps=fps={rate},format=yuv420p[v{index}]")
		video_labels += f"[v{index}]"
		if audio:
			filter_parts.append(f"[{index}:a]asetpts=PTS-STARTPTS,"
				"aformat=sample_fmts=fltp:channel_layouts=stereo,"
				f"aresample=48000[a{index}]")
			audio_labels += f"[a{index}]"
	count = len(sources)
	if audio:
		filter_parts.append(f"{video_labels}{audio_labels}concat=n={count}:v=1:a=1[vout][aout]")
	else:
		filter_parts.append(f"{video_labels}concat=n={count}:v=1:a=0[vout]")
	cmd = _base_cmd()
	for source in sources:
		cmd += ["-i", source]
	cmd += ["-filter_complex", ";".join(filter_parts), "-map", "[vout]"]
	if audio:
		cmd += ["-map", "[aout]"]
	else:
		cmd.append("-an")
	cmd += _x264_args(crf, preset)
	if audio:
		cmd += ["-c:a", "aac"]
	cmd += ["-fps_mode", "cfr"]
	if audio:
		cmd.append("-shortest")
	cmd += MP4_TAIL + [outfile]
	return cmd

#============================================

def atempo_chain(speed: float) -> str:
	"""
	Chain atempo stages for any speed; one stage only covers 0.5..2.0.

	Examples: 3 -> 'atempo=2.0,atempo=1.500000', 1 -> 'atempo=1.0'.
	"""
	target = float(speed)
	stages = []
	while target > 2.0000001:
		stages.append("2.0")
		target /= 2.0
	while target < 0.4999999:
		stages.append("0.5")
		target *= 2.0
	if not (0.9995 < target < 1.0005):
		target = min(max(target, 0.5), 2.0)
		stages.append(f"{target:.6f}")
	if len(stages) == 0:
		return "atempo=1.0"
	return ",".join(f"atempo={stage}" for stage in stages)

#============================================

def _retime_cmd(source: str) -> list:
	cmd = _base_cmd()
	cmd += ["-i", source, "-fflags", "+genpts", "-avoid_negative_ts", "make_zero"]
	return cmd

#============================================

def _single_clip_tail(cmd: list, video_chain: str, audio_chain: str, outfile: str,
	crf: int, preset: str) -> list:
	if audio_chain is None:
		cmd += ["-vf", video_chain, "-an"]
		cmd += _x264_args(crf, preset)
		cmd += ["-fps_mode", "cfr"]
	else:
		cmd += ["-filter_complex", f"[0:v]{video_chain}[v];[0:a]{audio_chain}[a]",
			"-map", "[v]", "-map", "[a]"]
		cmd += _x264_args(crf, preset)
		cmd += ["-c:a", "aac", "-fps_mode", "cfr", "-shortest"]
	cmd += MP4_TAIL + [outfile]
	return cmd

#============================================

def build_speed_command(source: str, outfile: str, speed: float, fps: float,
	audio: bool = False, crf: int = 23, preset: str = 'medium') -> list:
	"""
	Change playback speed by a factor; 2.0 plays twice as fast.
	"""
	if speed <= 0:
		raise errors.InvalidConfig("speed must be > 0")
	video_chain = (f"settb=AVTB,setpts=(PTS-STARTPTS)/{format_rate(speed)},"
		f"fps=fps={format_rate(fps)},format=yuv420p")
	audio_chain = None
	if audio:
		audio_chain = (f"asetpts=PTS-STARTPTS,{atempo_chain(speed)},"
			"aresample=async=1:first_pts=0")
	return _single_clip_tail(_retime_cmd(source), video_chain, audio_chain,
		outfile, crf, preset)

#============================================

def flip_label(hflip: bool, vflip: bool) -> str:
	label = "flip"
	if hflip:
		label += "H"
	if vflip:
		label += "V"
	return label

#============================================

def build_flip_command(source: str, outfile: str, hflip: bool, vflip: bool,
	fps: float, audio: bool = False, crf: int = 23, preset: str = 'medium') -> list:
	if not hflip and not vflip:
		raise errors.InvalidConfig("specify at least one of --hflip or --vflip")
	filters = ["settb=AVTB", "setpts=PTS-STARTPTS"]
	if hflip:
		filters.append("hflip")
	if vflip:
		filters.append("vflip")
	filters += [f"fps=fps={format_rate(fps)}", "format=yuv420p"]
	audio_chain = None
	if audio:
		audio_chain = "asetpts=PTS-STARTPTS"
	return _single_clip_tail(_retime_cmd(source), ",".join(filters), audio_chain,
		outfile, crf, preset)

#============================================

def build_trim_command(source: str, outfile: str, start: str, end: str = None,
	duration: str = None, mode: str = 'reencode', fps: int = 30,
	audio: bool = False, crf: int = 23, preset: str = 'medium',
	audio_bitrate: str = '128k') -> list:
	"""
	Cut [start, end) or [start, start+duration) out of a clip.

	Copy mode seeks before -i and keeps the streams, so cuts snap to
	keyframes. Reencode mode seeks after -i for frame accuracy.
	"""
	if mode not in TRIM_MODES:
		raise errors.InvalidConfig(f"trim mode must be {'|'.join(TRIM_MODES)}")
	if (end is None) == (duration is None):
		raise errors.InvalidConfig("give exactly one of --end or --duration")
	if end is not None:
		span = ["-ss", start, "-to", end]
	else:
		span = ["-ss", start, "-t", duration]
	cmd = _base_cmd()
	if mode == 'copy':
		cmd += span + ["-i", source, "-c", "copy"]
		if not audio:
			cmd.append("-an")
		cmd += MP4_TAIL + [outfile]
		return cmd
	cmd += ["-i", source] + span
	cmd += ["-vf", f"fps=fps={fps}", "-fps_mode", "cfr"]
	cmd += _x264_args(crf, preset) + ["-pix_fmt", "yuv420p"]
	if audio:
		cmd += ["-c:a", "aac", "-b:a", audio_bitrate]
	else:
		cmd.append("-an")
	cmd += MP4_TAIL + [outfile]
	return cmd

#============================================

def build_frame_command(source: str, outfile: str, time: str = None,
	frame: int = None, max_width: int = None, max_height: int = None,
	jpeg_quality: int = 3) -> list:
	"""
	Grab one frame as a JPEG, by timestamp or by zero-based frame index.
	"""
	if (time is None) == (frame is None):
		raise errors.InvalidConfig("give exactly one of --time or --frame")
	filters = scale_cap_filters(max_width, max_height)
	filters += ["format=yuvj420p", "setsar=1"]
	cmd = _base_cmd() + ["-i", source]
	if time is not None:
		cmd += ["-ss", time, "-frames:v", "1", "-vf", ",".join(filters)]
	else:
		filters.insert(0, f"select='eq(n\\,{frame})'")
		cmd += ["-vf", ",".join(filters), "-fps_mode", "vfr", "-frames:v", "1"]
	cmd += ["-map", "0:v:0", "-c:v", "mjpeg", "-q:v", str(jpeg_quality),
		"-an", "-f", "image2", outfile]
	return cmd

#============================================

def build_jpeg_command(source: str, outfile: str, quality: int = 4) -> list:
	cmd = _base_cmd() + ["-i", source]
	cmd += ["-vf", "format=yuvj420p", "-q:v", str(quality), "-map_metadata", "-1",
		outfile]
	return cmd

#============================================

def shrink_filters(max_width: int = None, max_height: int = None,
	fps: float = None) -> str:
	filters = scale_cap_filters(max_width, max_height)
	if fps is not None:
		filters.append(f"fps=fps={format_rate(fps)}")
	filters += ["format=yuv420p", "setsar=1"]
	return ",".join(filters)

#============================================

def target_video_bitrate(target_mb: float, duration: float,
	audio_bps: int = 128000) -> int:
	"""
	Video bits per second that land the file near target_mb megabytes.

	Audio is budgeted at audio_bps; the result never drops below what
	200 kbit of video over the whole clip would give.
	"""
	if duration <= 0:
		raise errors.ProbeError("target size needs a known duration")
	total_bits = target_mb * 8 * 1024 * 1024
	video_bits = max(total_bits - audio_bps * duration, 2e5)
	return int(round(video_bits / duration))

#============================================

def _shrink_audio(copy_audio: bool, audio_bitrate: str) -> list:
	if copy_audio:
		return ["-c:a", "copy"]
	return ["-c:a", "aac", "-b:a", audio_bitrate]

#============================================

def build_shrink_command(source: str, outfile: str, video_filter: str,
	crf: int = 23, preset: str = 'medium', copy_audio: bool = False,
	audio_bitrate: str = '128k') -> list:
	cmd = _base_cmd() + ["-i", source, "-vf", video_filter]
	cmd += _x264_args(crf, preset)
	cmd += _shrink_audio(copy_audio, audio_bitrate)
	cmd += MP4_TAIL + [outfile]
	return cmd

#============================================

def build_shrink_two_pass(source: str, outfile: str, video_filter: str,
	video_bitrate: str, passlog: str, copy_audio: bool = False,
	audio_bitrate: str = '128k') -> list:
	"""
	Two ffmpeg runs that hit a video bitrate; only the second writes outfile.

	Returns:
		list: [pass one argv, pass two argv].
	"""
	video = ["-c:v", "libx264", "-b:v", str(video_bitrate)]
	first = _base_cmd() + ["-i", source, "-vf", video_filter] + video
	first += ["-pass", "1", "-passlogfile", passlog, "-an", "-f", "null", os.devnull]
	second = _base_cmd() + ["-i", source, "-vf", video_filter] + video
	second += ["-pass", "2", "-passlogfile", passlog]
	second += _shrink_audio(copy_audio, audio_bitrate)
	second += MP4_TAIL + [outfile]
	return [first, second]

#============================================

def build_webm_command(source: str, outfile: str, crf: int = 23,
	preset: str = 'medium', audio_bitrate: str = '128k',
	video_codec: str = 'libx264') -> list:
	if video_codec not in VIDEO_CODECS:
		raise errors.InvalidConfig(f"video codec must be {'|'.join(VIDEO_CODECS)}")
	cmd = _base_cmd() + ["-i", source]
	# yuv420p needs even sizes; odd ones round up
	cmd += ["-vf", "scale=ceil(iw/2)*2:ceil(ih/2)*2"]
	cmd += ["-c:v", video_codec, "-crf", str(crf), "-preset", preset,
		"-pix_fmt", "yuv420p"]
	cmd += ["-c:a", "aac", "-b:a", audio_bitrate]
	cmd += MP4_TAIL + [outfile]
	return cmd
