#!/usr/bin/env python3

"""
Pytest coverage for per-file tool planning and the batch job loop.
"""

# Standard Library
import argparse
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from stacklib.core import batch
from stacklib.core import cli
from stacklib.core import errors
from stacklib.core import tools
from stacklib.core import utils
from stacklib.media import ffprobe

#============================================

ENCODE_DEFAULTS = {
	'crf': 23,
	'preset': 'medium',
	'output_dir': None,
	'fps': None,
	'unmute': False,
	'quiet': True,
}

#============================================

def _touch(path: str) -> str:
	os.makedirs(os.path.dirname(path), exist_ok=True)
	with open(path, "w") as handle:
		handle.write("")
	return path

#============================================

def _args(**kwargs) -> argparse.Namespace:
	values = dict(ENCODE_DEFAULTS)
	values.update(kwargs)
	return argparse.Namespace(**values)

#============================================

@pytest.fixture
def media_stubs(monkeypatch):
	monkeypatch.setattr(utils, "check_dependency", lambda name: None)
	monkeypatch.setattr(utils, "_QUIET_MODE", True)
	monkeypatch.setattr(ffprobe, "probe_dimensions", lambda path: (640, 360))
	monkeypatch.setattr(ffprobe, "probe_frame_rate", lambda path: 25.0)
	monkeypatch.setattr(ffprobe, "probe_duration", lambda path: 100.0)
	monkeypatch.setattr(ffprobe, "probe_has_audio",
		lambda path: not os.path.basename(path).startswith("mute"))
	return monkeypatch

#============================================

def test_collect_inputs(tmp_path, capsys) -> None:
	_touch(str(tmp_path / "clips" / "b.mp4"))
	_touch(str(tmp_path / "clips" / "a.MP4"))
	_touch(str(tmp_path / "clips" / "deep" / "c.mp4"))
	_touch(str(tmp_path / "clips" / "notes.txt"))
	single = _touch(str(tmp_path / "z.mp4"))
	other = _touch(str(tmp_path / "z.webm"))
	files = batch.collect_inputs([single, str(tmp_path / "clips"), other,
		str(tmp_path / "missing")], ('mp4',))
	names = [os.path.relpath(path, str(tmp_path)) for path in files]
	assert names == ["z.mp4", os.path.join("clips", "a.MP4"),
		os.path.join("clips", "b.mp4"), os.path.join("clips", "deep", "c.mp4")]
	err = capsys.readouterr().err
	assert "skipping non-MP4 file" in err
	assert "path not found" in err
	with pytest.raises(errors.EmptyInput):
		batch.collect_inputs([other], ('mp4',))

#============================================

def test_output_path_and_labels() -> None:
	assert batch.output_path("/clips/a.mp4", "_speed2") == "/clips/a_speed2.mp4"
	assert batch.output_path("/clips/a.mp4", "_small", "/out") == "/out/a_small.mp4"
	assert batch.output_path("/img/shot.png", "", ext='.jpg') == "/img/shot.jpg"
	assert batch.time_label("00:00:12.5") == "00-00-12-5"
	assert batch.check_timestamp("01:02:03.250", "--start") == "01:02:03.250"
	with pytest.raises(errors.InvalidConfig):
		batch.check_timestamp("ten", "--start")

#============================================

def test_plan_concat_skips_earlier_output(media_stubs, tmp_path) -> None:
	for name in ("a.mp4", "a_concat.mp4", "b.mp4", "mute_c.mp4"):
		_touch(str(tmp_path / name))
	jobs = tools.plan_concat(_args(inputs=[str(tmp_path)], unmute=True))
	assert len(jobs) == 1
	job = jobs[0]
	assert job.outfile == str(tmp_path / "a_concat.mp4")
	cmd = job.commands[0]
	sources = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-i"]
	assert [os.path.basename(path) for path in sources] == ["a.mp4", "b.mp4", "mute_c.mp4"]
	# one clip has no audio track, so audio is dropped
	assert "-an" in cmd
	assert "fps=fps=25" in cmd[cmd.index("-filter_complex") + 1]

#============================================

def test_plan_concat_needs_two_inputs(media_stubs, tmp_path) -> None:
	_touch(str(tmp_path / "a.mp4"))
	with pytest.raises(errors.EmptyInput):
		tools.plan_concat(_args(inputs=[str(tmp_path)]))

#============================================

def test_plan_speed(media_stubs, tmp_path) -> None:
	_touch(str(tmp_path / "a.mp4"))
	_touch(str(tmp_path / "mute_b.mp4"))
	media_stubs.setattr(ffprobe, "probe_frame_rate", lambda path: 0.0)
	out_dir = str(tmp_path / "out")
	jobs = tools.plan_speed(_args(inputs=[str(tmp_path)], speed="1.5", unmute=True,
		output_dir=out_dir))
	assert [job.outfile for job in jobs] == [
		os.path.join(out_dir, "a_speed1-5.mp4"),
		os.path.join(out_dir, "mute_b_speed1-5.mp4"),
	]
	assert "-filter_complex" in jobs[0].commands[0]
	assert "-an" in jobs[1].commands[0]
	# unknown source rate falls back to 30
	assert "fps=fps=30" in jobs[1].commands[0][jobs[1].commands[0].index("-vf") + 1]

#============================================

@pytest.mark.parametrize("speed", ["0", "-2", "fast", "nan"])
def test_plan_speed_rejects_bad_factor(media_stubs, tmp_path, speed) -> None:
	with pytest.raises(errors.InvalidConfig):
		tools.plan_speed(_args(inputs=[str(tmp_path)], speed=speed))

#============================================

def test_plan_flip_checks_options_first(monkeypatch, tmp_path) -> None:

	def no_tools(name: str) -> None:
		raise errors.StackError(f"{name} not found in PATH")

	monkeypatch.setattr(utils, "check_dependency", no_tools)
	with pytest.raises(errors.InvalidConfig):
		tools.plan_flip(_args(inputs=[str(tmp_path)], hflip=False, vflip=False))
	with pytest.raises(errors.InvalidConfig):
		tools.plan_flip(_args(inputs=[str(tmp_path)], hflip=True, vflip=False, crf=60))

#============================================

def test_plan_flip(media_stubs, tmp_path) -> None:
	source = _touch(str(tmp_path / "a.mp4"))
	jobs = tools.plan_flip(_args(inputs=[source], hflip=True, vflip=False, fps=60.0))
	assert jobs[0].outfile == str(tmp_path / "a_flipH.mp4")
	assert "hflip,fps=fps=60" in jobs[0].commands[0][jobs[0].commands[0].index("-vf") + 1]

#============================================

def _trim_args(**kwargs) -> argparse.Namespace:
	values = {'start': "12.5", 'end': None, 'duration': None, 'mode': 'reencode',
		'fps': 30, 'audio': False, 'audio_bitrate': '128k'}
	values.update(kwargs)
	return _args(**values)

#============================================

def test_plan_trim_names(media_stubs, tmp_path) -> None:
	source = _touch(str(tmp_path / "a.mp4"))
	jobs = tools.plan_trim(_trim_args(inputs=[source], end="00:00:20"))
	assert jobs[0].outfile == str(tmp_path / "a_trim_12-5_00-00-20.mp4")
	jobs = tools.plan_trim(_trim_args(inputs=[source], duration="5", mode='copy'))
	assert jobs[0].outfile == str(tmp_path / "a_trim_12-5_dur5.mp4")
	assert "copy" in jobs[0].commands[0]
	with pytest.raises(errors.InvalidConfig):
		tools.plan_trim(_trim_args(inputs=[source], end="1:2:3:4"))
	with pytest.raises(errors.InvalidConfig):
		tools.plan_trim(_trim_args(inputs=[source], end="20", fps=0))

#============================================

def test_plan_frame(media_stubs, tmp_path) -> None:
	source = _touch(str(tmp_path / "clip.mp4"))
	values = {'input': source, 'time': "00:00:12.5", 'frame': None, 'output': None,
		'max_width': None, 'max_height': None, 'jpeg_quality': 3}
	jobs = tools.plan_frame(argparse.Namespace(**values))
	assert jobs[0].outfile == str(tmp_path / "clip_t00-00-12.5.jpg")
	values.update({'time': None, 'frame': 120})
	jobs = tools.plan_frame(argparse.Namespace(**values))
	assert jobs[0].outfile == str(tmp_path / "clip_n120.jpg")
	values.update({'jpeg_quality': 1})
	with pytest.raises(errors.InvalidConfig):
		tools.plan_frame(argparse.Namespace(**values))
	values.update({'jpeg_quality': 3, 'input': str(tmp_path / "missing.mp4")})
	with pytest.raises(errors.InvalidConfig):
		tools.plan_frame(argparse.Namespace(**values))

#============================================

def test_plan_jpeg_and_webm(media_stubs, tmp_path) -> None:
	_touch(str(tmp_path / "shot.png"))
	_touch(str(tmp_path / "clip.webm"))
	jobs = tools.plan_jpeg(argparse.Namespace(inputs=[str(tmp_path)], quality=4))
	assert [job.outfile for job in jobs] == [str(tmp_path / "shot.jpg")]
	jobs = tools.plan_webm(argparse.Namespace(inputs=[str(tmp_path)], crf=23,
		preset='medium', audio_bitrate='128k', video_codec='libx264'))
	assert [job.outfile for job in jobs] == [str(tmp_path / "clip.mp4")]

#============================================

def _shrink_args(**kwargs) -> argparse.Namespace:
	values = {'max_width': None, 'max_height': None, 'copy_audio': False,
		'audio_bitrate': '128k', 'target_mb': None, 'vbitrate': None, 'dry_run': False}
	values.update(kwargs)
	return _args(**values)

#============================================

def test_plan_shrink_modes(media_stubs, tmp_path) -> None:
	source = _touch(str(tmp_path / "movie.mp4"))
	jobs = tools.plan_shrink(_shrink_args(inputs=[source], max_width=1280))
	assert jobs[0].outfile == str(tmp_path / "movie_small.mp4")
	assert len(jobs[0].commands) == 1
	assert jobs[0].passlog is None
	jobs = tools.plan_shrink(_shrink_args(inputs=[source], target_mb=50.0))
	(first, second) = jobs[0].commands
	assert second[second.index("-b:v") + 1] == "4066304"
	assert jobs[0].passlog == str(tmp_path / ".movie_small-2pass")
	with pytest.raises(errors.InvalidConfig):
		tools.plan_shrink(_shrink_args(inputs=[source], vbitrate="fast"))

#============================================

def test_run_jobs_dry_run(monkeypatch, tmp_path, capsys) -> None:

	def must_not_run(cmd: list, msg: bool = True):
		raise AssertionError("dry run executed a command")

	monkeypatch.setattr(utils, "runCmd", must_not_run)
	outfile = str(tmp_path / "out" / "a_small.mp4")
	job = batch.Job(outfile, (["ffmpeg", "-i", "a.mp4", outfile],), "Compressing a.mp4")
	assert batch.run_jobs([job], dry_run=True) == 1
	assert f"CMD: 'ffmpeg -i a.mp4 {outfile}'" in capsys.readouterr().out
	assert not os.path.exists(str(tmp_path / "out"))

#============================================

def test_run_jobs_two_pass_cleanup(monkeypatch, tmp_path) -> None:
	monkeypatch.setattr(utils, "_QUIET_MODE", True)
	outfile = str(tmp_path / "out" / "movie_small.mp4")
	passlog = str(tmp_path / "out" / ".movie_small-2pass")
	ran = []

	def fake_ffmpeg(cmd: list, msg: bool = True):
		ran.append(cmd[-1])
		if len(ran) == 1:
			with open(passlog + "-0.log", "w") as handle:
				handle.write("stats")
			return None
		with open(cmd[-1], "w") as handle:
			handle.write("video")
		return None

	monkeypatch.setattr(utils, "runCmd", fake_ffmpeg)
	job = batch.Job(outfile, (["ffmpeg", "pass1", os.devnull], ["ffmpeg", "pass2", outfile]),
		"Compressing movie.mp4", passlog=passlog)
	batch.run_jobs([job])
	assert ran[0] == os.devnull
	assert os.listdir(str(tmp_path / "out")) == ["movie_small.mp4"]

#============================================

def test_run_batch_tool_exit_codes(monkeypatch, tmp_path) -> None:
	monkeypatch.setattr(utils, "check_dependency", lambda name: None)
	monkeypatch.setattr(utils, "_QUIET_MODE", False)
	args = _args(inputs=[str(tmp_path)], hflip=False, vflip=False)
	assert cli.run_batch_tool(tools.plan_flip, args) == 2
	# empty directory
	args = _args(inputs=[str(tmp_path)], hflip=True, vflip=False)
	assert cli.run_batch_tool(tools.plan_flip, args) == 1
