#!/usr/bin/env python3

"""
Pytest coverage for settings resolution from flags and YAML config.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from stacklib.core import errors
from stacklib.core.config import StackConfigLoader

#============================================

def _options(**kwargs) -> dict:
	options = {
		'positional': [],
		'rows': None,
		'cols': None,
		'input_dir': None,
		'output': None,
		'fit_mode': None,
		'cell_width': None,
		'cell_height': None,
		'gutter': None,
		'align': None,
		'bg_color': None,
		'exts': None,
		'limit': None,
		'config': None,
		'dry_run': False,
		'dump_plan': False,
		'quiet': None,
	}
	options.update(kwargs)
	return options

#============================================

def _write_config(path: str, lines: list) -> str:
	with open(path, "w", encoding="utf-8") as handle:
		handle.write("\n".join(lines))
		handle.write("\n")
	return path

#============================================

def test_image_defaults(tmp_path) -> None:
	options = _options(rows=2, cols=3, positional=[str(tmp_path)])
	settings = StackConfigLoader('image', options).load()
	assert settings.input_dir == str(tmp_path)
	assert settings.grid.fit_mode == 'tight'
	assert settings.grid.align == 'left'
	assert settings.grid.gutter == 0
	assert settings.bg_color == 'black@0'
	assert settings.exts == ('png', 'jpg', 'jpeg', 'webp')
	assert settings.limit == 6
	assert settings.output_file == os.path.join(str(tmp_path), "grid_2x3.png")

#============================================

def test_video_defaults(tmp_path) -> None:
	options = _options(rows=1, cols=2, input_dir=str(tmp_path))
	settings = StackConfigLoader('video', options).load()
	assert settings.grid.fit_mode == 'contain'
	assert settings.bg_color == '0x000000'
	assert settings.exts == ('mp4', 'mov', 'mkv', 'webm')
	assert (settings.fps, settings.crf, settings.preset) == (30, 23, 'medium')
	assert (settings.fit_duration, settings.audio) == ('shortest', 'none')
	assert settings.output_file.endswith("grid_1x2.mp4")

#============================================

def test_config_file_and_flag_precedence(tmp_path) -> None:
	config_path = _write_config(str(tmp_path / "stack.yaml"), [
		"mediastack: 1",
		"grid:",
		"  rows: 3",
		"  cols: 2",
		"  gutter: 8",
		"  fit_mode: cover",
		"  bg_color: \"#102030\"",
		"input:",
		"  exts: [PNG, .jpg]",
		"  limit: 4",
		"video:",
		"  fps: 24",
		"  audio: mix",
	])
	options = _options(input_dir=str(tmp_path), config=config_path, gutter=2)
	settings = StackConfigLoader('video', options).load()
	assert (settings.grid.rows, settings.grid.cols) == (3, 2)
	assert settings.grid.gutter == 2
	assert settings.grid.fit_mode == 'cover'
	assert settings.bg_color == '0x102030'
	assert settings.exts == ('png', 'jpg')
	assert settings.limit == 4
	assert settings.fps == 24
	assert settings.audio == 'mix'
	assert not hasattr(settings, 'config_file')

#============================================

def test_config_header_required(tmp_path) -> None:
	config_path = _write_config(str(tmp_path / "stack.yaml"), ["grid: {rows: 1}"])
	options = _options(cols=1, input_dir=str(tmp_path), config=config_path)
	with pytest.raises(errors.InvalidConfig):
		StackConfigLoader('image', options).load()

#============================================

def test_config_unknown_key(tmp_path) -> None:
	config_path = _write_config(str(tmp_path / "stack.yaml"), [
		"mediastack: 1",
		"grid: {rows: 1, cols: 1, spacing: 3}",
	])
	options = _options(input_dir=str(tmp_path), config=config_path)
	with pytest.raises(errors.InvalidConfig, match="grid.spacing"):
		StackConfigLoader('image', options).load()

#============================================

def test_config_bad_type(tmp_path) -> None:
	config_path = _write_config(str(tmp_path / "stack.yaml"), [
		"mediastack: 1",
		"grid: {rows: two, cols: 1}",
	])
	options = _options(input_dir=str(tmp_path), config=config_path)
	with pytest.raises(errors.InvalidConfig, match="grid.rows"):
		StackConfigLoader('image', options).load()

#============================================

@pytest.mark.parametrize("overrides", [
	{'rows': None},
	{'rows': 0},
	{'gutter': -2},
	{'limit': 0},
	{'cell_width': 1},
	{'bg_color': 'nope'},
	{'exts': ' , '},
])
def test_invalid_image_options(tmp_path, overrides) -> None:
	options = _options(rows=1, cols=1, input_dir=str(tmp_path))
	options.update(overrides)
	with pytest.raises(errors.InvalidConfig):
		StackConfigLoader('image', options).load()

#============================================

@pytest.mark.parametrize("overrides", [
	{'fps': 0},
	{'crf': 52},
	{'fit_duration': 'middle'},
	{'audio': 'all'},
])
def test_invalid_video_options(tmp_path, overrides) -> None:
	options = _options(rows=1, cols=1, input_dir=str(tmp_path))
	options.update(overrides)
	with pytest.raises(errors.InvalidConfig):
		StackConfigLoader('video', options).load()

#============================================

def test_unusual_preset_warns(tmp_path, capsys) -> None:
	options = _options(rows=1, cols=1, input_dir=str(tmp_path), preset='turbo')
	settings = StackConfigLoader('video', options).load()
	assert settings.preset == 'turbo'
	assert "unusual --preset 'turbo'" in capsys.readouterr().err

#============================================

def test_input_dir_rules(tmp_path) -> None:
	missing = str(tmp_path / "missing")
	with pytest.raises(errors.InvalidConfig):
		StackConfigLoader('image', _options(rows=1, cols=1, input_dir=missing)).load()
	options = _options(rows=1, cols=1, positional=[str(tmp_path), str(tmp_path)])
	with pytest.raises(errors.InvalidConfig, match="multiple positional"):
		StackConfigLoader('image', options).load()
	with pytest.raises(errors.InvalidConfig):
		StackConfigLoader('image', _options(rows=1, cols=1)).load()
