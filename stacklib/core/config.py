#!/usr/bin/env python3

"""
Resolve CLI options and an optional YAML config into one settings object.

Precedence is explicit CLI flag, then config file, then tool default. All
validation happens here, before any media file is touched.
"""

import os
import yaml
from stacklib.core import errors
from stacklib.core.compositor import parse_bg_color
from stacklib.core.layout import GridSpec
from stacklib.core import utils

#============================================

TOOL_CONFIG_HEADER_KEY = "mediastack"
TOOL_CONFIG_HEADER_VALUE = 1

TOOL_DEFAULTS = {
	'image': {
		'fit_mode': 'tight',
		'exts': 'png,jpg,jpeg,webp',
		'bg_color': 'transparent',
		'output_ext': '.png',
	},
	'video': {
		'fit_mode': 'contain',
		'exts': 'mp4,mov,mkv,webm',
		'bg_color': 'black',
		'output_ext': '.mp4',
	},
}

KNOWN_PRESETS = ('ultrafast', 'superfast', 'veryfast', 'faster', 'fast',
	'medium', 'slow', 'slower', 'veryslow')

# (config section, config key) -> option name
CONFIG_KEYS = {
	('grid', 'rows'): 'rows',
	('grid', 'cols'): 'cols',
	('grid', 'gutter'): 'gutter',
	('grid', 'align'): 'align',
	('grid', 'fit_mode'): 'fit_mode',
	('grid', 'cell_width'): 'cell_width',
	('grid', 'cell_height'): 'cell_height',
	('grid', 'bg_color'): 'bg_color',
	('input', 'dir'): 'input_dir',
	('input', 'exts'): 'exts',
	('input', 'limit'): 'limit',
	('output', 'file'): 'output',
	('output', 'quiet'): 'quiet',
	('video', 'fps'): 'fps',
	('video', 'crf'): 'crf',
	('video', 'preset'): 'preset',
	('video', 'fit_duration'): 'fit_duration',
	('video', 'audio'): 'audio',
}

INT_OPTIONS = ('rows', 'cols', 'gutter', 'cell_width', 'cell_height', 'limit',
	'fps', 'crf')

#============================================

class StackSettings():
	def __init__(self):
		self.media = None
		self.input_dir = None
		self.output_file = None
		self.grid = None
		self.bg_color = None
		self.bg_color_raw = None
		self.exts = ()
		self.limit = None
		self.quiet = False
		self.dry_run = False
		self.dump_plan = False
		# video only
		self.fps = 30
		self.crf = 23
		self.preset = 'medium'
		self.fit_duration = 'shortest'
		self.audio = 'none'

#============================================

def load_config(config_path: str) -> dict:
	"""
	Load a config file from disk.

	Args:
		config_path: Config file path.

	Returns:
		dict: Parsed config mapping.
	"""
	if not os.path.isfile(config_path):
		raise errors.InvalidConfig(f"config file not found: {config_path}")
	with open(config_path, "r", encoding="utf-8") as handle:
		try:
			data = yaml.safe_load(handle)
		except yaml.YAMLError as exc:
			raise errors.InvalidConfig(f"config {config_path}: invalid yaml") from exc
	if not isinstance(data, dict):
		raise errors.InvalidConfig("config file must be a mapping")
	if data.get(TOOL_CONFIG_HEADER_KEY) != TOOL_CONFIG_HEADER_VALUE:
		raise errors.InvalidConfig(
			f"config file must set {TOOL_CONFIG_HEADER_KEY}: {TOOL_CONFIG_HEADER_VALUE}"
		)
	return data

#============================================

def coerce_int(value, config_path: str, key_path: str) -> int:
	if isinstance(value, bool):
		raise errors.InvalidConfig(f"config {config_path}: {key_path} must be an integer")
	if isinstance(value, int):
		return value
	if isinstance(value, float) and value.is_integer():
		return int(value)
	if isinstance(value, str):
		try:
			return int(value.strip())
		except ValueError:
			pass
	raise errors.InvalidConfig(f"config {config_path}: {key_path} must be an integer")

#============================================

def coerce_str(value, config_path: str, key_path: str) -> str:
	if isinstance(value, str):
		return value
	raise errors.InvalidConfig(f"config {config_path}: {key_path} must be a string")

#============================================

def options_from_config(data: dict, config_path: str) -> dict:
	"""
	Flatten a config mapping into option names.
	"""
	options = {}
	for section in ('grid', 'input', 'output', 'video'):
		block = data.get(section)
		if block is None:
			continue
		if not isinstance(block, dict):
			raise errors.InvalidConfig(f"config {config_path}: {section} must be a mapping")
		for key, value in block.items():
			name = CONFIG_KEYS.get((section, key))
			key_path = f"{section}.{key}"
			if name is None:
				raise errors.InvalidConfig(f"config {config_path}: unknown key {key_path}")
			if value is None:
				continue
			if name in INT_OPTIONS:
				value = coerce_int(value, config_path, key_path)
			elif name == 'quiet':
				if not isinstance(value, bool):
					raise errors.InvalidConfig(f"config {config_path}: {key_path} must be a boolean")
			elif name == 'exts':
				if not isinstance(value, (str, list)):
					raise errors.InvalidConfig(f"config {config_path}: {key_path} must be a string or list")
			else:
				value = coerce_str(value, config_path, key_path)
			options[name] = value
	return options

#============================================

class StackConfigLoader():
	def __init__(self, media: str, options: dict):
		if media not in TOOL_DEFAULTS:
			raise errors.InvalidConfig(f"unknown media kind: {media}")
		self.media = media
		self.options = options

	#============================
	def load(self) -> StackSettings:
		merged = self._merge_options()
		settings = StackSettings()
		settings.media = self.media
		settings.dry_run = bool(self.options.get('dry_run'))
		settings.dump_plan = bool(self.options.get('dump_plan'))
		settings.quiet = bool(merged.get('quiet'))
		settings.input_dir = self._resolve_input_dir(merged)
		settings.grid = self._parse_grid(merged)
		settings.bg_color_raw = merged['bg_color']
		settings.bg_color = parse_bg_color(merged['bg_color'])
		settings.exts = utils.parse_extensions(merged['exts'])
		settings.limit = self._parse_limit(merged.get('limit'), settings.grid)
		settings.output_file = self._resolve_output(merged.get('output'),
			settings.input_dir, settings.grid)
		if self.media == 'video':
			self._parse_video(merged, settings)
		return settings

	#============================
	def _merge_options(self) -> dict:
		defaults = TOOL_DEFAULTS[self.media]
		merged = {
			'fit_mode': defaults['fit_mode'],
			'exts': defaults['exts'],
			'bg_color': defaults['bg_color'],
			'gutter': 0,
			'align': 'left',
			'fps': 30,
			'crf': 23,
			'preset': 'medium',
			'fit_duration': 'shortest',
			'audio': 'none',
		}
		config_path = self.options.get('config')
		if config_path is not None:
			merged.update(options_from_config(load_config(config_path), config_path))
		for key, value in self.options.items():
			if value is None or key in ('config', 'positional', 'dry_run', 'dump_plan'):
				continue
			merged[key] = value
		return merged

	#============================
	def _resolve_input_dir(self, merged: dict) -> str:
		input_dir = merged.get('input_dir')
		positional = self.options.get('positional') or []
		if input_dir is None:
			if len(positional) > 1:
				raise errors.InvalidConfig(
					"multiple positional directories provided; use -i/--input-dir"
				)
			if len(positional) == 1:
				input_dir = positional[0]
		elif len(positional) > 0:
			raise errors.InvalidConfig("use -i/--input-dir or a positional directory, not both")
		if input_dir is None or not os.path.isdir(input_dir):
			raise errors.InvalidConfig("INPUT_DIR must be an existing directory")
		return input_dir

	#============================
	def _parse_grid(self, merged: dict) -> GridSpec:
		if merged.get('rows') is None:
			raise errors.InvalidConfig("--rows is required")
		if merged.get('cols') is None:
			raise errors.InvalidConfig("--cols is required")
		return GridSpec(
			rows=merged['rows'],
			cols=merged['cols'],
			gutter=merged['gutter'],
			align=merged['align'],
			fit_mode=merged['fit_mode'],
			cell_width=merged.get('cell_width'),
			cell_height=merged.get('cell_height'),
		)

	#============================
	def _parse_limit(self, limit, grid: GridSpec) -> int:
		if limit is None:
			return grid.capacity
		if limit < 1:
			raise errors.InvalidConfig("--limit must be >= 1")
		return limit

	#============================
	def _resolve_output(self, output, input_dir: str, grid: GridSpec) -> str:
		if output is not None:
			return output
		ext = TOOL_DEFAULTS[self.media]['output_ext']
		return os.path.join(input_dir, f"grid_{grid.rows}x{grid.cols}{ext}")

	#============================
	def _parse_video(self, merged: dict, settings: StackSettings) -> None:
		fps = merged['fps']
		if fps < 1:
			raise errors.InvalidConfig("--fps must be >= 1")
		crf = merged['crf']
		if crf < 0 or crf > 51:
			raise errors.InvalidConfig("--crf must be 0..51")
		preset = merged['preset']
		if preset not in KNOWN_PRESETS:
			utils.print_warning(f"unusual --preset '{preset}'")
		fit_duration = merged['fit_duration']
		if fit_duration not in ('shortest', 'longest'):
			raise errors.InvalidConfig("--fit-duration must be shortest|longest")
		audio = merged['audio']
		if audio not in ('first', 'mix', 'none'):
			raise errors.InvalidConfig("--audio must be first|mix|none")
		settings.fps = fps
		settings.crf = crf
		settings.preset = preset
		settings.fit_duration = fit_duration
		settings.audio = audio
		return
