#!/usr/bin/env python3

"""
Translate a CanvasPlan into an ordered list of ffmpeg compositing operations.

The operation list is immutable and built before ffmpeg is invoked, so the
filter graph can be inspected and tested without running the engine.
"""

import dataclasses
import PIL.ImageColor
from stacklib.core import errors
from stacklib.core.layout import CanvasPlan
from stacklib.core.layout import GridSpec

#============================================

MEDIA_KINDS = ('image', 'video')
# shorter tails than this are not worth a tpad
MIN_PAD_SECONDS = 0.0005

#============================================

def parse_bg_color(value: str) -> str:
	"""
	Convert a user background color into an ffmpeg color expression.

	Args:
		value: 'transparent', a color name, or '#RRGGBB' / '#RRGGBBAA'.

	Returns:
		str: ffmpeg color such as 'black@0' or '0x202020'.
	"""
	text = str(value).strip()
	if text.lower() == 'transparent':
		return 'black@0'
	try:
		rgb = PIL.ImageColor.getrgb(text)
	except ValueError as exc:
		raise errors.InvalidConfig(f"unknown background color: {value}") from exc
	color = f"0x{rgb[0]:02X}{rgb[1]:02X}{rgb[2]:02X}"
	if len(rgb) == 4 and rgb[3] != 255:
		color += f"@{rgb[3] / 255.0:.3f}"
	return color

#============================================

@dataclasses.dataclass(frozen=True)
class CanvasOp():
	width: int
	height: int
	color: str

	#============================
	def source(self, rate: int = 1) -> str:
		"""lavfi source expression for the blank canvas."""
		return f"color=c={self.color}:s={self.width}x{self.height}:r={rate},format=rgba"

#============================================

@dataclasses.dataclass(frozen=True)
class CompositeOp():
	input_index: int
	source: str
	x: int
	y: int
	transform: str

	#============================
	def tile_label(self) -> str:
		return f"[im{self.input_index - 1}]"

#============================================

@dataclasses.dataclass(frozen=True)
class RenderPlan():
	media: str
	canvas: CanvasOp
	steps: tuple
	fps: int = None

	#============================
	def sources(self) -> list:
		return [step.source for step in self.steps]

	#============================
	def final_label(self) -> str:
		return f"[base{len(self.steps)}]"

	#============================
	def filter_parts(self) -> list:
		"""
		Filter graph pieces in order: base, tile chains, overlay chain.
		"""
		parts = ["[0:v]format=rgba[base0]"]
		for step in self.steps:
			parts.append(f"[{step.input_index}:v]{step.transform}{step.tile_label()}")
		overlay_opts = "format=auto"
		if self.media == 'video':
			overlay_opts += ":shortest=1"
		for index, step in enumerate(self.steps):
			prev_label = f"[base{index}]"
			next_label = f"[base{index + 1}]"
			parts.append(f"{prev_label}{step.tile_label()}"
				f"overlay=x={step.x}:y={step.y}:{overlay_opts}{next_label}")
		return parts

	#============================
	def filter_complex(self) -> str:
		return ";".join(self.filter_parts())

#============================================

def fit_transform(fit_mode: str, width: int, height: int, bg_color: str) -> str:
	if fit_mode == 'tight':
		return "format=rgba"
	if fit_mode == 'contain':
		return (f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
			f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2:color={bg_color},format=rgba")
	if fit_mode == 'cover':
		return (f"scale={width}:{height}:force_original_aspect_ratio=increase,"
			f"crop={width}:{height},format=rgba")
	raise errors.InvalidConfig(f"unknown fit mode: {fit_mode}")

#============================================

def build_render_plan(plan: CanvasPlan, grid: GridSpec, bg_color: str,
	media: str = 'image', fps: int = None, pad_seconds: list = None) -> RenderPlan:
	"""
	Build the compositing operations for a CanvasPlan.

	Args:
		plan: Computed layout.
		grid: Grid settings the plan was built from.
		bg_color: ffmpeg color expression from parse_bg_color().
		media: 'image' or 'video'.
		fps: Output frame rate, required for video.
		pad_seconds: Per-item clone-pad durations for video, in plan order.

	Returns:
		RenderPlan: Canvas allocation plus one composite step per item.
	"""
	if media not in MEDIA_KINDS:
		raise errors.InvalidConfig(f"media must be {'|'.join(MEDIA_KINDS)}")
	if media == 'video' and fps is None:
		raise errors.InvalidConfig("video stacking requires fps")
	canvas = CanvasOp(plan.width, plan.height, bg_color)
	steps = []
	for index, placed in enumerate(plan.placed):
		transform = fit_transform(grid.fit_mode, placed.render_width,
			placed.render_height, bg_color)
		if media == 'video':
			chain = [f"fps=fps={fps}", transform, "setsar=1"]
			if pad_seconds is not None and pad_seconds[index] > MIN_PAD_SECONDS:
				chain.append(f"tpad=stop_mode=clone:stop_duration={pad_seconds[index]:.6f}")
			transform = ",".join(chain)
		steps.append(CompositeOp(
			input_index=index + 1,
			source=placed.item.path,
			x=placed.x,
			y=placed.y,
			transform=transform,
		))
	return RenderPlan(media, canvas, tuple(steps), fps)
