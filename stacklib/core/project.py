#!/usr/bin/env python3

import yaml
from stacklib.core import utils
from stacklib.core.cells import resolve_cell_size
from stacklib.core.compositor import RenderPlan
from stacklib.core.compositor import build_render_plan
from stacklib.core.config import StackSettings
from stacklib.core.layout import CanvasPlan
from stacklib.core.layout import plan_layout
from stacklib.media import ffmpeg_render
from stacklib.media import ffprobe

#============================================

class StackProject():
	def __init__(self, settings: StackSettings):
		self.settings = settings
		self.items = ()
		self.cell_size = None
		self.plan = None
		self.render_plan = None
		self.audio_inputs = []

	#============================
	def prepare(self) -> CanvasPlan:
		settings = self.settings
		utils.check_dependency("ffprobe")
		files = utils.gather_files(settings.input_dir, settings.exts, settings.limit,
			exclude=[settings.output_file])
		self.items = ffprobe.probe_items(files)
		self.cell_size = resolve_cell_size(settings.grid, self.items)
		if self.cell_size is not None and (settings.grid.cell_width is None
			or settings.grid.cell_height is None):
			utils.print_info(
				f"Auto cell size from first input: {self.cell_size[0]}x{self.cell_size[1]}"
			)
		self.plan = plan_layout(settings.grid, self.items, self.cell_size)
		self.render_plan = self._build_render_plan()
		return self.plan

	#============================
	def _build_render_plan(self) -> RenderPlan:
		settings = self.settings
		if settings.media == 'image':
			return build_render_plan(self.plan, settings.grid, settings.bg_color)
		pad_seconds = None
		if settings.fit_duration == 'longest':
			durations = [ffprobe.probe_duration(placed.item.path)
				for placed in self.plan.placed]
			max_duration = max(durations)
			utils.print_info(f"Max duration (s): {max_duration}")
			pad_seconds = [max(0.0, max_duration - duration) for duration in durations]
		self.audio_inputs = []
		if settings.audio != 'none':
			for index, placed in enumerate(self.plan.placed):
				if ffprobe.probe_has_audio(placed.item.path):
					self.audio_inputs.append(index)
		return build_render_plan(self.plan, settings.grid, settings.bg_color,
			media='video', fps=settings.fps, pad_seconds=pad_seconds)

	#============================
	def build_command(self) -> list:
		settings = self.settings
		if settings.media == 'image':
			return ffmpeg_render.build_image_command(self.render_plan,
				settings.output_file)
		return ffmpeg_render.build_video_command(self.render_plan,
			settings.output_file, crf=settings.crf, preset=settings.preset,
			fit_duration=settings.fit_duration, audio_mode=settings.audio,
			audio_inputs=self.audio_inputs)

	#============================
	def dump_plan(self) -> str:
		data = self.plan.to_dict()
		data['fit_mode'] = self.settings.grid.fit_mode
		data['grid'] = [self.settings.grid.rows, self.settings.grid.cols]
		data['filter_complex'] = self.render_plan.filter_complex()
		return yaml.safe_dump(data, sort_keys=False)

	#============================
	def _print_summary(self) -> None:
		settings = self.settings
		grid = settings.grid
		utils.print_info(f"Mode={grid.fit_mode}  Align={grid.align}  "
			f"Gutter={grid.gutter}  BG={settings.bg_color_raw}")
		utils.print_info(f"Canvas={self.plan.width}x{self.plan.height}  "
			f"Grid={grid.rows}x{grid.cols}  Inputs={len(self.plan.placed)}")
		if settings.media == 'video':
			utils.print_info(f"FPS={settings.fps}  Fit-duration={settings.fit_duration}  "
				f"Audio={settings.audio}")
		utils.print_info(f"Output: {settings.output_file}")

	#============================
	def run(self) -> None:
		self.prepare()
		if self.settings.dump_plan:
			print(self.dump_plan())
			return
		utils.check_dependency("ffmpeg")
		self._print_summary()
		cmd = self.build_command()
		if self.settings.dry_run:
			if not utils.is_quiet_mode():
				print("dry run: validation complete")
			return
		ffmpeg_render.render(cmd, self.settings.output_file)
		print(f"[OK] Wrote: {self.settings.output_file}")
