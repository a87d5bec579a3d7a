#!/usr/bin/env python3

import argparse
import sys
from stacklib.core import batch
from stacklib.core import errors
from stacklib.core import utils
from stacklib.core.config import StackConfigLoader
from stacklib.core.layout import ALIGNMENTS
from stacklib.core.layout import FIT_MODES
from stacklib.core.project import StackProject

#============================================

def add_grid_arguments(parser: argparse.ArgumentParser) -> None:
	"""
	Add the flags shared by every stacking tool.

	Defaults stay None so config file values are only overridden by
	flags the user actually passed.
	"""
	parser.add_argument('positional', nargs='*', metavar='INPUT_DIR',
		help='input directory (alternative to -i/--input-dir)')
	parser.add_argument('-n', '--rows', dest='rows', type=int,
		help='number of grid rows (>=1)')
	parser.add_argument('-m', '--cols', dest='cols', type=int,
		help='number of grid columns (>=1)')
	parser.add_argument('-i', '--input-dir', dest='input_dir',
		help='folder of inputs, sorted by filename')
	parser.add_argument('-o', '--output', dest='output',
		help='output file (default: INPUT_DIR/grid_RxC.EXT)')
	parser.add_argument('--fit-mode', dest='fit_mode', choices=FIT_MODES,
		help='tight keeps native sizes; contain pads; cover crops')
	parser.add_argument('--cell-width', dest='cell_width', type=int,
		help='cell width for contain/cover (default: first input width)')
	parser.add_argument('--cell-height', dest='cell_height', type=int,
		help='cell height for contain/cover (default: first input height)')
	parser.add_argument('--gutter', dest='gutter', type=int,
		help='pixels between cells and rows')
	parser.add_argument('--align', dest='align', choices=ALIGNMENTS,
		help='horizontal row alignment for tight mode')
	parser.add_argument('--bg-color', dest='bg_color',
		help='white, black, transparent or #RRGGBB')
	parser.add_argument('--exts', dest='exts',
		help='comma separated list of extensions to include')
	parser.add_argument('--limit', dest='limit', type=int,
		help='maximum number of inputs (default: rows*cols)')
	parser.add_argument('-c', '--config', dest='config',
		help='optional YAML config file')
	parser.add_argument('--dry-run', dest='dry_run', action='store_true',
		help='probe and plan, do not render')
	parser.add_argument('--dump-plan', dest='dump_plan', action='store_true',
		help='print the computed layout as YAML and exit')
	parser.add_argument('--quiet', dest='quiet', action='store_true', default=None,
		help='only show ffmpeg errors')
	return

#============================================

def run_tool(media: str, args: argparse.Namespace) -> int:
	"""
	Resolve settings and run one stacking job.

	Returns:
		int: Process exit code.
	"""
	try:
		settings = StackConfigLoader(media, vars(args)).load()
		utils.set_quiet_mode(settings.quiet)
		StackProject(settings).run()
	except errors.StackError as exc:
		sys.stderr.write(f"Error: {exc}\n")
		return exc.exit_code
	return 0

#============================================

def add_encode_arguments(parser: argparse.ArgumentParser, fps: bool = True,
	audio_toggle: bool = True) -> None:
	"""
	Add the flags shared by the per-file MP4 tools.
	"""
	parser.add_argument('inputs', nargs='+', metavar='INPUT_PATH',
		help='MP4 files and/or directories (searched recursively)')
	parser.add_argument('-c', '--crf', dest='crf', type=int, default=23,
		help='libx264 quality, 0..51, lower is better (default 23)')
	parser.add_argument('-p', '--preset', dest='preset', default='medium',
		help='libx264 preset (default medium)')
	parser.add_argument('-o', '--output-dir', dest='output_dir',
		help='directory for outputs (default: next to each input)')
	if fps:
		parser.add_argument('--fps', dest='fps', type=float,
			help='constant output frame rate (default: first input rate, else 30)')
	if audio_toggle:
		parser.add_argument('--unmute', dest='unmute', action='store_true',
			help='keep audio when the input has it')
		parser.add_argument('--mute', '--no-audio', dest='unmute', action='store_false',
			help='drop audio (default)')
		parser.set_defaults(unmute=False)
	parser.add_argument('--quiet', dest='quiet', action='store_true',
		help='only show ffmpeg errors')
	return

#============================================

def run_batch_tool(plan_jobs, args: argparse.Namespace) -> int:
	"""
	Plan and run the jobs of one per-file tool.

	Args:
		plan_jobs: Planner from stacklib.core.tools.
		args: Parsed command line.

	Returns:
		int: Process exit code.
	"""
	try:
		utils.set_quiet_mode(bool(getattr(args, 'quiet', False)))
		jobs = plan_jobs(args)
		batch.run_jobs(jobs, dry_run=bool(getattr(args, 'dry_run', False)))
	except errors.StackError as exc:
		sys.stderr.write(f"Error: {exc}\n")
		return exc.exit_code
	return 0
