#!/usr/bin/env python3

#============================================

class StackError(RuntimeError):
	"""Base class for grid stacking failures."""
	exit_code = 1

#============================================

class InvalidConfig(StackError):
	"""Bad flag or config value, raised before any media I/O."""
	exit_code = 2

#============================================

class ProbeError(StackError):
	"""Source unreadable or dimensions unparseable."""

#============================================

class EmptyInput(StackError):
	"""No items to lay out."""

#============================================

class RenderError(StackError):
	"""The external engine failed or produced no output."""
