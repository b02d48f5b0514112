#!/usr/bin/env python3

import os
import sys
from decimal import Decimal
from decimal import InvalidOperation
from decimal import ROUND_HALF_UP
from fractions import Fraction

#============================================

def is_quiet_mode() -> bool:
	value = os.environ.get('KDENGEN_QUIET', '')
	return value.strip().lower() in ('1', 'true', 'yes', 'on')

#============================================

def set_quiet_mode(quiet: bool) -> None:
	if quiet:
		os.environ['KDENGEN_QUIET'] = '1'
	else:
		os.environ.pop('KDENGEN_QUIET', None)

#============================================

def warn(message: str) -> None:
	if not is_quiet_mode():
		print(f"WARNING: {message}", file=sys.stderr)

#============================================

def parse_fps(raw_fps) -> Fraction:
	if raw_fps is None:
		raise RuntimeError("profile.fps is required")
	if isinstance(raw_fps, bool):
		raise RuntimeError("profile.fps must be int, float, or fraction string")
	if isinstance(raw_fps, int):
		return Fraction(raw_fps, 1)
	if isinstance(raw_fps, float):
		return Fraction(str(raw_fps))
	if isinstance(raw_fps, Fraction):
		return raw_fps
	if isinstance(raw_fps, str):
		try:
			if '/' in raw_fps:
				parts = raw_fps.split('/')
				if len(parts) != 2:
					raise ValueError('expected num/den')
				return Fraction(int(parts[0]), int(parts[1]))
			return Fraction(raw_fps)
		except (ValueError, ZeroDivisionError) as exc:
			raise RuntimeError(f"invalid profile.fps: {raw_fps}") from exc
	raise RuntimeError("profile.fps must be int, float, or fraction string")

#============================================

def parse_timecode(raw_time) -> Decimal:
	if raw_time is None:
		raise RuntimeError("time value is required")
	if isinstance(raw_time, bool):
		raise RuntimeError("time values must be int, float, or timecode string")
	if isinstance(raw_time, int):
		return Decimal(raw_time)
	if isinstance(raw_time, float):
		return Decimal(str(raw_time))
	if isinstance(raw_time, str):
		value = raw_time.strip()
		if value == '':
			raise RuntimeError("time value is empty")
		try:
			if ':' not in value:
				return Decimal(value)
			parts = value.split(':')
			if len(parts) > 3:
				raise ValueError("too many fields")
			seconds = Decimal(parts.pop())
			minutes = Decimal(parts.pop())
			hours = Decimal(0)
			if len(parts) > 0:
				hours = Decimal(parts.pop())
		except (ValueError, InvalidOperation) as exc:
			raise RuntimeError(f"invalid time value: {raw_time}") from exc
		return hours * Decimal(3600) + minutes * Decimal(60) + seconds
	raise RuntimeError("time values must be int, float, or timecode string")

#============================================

def seconds_to_timestamp(seconds: float) -> str:
	"""
	Format a duration in seconds as a fixed width HH:MM:SS.mmm string.

	The value is rounded half-up to whole milliseconds before it is split
	into fields, so 59.9995 becomes 00:01:00.000 rather than 00:00:59.1000.
	Negative input is treated as zero.

	Args:
		seconds: Duration in seconds.

	Returns:
		str: Timestamp string.
	"""
	value = Decimal(str(seconds))
	if value < 0:
		value = Decimal(0)
	total_ms = int((value * 1000).quantize(Decimal(1), rounding=ROUND_HALF_UP))
	hours = total_ms // 3600000
	remainder = total_ms % 3600000
	minutes = remainder // 60000
	remainder = remainder % 60000
	secs = remainder // 1000
	millis = remainder % 1000
	return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"

#============================================

def reduce_fraction(num: int, den: int) -> tuple:
	if den == 0:
		return (num, den)
	a = num
	b = den
	while b != 0:
		a, b = b, a % b
	gcd = a if a != 0 else 1
	return (num // gcd, den // gcd)

#============================================

def format_fps(fps: Fraction) -> str:
	if fps.denominator == 1:
		return str(fps.numerator)
	value = f"{float(fps):.3f}"
	return value.rstrip('0').rstrip('.')

#============================================

def ensure_file_exists(filepath: str) -> None:
	if not os.path.exists(filepath):
		raise RuntimeError(f"file not found: {filepath}")
	return
