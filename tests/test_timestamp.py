"""
Pytest coverage for the HH:MM:SS.mmm timestamp formatter.
"""

# Standard Library
import os
import sys
from decimal import Decimal
from fractions import Fraction

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from kdengenlib.core import utils

#============================================

@pytest.mark.parametrize("seconds, expected", [
	(0, "00:00:00.000"),
	(1, "00:00:01.000"),
	(9.0, "00:00:09.000"),
	(3661.25, "01:01:01.250"),
	(0.001, "00:00:00.001"),
	(59.5, "00:00:59.500"),
	(36000, "10:00:00.000"),
])
def test_aligned_values_are_exact(seconds, expected) -> None:
	"""
	Ensure second and millisecond aligned input formats exactly.
	"""
	assert utils.seconds_to_timestamp(seconds) == expected

#============================================

def test_half_millisecond_rounds_up() -> None:
	"""
	Ensure a half millisecond rounds up.
	"""
	assert utils.seconds_to_timestamp(0.0005) == "00:00:00.001"
	assert utils.seconds_to_timestamp(0.0004) == "00:00:00.000"

#============================================

def test_rounding_carries_across_fields() -> None:
	"""
	Ensure 999.5 ms carries into seconds, minutes and hours.
	"""
	assert utils.seconds_to_timestamp(59.9995) == "00:01:00.000"
	assert utils.seconds_to_timestamp(3599.9995) == "01:00:00.000"
	assert utils.seconds_to_timestamp(1.9996) == "00:00:02.000"

#============================================

def test_float_noise_is_absorbed() -> None:
	"""
	Ensure binary float error does not leak into the millisecond field.
	"""
	assert utils.seconds_to_timestamp(0.1 + 0.2) == "00:00:00.300"
	assert utils.seconds_to_timestamp(10.0 - 9.9) == "00:00:00.100"

#============================================

def test_hours_are_not_wrapped() -> None:
	"""
	Ensure durations past 99 hours keep growing the hour field.
	"""
	assert utils.seconds_to_timestamp(360000) == "100:00:00.000"

#============================================

def test_negative_is_clamped_to_zero() -> None:
	"""
	Ensure negative durations format as zero.
	"""
	assert utils.seconds_to_timestamp(-2.5) == "00:00:00.000"

#============================================

def test_parse_timecode_reads_timestamp_output() -> None:
	"""
	Ensure formatted timestamps parse back to the same seconds.
	"""
	text = utils.seconds_to_timestamp(3661.25)
	assert utils.parse_timecode(text) == Decimal("3661.250")
	assert utils.parse_timecode("01:30.5") == Decimal("90.5")

#============================================

def test_parse_fps_variants() -> None:
	"""
	Ensure frame rates parse from int, float and fraction strings.
	"""
	assert utils.parse_fps(60) == Fraction(60, 1)
	assert utils.parse_fps(29.97) == Fraction(2997, 100)
	assert utils.parse_fps("30000/1001") == Fraction(30000, 1001)
	with pytest.raises(RuntimeError):
		utils.parse_fps(None)

#============================================

def test_format_fps() -> None:
	"""
	Ensure frame rates print without trailing zeros.
	"""
	assert utils.format_fps(Fraction(60, 1)) == "60"
	assert utils.format_fps(Fraction(30000, 1001)) == "29.97"
	assert utils.format_fps(Fraction(25, 2)) == "12.5"

#============================================

@pytest.mark.parametrize("raw_fps", ["30/0", "abc", "30/1/2", "/1"])
def test_parse_fps_malformed_string(raw_fps) -> None:
	"""
	Ensure malformed frame rate strings raise RuntimeError.
	"""
	with pytest.raises(RuntimeError):
		utils.parse_fps(raw_fps)

#============================================

@pytest.mark.parametrize("raw_time", ["abc", "1:xx", "1:2:3:4", "1e"])
def test_parse_timecode_malformed_string(raw_time) -> None:
	"""
	Ensure malformed time strings raise RuntimeError.
	"""
	with pytest.raises(RuntimeError):
		utils.parse_timecode(raw_time)
