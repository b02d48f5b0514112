#!/usr/bin/env python3

import bisect
from kdengenlib.core import utils

VIDEO = 'video'
AUDIO = 'audio'
CHANNELS = (VIDEO, AUDIO)

#============================================

class ClipRecord():
	def __init__(self, name: str, length: float, start_offset: float = 0):
		self.name = name
		self.length = float(length)
		self.start_offset = float(start_offset)
		self.fade_in_time = 0.0
		self.fade_out_time = 0.0
		# reserved for stacking order of overlapping video, not used yet
		self.priority = 0

#============================================

class ClipRef():
	"""
	Handle to one clip record inside a Timeline.

	Every placement of the same handle reads the record at compile time,
	so edits made after placing a clip apply to all of its placements.
	"""
	def __init__(self, timeline, index: int):
		self._timeline = timeline
		self.index = index

	#============================
	def _record(self) -> ClipRecord:
		return self._timeline.clips[self.index]

	#============================
	@property
	def name(self) -> str:
		return self._record().name

	@property
	def length(self) -> float:
		return self._record().length

	@property
	def start_offset(self) -> float:
		return self._record().start_offset

	@property
	def fade_in_time(self) -> float:
		return self._record().fade_in_time

	@property
	def fade_out_time(self) -> float:
		return self._record().fade_out_time

	@property
	def priority(self) -> int:
		return self._record().priority

	#============================
	def set_bounds(self, length: float, start_offset: float = None) -> bool:
		"""
		Set the clip length and source offset.

		This setter is permissive: a non-positive length or a negative
		offset leaves that field unchanged and prints a warning. Leaving
		start_offset as None keeps the current offset.

		Returns:
			bool: True if every value was applied.
		"""
		record = self._record()
		applied = True
		if length > 0:
			record.length = float(length)
		else:
			utils.warn(f"clip {record.name}: ignoring non-positive length {length}")
			applied = False
		if start_offset is None:
			return applied
		if start_offset >= 0:
			record.start_offset = float(start_offset)
		else:
			utils.warn(f"clip {record.name}: ignoring negative start offset {start_offset}")
			applied = False
		return applied

	#============================
	def set_fades(self, fade_in_time: float, fade_out_time: float = 0) -> bool:
		"""
		Set fade durations in seconds, zero disables a side.

		Negative values leave that side unchanged.

		Returns:
			bool: True if both values were applied.
		"""
		record = self._record()
		applied = True
		if fade_in_time >= 0:
			record.fade_in_time = float(fade_in_time)
		else:
			utils.warn(f"clip {record.name}: ignoring negative fade in {fade_in_time}")
			applied = False
		if fade_out_time >= 0:
			record.fade_out_time = float(fade_out_time)
		else:
			utils.warn(f"clip {record.name}: ignoring negative fade out {fade_out_time}")
			applied = False
		return applied

	#============================
	def __eq__(self, other) -> bool:
		if not isinstance(other, ClipRef):
			return NotImplemented
		return self._timeline is other._timeline and self.index == other.index

	def __hash__(self) -> int:
		return hash((id(self._timeline), self.index))

	def __repr__(self) -> str:
		return f"ClipRef({self.index}, {self.name!r})"

#============================================

class Placement():
	def __init__(self, timestamp: float, clip: ClipRef):
		self.timestamp = float(timestamp)
		self.clip = clip

	def __repr__(self) -> str:
		return f"Placement({self.timestamp}, {self.clip!r})"

#============================================

class Timeline():
	def __init__(self):
		self.clips = []
		# per channel list of (timestamp, sequence, Placement), kept sorted
		self._channels = {VIDEO: [], AUDIO: []}
		self._sequence = 0

	#============================
	def create_clip(self, name: str, length: float, start_offset: float = 0) -> ClipRef:
		"""
		Create a clip; the name is the media file stem, without extension.
		"""
		self.clips.append(ClipRecord(name, length, start_offset))
		return ClipRef(self, len(self.clips) - 1)

	#============================
	def _place(self, channel: str, timestamp: float, clip: ClipRef) -> None:
		if clip._timeline is not self:
			raise RuntimeError("clip belongs to a different timeline")
		placement = Placement(timestamp, clip)
		bisect.insort(self._channels[channel],
			(placement.timestamp, self._sequence, placement))
		self._sequence += 1

	#============================
	def place_on_video(self, timestamp: float, clip: ClipRef) -> None:
		self._place(VIDEO, timestamp, clip)

	def place_on_audio(self, timestamp: float, clip: ClipRef) -> None:
		self._place(AUDIO, timestamp, clip)

	#============================
	def create_and_place_on_video(self, timestamp: float, name: str,
		length: float, start_offset: float = 0) -> ClipRef:
		clip = self.create_clip(name, length, start_offset)
		self.place_on_video(timestamp, clip)
		return clip

	def create_and_place_on_audio(self, timestamp: float, name: str,
		length: float, start_offset: float = 0) -> ClipRef:
		clip = self.create_clip(name, length, start_offset)
		self.place_on_audio(timestamp, clip)
		return clip

	#============================
	def placements(self, channel: str) -> list:
		"""
		Return placements of a channel in non-decreasing timestamp order,
		ties in insertion order.
		"""
		if channel not in self._channels:
			raise RuntimeError(f"unknown channel: {channel}")
		return [item[2] for item in self._channels[channel]]

	#============================
	def referenced_clips(self) -> list:
		"""
		Return clips placed on either channel, in creation order.
		"""
		used = set()
		for channel in CHANNELS:
			for item in self._channels[channel]:
				used.add(item[2].clip.index)
		return [ClipRef(self, index) for index in sorted(used)]
