#!/usr/bin/env python3

# gaps shorter than one millisecond are timestamp rounding noise
BLANK_EPSILON = 0.001

BLANK = 'blank'
CLIP = 'clip'

NEW_TRACK = 'new_track'
ADD_BLANK = 'add_blank'
ADD_CLIP = 'add_clip'

#============================================

class TrackEntry():
	def __init__(self, entry_type: str, length: float, start_offset: float = 0.0,
		clip_name: str = None, fade_in_time: float = 0.0, fade_out_time: float = 0.0):
		self.entry_type = entry_type
		self.length = length
		self.start_offset = start_offset
		self.clip_name = clip_name
		self.fade_in_time = fade_in_time
		self.fade_out_time = fade_out_time

	#============================
	def fade_spans(self) -> list:
		"""
		Return (direction, start, end) spans in source time, blanks have none.
		"""
		if self.entry_type != CLIP:
			return []
		spans = []
		if self.fade_in_time > 0:
			spans.append(('in', self.start_offset,
				self.start_offset + self.fade_in_time))
		if self.fade_out_time > 0:
			end = self.start_offset + self.length
			spans.append(('out', end - self.fade_out_time, end))
		return spans

	#============================
	def to_dict(self) -> dict:
		data = {'type': self.entry_type, 'length': self.length}
		if self.entry_type == CLIP:
			data['clip'] = self.clip_name
			data['start_offset'] = self.start_offset
			if self.fade_in_time > 0:
				data['fade_in'] = self.fade_in_time
			if self.fade_out_time > 0:
				data['fade_out'] = self.fade_out_time
		return data

#============================================

class Track():
	def __init__(self, index: int):
		self.index = index
		self.length = 0.0
		self.entries = []

	#============================
	def append(self, entry: TrackEntry) -> int:
		self.entries.append(entry)
		self.length += entry.length
		return len(self.entries) - 1

#============================================

class AllocationStep():
	def __init__(self, action: str, track_index: int, entry_index: int = None,
		entry: TrackEntry = None):
		self.action = action
		self.track_index = track_index
		self.entry_index = entry_index
		self.entry = entry

	def __repr__(self) -> str:
		return f"AllocationStep({self.action}, {self.track_index}, {self.entry_index})"

#============================================

class TrackAllocator():
	"""
	Greedy first-fit packing of one channel's placements onto tracks.

	Placements must arrive in non-decreasing timestamp order. Each one goes
	on the lowest indexed track whose end is at or before its timestamp,
	padded with a blank when there is a gap; otherwise a new track is
	opened. The ordered list of decisions is kept in `steps` so a document
	can be built by replaying it.
	"""
	def __init__(self):
		self.tracks = []
		self.steps = []

	#============================
	def find_track(self, timestamp: float):
		for track in self.tracks:
			if track.length <= timestamp:
				return track
		return None

	#============================
	def _new_track(self) -> Track:
		track = Track(len(self.tracks))
		self.tracks.append(track)
		self.steps.append(AllocationStep(NEW_TRACK, track.index))
		return track

	#============================
	def place(self, timestamp: float, clip) -> tuple:
		"""
		Place one clip and return (track index, entry index) of its entry.
		"""
		track = self.find_track(timestamp)
		if track is None:
			track = self._new_track()
		gap = timestamp - track.length
		if gap > BLANK_EPSILON:
			blank = TrackEntry(BLANK, gap)
			blank_index = track.append(blank)
			self.steps.append(AllocationStep(ADD_BLANK, track.index,
				blank_index, blank))
		entry = TrackEntry(CLIP, clip.length, clip.start_offset,
			clip_name=clip.name, fade_in_time=clip.fade_in_time,
			fade_out_time=clip.fade_out_time)
		entry_index = track.append(entry)
		self.steps.append(AllocationStep(ADD_CLIP, track.index,
			entry_index, entry))
		return (track.index, entry_index)

	#============================
	def allocate(self, placements: list) -> list:
		last_timestamp = None
		for placement in placements:
			if last_timestamp is not None and placement.timestamp < last_timestamp:
				raise RuntimeError("placements must be in non-decreasing timestamp order")
			last_timestamp = placement.timestamp
			self.place(placement.timestamp, placement.clip)
		return self.tracks

	#============================
	def to_plan(self) -> list:
		plan = []
		for track in self.tracks:
			plan.append({
				'track': track.index,
				'length': track.length,
				'entries': [entry.to_dict() for entry in track.entries],
			})
		return plan
