#!/usr/bin/env python3

from fractions import Fraction
from kdengenlib import medialib
from kdengenlib.core import utils
from kdengenlib.core.allocator import ADD_BLANK
from kdengenlib.core.allocator import ADD_CLIP
from kdengenlib.core.allocator import NEW_TRACK
from kdengenlib.core.allocator import TrackAllocator
from kdengenlib.core.timeline import AUDIO
from kdengenlib.core.timeline import CHANNELS
from kdengenlib.core.timeline import VIDEO
from kdengenlib.core.timeline import Timeline
from kdengenlib.document.builder import KdenliveDocument

#============================================

class KdenliveProject():
	"""
	A timeline of clips on a video and an audio channel plus a profile,
	compiled into a Kdenlive project document on demand.
	"""
	def __init__(self, fps=30, width: int = 1920, height: int = 1080,
		template_loader=None):
		self.profile = {
			'fps': Fraction(30, 1),
			'width': 1920,
			'height': 1080,
		}
		self.timeline = Timeline()
		# callable returning a fresh mlt root, None for the built-in project
		self.template_loader = template_loader
		self.set_profile(fps, width, height)

	#============================
	def set_profile(self, fps, width: int, height: int) -> bool:
		"""
		Set frame rate and resolution; non-positive values are ignored.

		Kdenlive may replace a profile it has no preset for.
		"""
		applied = True
		fps_value = utils.parse_fps(fps)
		if fps_value > 0:
			self.profile['fps'] = fps_value
		else:
			utils.warn(f"ignoring non-positive fps {fps}")
			applied = False
		if width > 0:
			self.profile['width'] = int(width)
		else:
			utils.warn(f"ignoring non-positive width {width}")
			applied = False
		if height > 0:
			self.profile['height'] = int(height)
		else:
			utils.warn(f"ignoring non-positive height {height}")
			applied = False
		return applied

	#============================
	def create_clip(self, name: str, length: float, start_offset: float = 0):
		return self.timeline.create_clip(name, length, start_offset)

	def add_clip_to_video_track(self, timestamp: float, clip) -> None:
		self.timeline.place_on_video(timestamp, clip)

	def add_clip_to_audio_track(self, timestamp: float, clip) -> None:
		self.timeline.place_on_audio(timestamp, clip)

	def create_clip_on_video_track(self, timestamp: float, name: str,
		length: float, start_offset: float = 0):
		return self.timeline.create_and_place_on_video(timestamp, name,
			length, start_offset)

	def create_clip_on_audio_track(self, timestamp: float, name: str,
		length: float, start_offset: float = 0):
		return self.timeline.create_and_place_on_audio(timestamp, name,
			length, start_offset)

	#============================
	def allocate(self) -> dict:
		"""
		Pack both channels onto tracks without touching any document.

		Returns:
			dict: channel name to TrackAllocator.
		"""
		allocators = {}
		for channel in CHANNELS:
			allocator = TrackAllocator()
			allocator.allocate(self.timeline.placements(channel))
			allocators[channel] = allocator
		return allocators

	#============================
	def dump_plan(self) -> dict:
		allocators = self.allocate()
		plan = {
			'profile': {
				'fps': utils.format_fps(self.profile['fps']),
				'width': self.profile['width'],
				'height': self.profile['height'],
			},
		}
		for channel in CHANNELS:
			plan[channel] = allocators[channel].to_plan()
		return plan

	#============================
	def compile(self, media_folders: list) -> KdenliveDocument:
		root = None
		if self.template_loader is not None:
			root = self.template_loader()
		document = KdenliveDocument(root)
		document.set_profile(self.profile['fps'], self.profile['width'],
			self.profile['height'])
		asset_ids = {}
		for clip in self.timeline.referenced_clips():
			if clip.name in asset_ids:
				continue
			clip_path = medialib.findMediaFile(media_folders, clip.name)
			asset_ids[clip.name] = document.add_asset_to_bin(clip_path, clip.name)
		allocators = self.allocate()
		self._replay(document, allocators[VIDEO], VIDEO, asset_ids)
		self._replay(document, allocators[AUDIO], AUDIO, asset_ids)
		return document

	#============================
	def _replay(self, document: KdenliveDocument, allocator: TrackAllocator,
		kind: str, asset_ids: dict) -> None:
		track_ids = []
		for step in allocator.steps:
			if step.action == NEW_TRACK:
				track_ids.append(document.add_track(kind))
				continue
			track_id = track_ids[step.track_index]
			entry = step.entry
			if step.action == ADD_BLANK:
				document.add_blank(track_id, entry.length)
			elif step.action == ADD_CLIP:
				entry_index = document.add_clip_entry(track_id,
					asset_ids[entry.clip_name], entry.length, entry.start_offset)
				for (direction, start, end) in entry.fade_spans():
					document.add_fade(track_id, entry_index, direction, start, end)
			else:
				raise RuntimeError(f"unknown allocation step: {step.action}")

	#============================
	def save_as_string(self, media_folders: list) -> str:
		document = self.compile(media_folders)
		return document.to_string()

	#============================
	def save_to_file(self, media_folders: list, file_name: str = 'kdenlive_project',
		output_dir: str = None) -> str:
		"""
		Write the project as file_name + '.kdenlive' into output_dir, or the
		working directory, and return the path.
		"""
		document = self.compile(media_folders)
		return document.save(file_name, output_dir)
