#!/usr/bin/env python3

import os
import lxml.etree
from kdengenlib.core import utils
from kdengenlib.document import nodes
from kdengenlib.document import template

VIDEO = 'video'
AUDIO = 'audio'

PROJECT_EXTENSION = '.kdenlive'
FINAL_TRACTOR_ID = 'final_tractor'

#============================================

class KdenliveDocument():
	"""
	Incremental writer for a Kdenlive project tree.

	Starts from an empty project, drops its placeholder tracks, then only
	ever adds nodes. Bin assets are kept between the black producer and the
	first track; tracks are appended in creation order before the timeline
	sequence tractor, which stays ahead of the main bin and final tractor.
	"""
	def __init__(self, root=None):
		if root is None:
			root = template.build_empty_project()
		self.root = root
		self.chain_count = 0
		self.track_count = 0
		self.filter_count = 0
		self._nodes_by_id = {}
		self._playlists = []
		self._entry_nodes = []
		self._entry_types = []
		self._find_anchors()
		self._delete_preexisting_tracks()
		self._index_root()
		# most recently added bin asset and most recently added top level node
		self._last_asset_node = self.main_producer
		self._last_root_node = self.main_producer

	#============================
	def _find_anchors(self) -> None:
		self.profile = self.root.find('profile')
		if self.profile is None:
			raise RuntimeError("template is missing the profile node")
		self.main_producer = self.profile.getnext()
		if self.main_producer is None or self.main_producer.tag != 'producer':
			raise RuntimeError("template is missing the leading producer after the profile")
		self.main_bin = None
		for child in self.root.iterchildren('playlist'):
			if child.get('id') == template.MAIN_BIN_ID:
				self.main_bin = child
				break
		if self.main_bin is None:
			raise RuntimeError("template is missing the main_bin playlist")
		uuid_prop = nodes.find_property(self.main_bin, 'kdenlive:docproperties.uuid')
		if uuid_prop is None or not uuid_prop.text:
			raise RuntimeError("template main_bin has no kdenlive:docproperties.uuid")
		self.timeline_tractor = None
		for child in self.root.iterchildren('tractor'):
			if child.get('id') == uuid_prop.text:
				self.timeline_tractor = child
				break
		if self.timeline_tractor is None:
			raise RuntimeError(f"template is missing the timeline tractor {uuid_prop.text}")
		self.final_tractor = self.main_bin.getnext()
		if self.final_tractor is None or self.final_tractor.tag != 'tractor':
			raise RuntimeError("template is missing the final tractor after main_bin")
		self.final_tractor.set('id', FINAL_TRACTOR_ID)

	#============================
	def _delete_preexisting_tracks(self) -> None:
		removed_tractors = set()
		node = self.main_producer.getnext()
		while node is not None and node is not self.timeline_tractor:
			current = node
			node = node.getnext()
			if current.tag == 'playlist':
				self.root.remove(current)
			elif current.tag == 'tractor':
				removed_tractors.add(current.get('id'))
				self.root.remove(current)
		for track_ref in list(self.timeline_tractor.iterchildren('track')):
			if track_ref.get('producer') in removed_tractors:
				self.timeline_tractor.remove(track_ref)

	#============================
	def _index_root(self) -> None:
		for child in self.root:
			node_id = child.get('id')
			if node_id is not None:
				self._nodes_by_id[node_id] = child

	#============================
	def find_node(self, node_id: str):
		return self._nodes_by_id.get(node_id)

	#============================
	def _insert_after(self, anchor, node) -> None:
		anchor.addnext(node)
		self._nodes_by_id[node.get('id')] = node

	#============================
	def set_profile(self, fps, width: int, height: int) -> None:
		"""
		Overwrite the profile node and drop the cached profile name in the
		main bin, which Kdenlive would otherwise load instead.
		"""
		fresh = nodes.make_profile(fps, width, height)
		for (key, value) in fresh.attrib.items():
			self.profile.set(key, value)
		cached = nodes.find_property(self.main_bin, 'kdenlive:docproperties.profile')
		if cached is not None:
			self.main_bin.remove(cached)

	#============================
	def add_track(self, kind: str) -> int:
		"""
		Add an empty track and return its id.

		Args:
			kind: VIDEO or AUDIO.

		Returns:
			int: Track id for add_blank, add_clip_entry and add_fade.
		"""
		if kind not in (VIDEO, AUDIO):
			raise RuntimeError(f"track kind must be video or audio, not {kind}")
		track_id = self.track_count
		playlist_ids = [f"playlist{track_id * 2}", f"playlist{track_id * 2 + 1}"]
		tractor_id = f"tractor{track_id}"
		playlists = []
		for playlist_id in playlist_ids:
			playlist = nodes.make_playlist(playlist_id)
			if kind == AUDIO:
				nodes.set_property(playlist, 'kdenlive:audio_track', '1')
			self._insert_after(self._last_root_node, playlist)
			self._last_root_node = playlist
			playlists.append(playlist)
		tractor = nodes.make_tractor(tractor_id)
		if kind == AUDIO:
			nodes.set_property(tractor, 'kdenlive:audio_track', '1')
		hide = 'audio' if kind == VIDEO else 'video'
		for playlist_id in playlist_ids:
			nodes.add_track_ref(tractor, playlist_id, hide=hide)
		self._insert_after(self._last_root_node, tractor)
		self._last_root_node = tractor
		nodes.add_track_ref(self.timeline_tractor, tractor_id)
		self.track_count += 1
		# timed content lives on the first playlist of the pair
		self._playlists.append(playlists[0])
		self._entry_nodes.append([])
		self._entry_types.append([])
		return track_id

	#============================
	def add_asset_to_bin(self, clip_path: str, clip_name: str = None) -> int:
		chain_id = f"chain{self.chain_count}"
		chain = nodes.make_chain(chain_id, clip_path, clip_name)
		move_cursor = self._last_root_node is self._last_asset_node
		self._insert_after(self._last_asset_node, chain)
		self._last_asset_node = chain
		if move_cursor:
			self._last_root_node = chain
		self.main_bin.append(nodes.make_entry(chain_id, 0, 0))
		self.chain_count += 1
		return self.chain_count - 1

	#============================
	def _require_track(self, track_id: int) -> None:
		if not isinstance(track_id, int) or track_id < 0 or track_id >= self.track_count:
			raise RuntimeError(f"unknown track id: {track_id}")

	#============================
	def add_blank(self, track_id: int, length: float) -> int:
		self._require_track(track_id)
		if length <= 0:
			raise RuntimeError("blank length must be positive")
		blank = nodes.make_blank(length)
		self._playlists[track_id].append(blank)
		self._entry_nodes[track_id].append(blank)
		self._entry_types[track_id].append('blank')
		return len(self._entry_nodes[track_id]) - 1

	#============================
	def add_clip_entry(self, track_id: int, asset_id: int, length: float,
		start_offset: float = 0) -> int:
		self._require_track(track_id)
		if not isinstance(asset_id, int) or asset_id < 0 or asset_id >= self.chain_count:
			raise RuntimeError(f"unknown asset id: {asset_id}")
		entry = nodes.make_entry(f"chain{asset_id}", start_offset,
			start_offset + length)
		self._playlists[track_id].append(entry)
		self._entry_nodes[track_id].append(entry)
		self._entry_types[track_id].append('clip')
		return len(self._entry_nodes[track_id]) - 1

	#============================
	def add_fade(self, track_id: int, entry_index: int, direction: str,
		start: float, end: float):
		"""
		Attach a fade filter to the nth timed node of a track.

		Blank entries are left alone and None is returned.

		Returns:
			str: The new filter id, or None for a blank entry.
		"""
		self._require_track(track_id)
		entries = self._entry_nodes[track_id]
		if entry_index < 0 or entry_index >= len(entries):
			raise RuntimeError(f"track {track_id} has no entry {entry_index}")
		if self._entry_types[track_id][entry_index] == 'blank':
			return None
		filter_id = f"filter{self.filter_count}"
		fade = nodes.make_fade_filter(filter_id, direction, start, end)
		entries[entry_index].append(fade)
		self.filter_count += 1
		return filter_id

	#============================
	def to_string(self) -> str:
		data = lxml.etree.tostring(self.root, pretty_print=True,
			xml_declaration=True, encoding='utf-8')
		return data.decode('utf-8')

	#============================
	def save(self, file_name: str, output_dir: str = None) -> str:
		output_file = file_name + PROJECT_EXTENSION
		if output_dir:
			output_file = os.path.join(output_dir, output_file)
		os.makedirs(os.path.dirname(output_file) or '.', exist_ok=True)
		tree = lxml.etree.ElementTree(self.root)
		tree.write(output_file, pretty_print=True, encoding='utf-8',
			xml_declaration=True)
		if not utils.is_quiet_mode():
			print(f"wrote {output_file}")
		return output_file
