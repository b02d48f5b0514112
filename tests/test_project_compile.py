#!/usr/bin/env python3

"""
Tests for compiling a timeline into a Kdenlive project.
"""

# Standard Library
import os
import sys
import tempfile
import unittest
import xml.etree.ElementTree

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from kdengenlib.core import utils
from kdengenlib.core.project import KdenliveProject

#============================================

def write_text_file(path: str, text: str) -> None:
	"""
	Write text to a file.

	Args:
		path: File path.
		text: Content to write.
	"""
	with open(path, 'w', encoding='utf-8') as handle:
		handle.write(text)
	return

#============================================

def build_example_project() -> KdenliveProject:
	"""Build the three clip example with a shared, re-edited clip."""
	project = KdenliveProject(60, 1920, 1080)
	project.create_clip_on_video_track(0, "great_expanse", 10)
	project.create_clip_on_audio_track(0, "Free_Test_Data_500KB_MP3", 20)
	clip = project.create_clip("cavern_clinger_boss", 10)
	project.add_clip_to_video_track(9, clip)
	project.add_clip_to_audio_track(9, clip)
	clip.set_bounds(15)
	clip.set_fades(1, 0)
	return project

#============================================

def _find_by_id(root, tag: str, node_id: str):
	for node in root.findall(tag):
		if node.get('id') == node_id:
			return node
	return None

#============================================

def _property_text(node, name: str) -> str:
	for child in node.findall('property'):
		if child.get('name') == name:
			return child.text
	return None

#============================================

class ProjectCompileTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		utils.set_quiet_mode(True)

	def tearDown(self) -> None:
		utils.set_quiet_mode(False)

	#============================================
	def test_example_scenario(self) -> None:
		"""Ensure the shared clip forces a second track on both channels."""
		with tempfile.TemporaryDirectory() as temp_dir:
			for name in ("great_expanse.mkv", "cavern_clinger_boss.mp4"):
				write_text_file(os.path.join(temp_dir, name), "x")
			text = build_example_project().save_as_string([temp_dir])
		root = xml.etree.ElementTree.fromstring(text.encode('utf-8'))
		profile = root.find('profile')
		self.assertEqual(profile.get('frame_rate_num'), '60')
		self.assertEqual(profile.get('width'), '1920')
		chains = root.findall('chain')
		resources = [_property_text(chain, 'resource') for chain in chains]
		self.assertEqual(resources, [
			os.path.join(temp_dir, "great_expanse.mkv"),
			"Free_Test_Data_500KB_MP3.mp4",
			os.path.join(temp_dir, "cavern_clinger_boss.mp4"),
		])
		# video tracks 0 and 1, then audio tracks 2 and 3
		for track_id in range(4):
			tractor = _find_by_id(root, 'tractor', f"tractor{track_id}")
			self.assertIsNotNone(tractor)
			is_audio = _property_text(tractor, 'kdenlive:audio_track') == '1'
			self.assertEqual(is_audio, track_id >= 2)
		self.assertIsNone(_find_by_id(root, 'tractor', 'tractor4'))
		video_first = _find_by_id(root, 'playlist', 'playlist0')
		entries = video_first.findall('entry')
		self.assertEqual(len(entries), 1)
		self.assertEqual(entries[0].get('producer'), 'chain0')
		self.assertEqual(entries[0].get('out'), '00:00:10.000')
		for (playlist_id, producer) in (('playlist2', 'chain2'), ('playlist6', 'chain2')):
			playlist = _find_by_id(root, 'playlist', playlist_id)
			blank = playlist.find('blank')
			self.assertEqual(blank.get('length'), '00:00:09.000')
			entry = playlist.find('entry')
			self.assertEqual(entry.get('producer'), producer)
			self.assertEqual(entry.get('in'), '00:00:00.000')
			self.assertEqual(entry.get('out'), '00:00:15.000')
			filters = entry.findall('filter')
			self.assertEqual(len(filters), 1)
			self.assertEqual(filters[0].get('in'), '00:00:00.000')
			self.assertEqual(filters[0].get('out'), '00:00:01.000')
			self.assertEqual(_property_text(filters[0], 'kdenlive_id'), 'fade_from_black')
		audio_first = _find_by_id(root, 'playlist', 'playlist4')
		self.assertEqual(audio_first.find('entry').get('out'), '00:00:20.000')
		self.assertIsNone(audio_first.find('blank'))

	#============================================
	def test_same_name_makes_one_asset(self) -> None:
		"""Ensure clips with the same name share one bin asset."""
		project = KdenliveProject()
		project.create_clip_on_video_track(0, "shot", 4)
		project.create_clip_on_video_track(10, "shot", 2, 1)
		project.create_clip_on_audio_track(3, "shot", 4)
		project.create_clip("never_placed", 4)
		document = project.compile([])
		self.assertEqual(document.chain_count, 1)
		root = document.root
		self.assertEqual(len(root.findall('chain')), 1)
		producers = set()
		for playlist in root.findall('playlist'):
			for entry in playlist.findall('entry'):
				producers.add(entry.get('producer'))
		self.assertIn('chain0', producers)
		self.assertNotIn('chain1', producers)

	#============================================
	def test_zero_fades_add_no_filters(self) -> None:
		"""Ensure clips without fades carry no filters."""
		project = KdenliveProject()
		clip = project.create_clip_on_video_track(0, "a", 4)
		clip.set_fades(0, 2)
		project.create_clip_on_video_track(6, "b", 4)
		document = project.compile([])
		entries = document.find_node('playlist0').findall('entry')
		self.assertEqual(len(entries[0].findall('filter')), 1)
		fade = entries[0].find('filter')
		self.assertEqual(fade.get('in'), '00:00:02.000')
		self.assertEqual(fade.get('out'), '00:00:04.000')
		self.assertEqual(len(entries[1].findall('filter')), 0)
		self.assertIsNone(document.find_node('playlist0').find('blank').find('filter'))

	#============================================
	def test_set_bounds_keeps_source_offset(self) -> None:
		"""Ensure changing only the length keeps the clip's source offset."""
		project = KdenliveProject()
		clip = project.create_clip_on_video_track(0, "a", 10, 5)
		clip.set_bounds(15)
		document = project.compile([])
		entry = document.find_node('playlist0').find('entry')
		self.assertEqual(entry.get('in'), '00:00:05.000')
		self.assertEqual(entry.get('out'), '00:00:20.000')

	#============================================
	def test_compile_is_deterministic(self) -> None:
		"""Ensure compiling twice yields identical bytes."""
		project = build_example_project()
		first = project.save_as_string([])
		second = project.save_as_string([])
		self.assertEqual(first, second)
		self.assertEqual(build_example_project().save_as_string([]), first)

	#============================================
	def test_empty_project_compiles(self) -> None:
		"""Ensure a project with no placements is still a valid document."""
		document = KdenliveProject().compile([])
		self.assertEqual(document.track_count, 0)
		self.assertEqual(document.profile.get('description'), '1920x1080, 30 fps')

	#============================================
	def test_set_profile_ignores_non_positive(self) -> None:
		"""Ensure profile fields are kept when given non-positive values."""
		project = KdenliveProject(25, 1280, 720)
		self.assertFalse(project.set_profile(0, -1, 480))
		self.assertEqual(project.profile['fps'], 25)
		self.assertEqual(project.profile['width'], 1280)
		self.assertEqual(project.profile['height'], 480)

	#============================================
	def test_save_to_file_appends_extension(self) -> None:
		"""Ensure files are written as name.kdenlive inside the folder."""
		project = build_example_project()
		with tempfile.TemporaryDirectory() as temp_dir:
			output_dir = os.path.join(temp_dir, "out")
			path = project.save_to_file([], "example_generated_project", output_dir)
			self.assertEqual(path, os.path.join(output_dir,
				"example_generated_project.kdenlive"))
			with open(path, 'r', encoding='utf-8') as handle:
				saved = handle.read()
		self.assertEqual(saved, project.save_as_string([]))

	#============================================
	def test_dump_plan(self) -> None:
		"""Ensure the plan lists tracks per channel."""
		plan = build_example_project().dump_plan()
		self.assertEqual(plan['profile']['fps'], '60')
		self.assertEqual(len(plan['video']), 2)
		self.assertEqual(len(plan['audio']), 2)
		second = plan['video'][1]
		self.assertEqual(second['length'], 24.0)
		self.assertEqual(second['entries'][0], {'type': 'blank', 'length': 9.0})
		self.assertEqual(second['entries'][1]['fade_in'], 1.0)

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
