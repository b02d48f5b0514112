#!/usr/bin/env python3

"""
Canonical empty Kdenlive project.

The tree mirrors what Kdenlive writes for a new project: a profile, the
black background producer, two audio and two video placeholder tracks, the
timeline sequence tractor, the main bin and the trailing project tractor.
The uuid is fixed so generated files are reproducible.
"""

import os
import lxml.etree
from kdengenlib.core import utils
from kdengenlib.document import nodes

DOCUMENT_UUID = '{4f6b1c2e-8d3a-4b7e-9c51-2a0e6d9f3b17}'
KDENLIVE_VERSION = '23.08.4'
DOCUMENT_VERSION = '1.1'
MLT_VERSION = '7.20.0'
BLACK_PRODUCER_ID = 'producer0'
MAIN_BIN_ID = 'main_bin'
DEFAULT_PROFILE_NAME = 'atsc_1080p_30'

# (kind, count) of placeholder tracks a new Kdenlive project starts with
PLACEHOLDER_TRACKS = (('audio', 2), ('video', 2))

#============================================

def _add_placeholder_track(root, index: int, kind: str) -> str:
	playlist_ids = [f"playlist{index * 2}", f"playlist{index * 2 + 1}"]
	for playlist_id in playlist_ids:
		playlist = nodes.make_playlist(playlist_id)
		if kind == 'audio':
			nodes.set_property(playlist, 'kdenlive:audio_track', '1')
		root.append(playlist)
	tractor_id = f"tractor{index}"
	tractor = nodes.make_tractor(tractor_id, in_time=0)
	if kind == 'audio':
		nodes.set_property(tractor, 'kdenlive:audio_track', '1')
	nodes.set_property(tractor, 'kdenlive:trackheight', '67')
	nodes.set_property(tractor, 'kdenlive:timeline_active', '1')
	nodes.set_property(tractor, 'kdenlive:collapsed', '0')
	hide = 'video' if kind == 'audio' else 'audio'
	for playlist_id in playlist_ids:
		nodes.add_track_ref(tractor, playlist_id, hide=hide)
	root.append(tractor)
	return tractor_id

#============================================

def build_empty_project():
	"""
	Build the canonical empty project tree.

	Returns:
		lxml.etree._Element: The mlt root element.
	"""
	root = lxml.etree.Element('mlt')
	root.set('LC_NUMERIC', 'C')
	root.set('producer', MAIN_BIN_ID)
	root.set('version', MLT_VERSION)
	root.set('root', '')
	root.append(nodes.make_profile(30, 1920, 1080))
	root.append(nodes.make_black_producer(BLACK_PRODUCER_ID))
	track_ids = []
	index = 0
	for (kind, count) in PLACEHOLDER_TRACKS:
		for _ in range(count):
			track_ids.append(_add_placeholder_track(root, index, kind))
			index += 1
	# timeline sequence, referenced by the main bin through the uuid
	timeline = nodes.make_tractor(DOCUMENT_UUID, in_time=0, out_time=0)
	nodes.set_property(timeline, 'kdenlive:uuid', DOCUMENT_UUID)
	nodes.set_property(timeline, 'kdenlive:clipname', 'Sequence 1')
	nodes.set_property(timeline, 'kdenlive:sequenceproperties.hasAudio', '1')
	nodes.set_property(timeline, 'kdenlive:sequenceproperties.hasVideo', '1')
	nodes.set_property(timeline, 'kdenlive:producer_type', '17')
	nodes.add_track_ref(timeline, BLACK_PRODUCER_ID)
	for track_id in track_ids:
		nodes.add_track_ref(timeline, track_id)
	root.append(timeline)
	main_bin = nodes.make_playlist(MAIN_BIN_ID)
	nodes.set_property(main_bin, 'kdenlive:folder.-1.2', 'Sequences')
	nodes.set_property(main_bin, 'kdenlive:sequenceFolder', '2')
	nodes.set_property(main_bin, 'kdenlive:docproperties.activetimeline', DOCUMENT_UUID)
	nodes.set_property(main_bin, 'kdenlive:docproperties.audioChannels', '2')
	nodes.set_property(main_bin, 'kdenlive:docproperties.kdenliveversion', KDENLIVE_VERSION)
	nodes.set_property(main_bin, 'kdenlive:docproperties.profile', DEFAULT_PROFILE_NAME)
	nodes.set_property(main_bin, 'kdenlive:docproperties.uuid', DOCUMENT_UUID)
	nodes.set_property(main_bin, 'kdenlive:docproperties.version', DOCUMENT_VERSION)
	nodes.set_property(main_bin, 'xml_retain', '1')
	main_bin.append(nodes.make_entry(DOCUMENT_UUID, 0, 0))
	root.append(main_bin)
	project_tractor = nodes.make_tractor(f"tractor{index}", in_time=0, out_time=0)
	nodes.set_property(project_tractor, 'kdenlive:projectTractor', '1')
	nodes.add_track_ref(project_tractor, DOCUMENT_UUID)
	root.append(project_tractor)
	return root

#============================================

def load_template(template_file: str):
	"""
	Load a Kdenlive/MLT file to use as the empty project.

	Only files Kdenlive saved for a new, unedited project are supported.
	"""
	utils.ensure_file_exists(template_file)
	file_size = os.path.getsize(template_file)
	if file_size > 10 ** 7:
		raise RuntimeError("template file is larger than 10MB")
	try:
		parser = lxml.etree.XMLParser(remove_blank_text=True, remove_comments=True)
		tree = lxml.etree.parse(template_file, parser)
	except (OSError, lxml.etree.XMLSyntaxError) as exc:
		raise RuntimeError(f"cannot read template {template_file}: {exc}") from exc
	root = tree.getroot()
	if root.tag != 'mlt':
		raise RuntimeError(f"template root must be <mlt>, not <{root.tag}>")
	return root
