#!/usr/bin/env python3

import lxml.etree
from kdengenlib.core import utils

#============================================
# typed constructors for the MLT node kinds a Kdenlive project uses
#============================================

def set_property(parent, name: str, value: str = None):
	prop = lxml.etree.SubElement(parent, 'property')
	prop.set('name', name)
	if value is not None:
		prop.text = str(value)
	return prop

#============================================

def find_property(parent, name: str):
	for child in parent:
		if child.tag == 'property' and child.get('name') == name:
			return child
	return None

#============================================

def make_profile(fps, width: int, height: int):
	fps = utils.parse_fps(fps)
	(display_num, display_den) = utils.reduce_fraction(width, height)
	profile = lxml.etree.Element('profile')
	profile.set('description', profile_description(fps, width, height))
	profile.set('width', str(width))
	profile.set('height', str(height))
	profile.set('progressive', '1')
	profile.set('sample_aspect_num', '1')
	profile.set('sample_aspect_den', '1')
	profile.set('display_aspect_num', str(display_num))
	profile.set('display_aspect_den', str(display_den))
	profile.set('frame_rate_num', str(fps.numerator))
	profile.set('frame_rate_den', str(fps.denominator))
	profile.set('colorspace', '709')
	return profile

#============================================

def profile_description(fps, width: int, height: int) -> str:
	return f"{width}x{height}, {utils.format_fps(fps)} fps"

#============================================

def make_black_producer(producer_id: str):
	producer = lxml.etree.Element('producer')
	producer.set('id', producer_id)
	producer.set('in', utils.seconds_to_timestamp(0))
	producer.set('out', utils.seconds_to_timestamp(0))
	set_property(producer, 'length', '2147483647')
	set_property(producer, 'eof', 'continue')
	set_property(producer, 'resource', 'black')
	set_property(producer, 'aspect_ratio', '1')
	set_property(producer, 'mlt_service', 'color')
	set_property(producer, 'kdenlive:playlistid', 'black_track')
	set_property(producer, 'mlt_image_format', 'rgba')
	set_property(producer, 'set.test_audio', '0')
	return producer

#============================================

def make_chain(chain_id: str, resource: str, clip_name: str = None):
	chain = lxml.etree.Element('chain')
	chain.set('id', chain_id)
	set_property(chain, 'resource', resource)
	set_property(chain, 'mlt_service', 'avformat-novalidate')
	if clip_name is not None:
		set_property(chain, 'kdenlive:clipname', clip_name)
	return chain

#============================================

def make_playlist(playlist_id: str):
	playlist = lxml.etree.Element('playlist')
	playlist.set('id', playlist_id)
	return playlist

#============================================

def make_tractor(tractor_id: str, in_time: float = None, out_time: float = None):
	tractor = lxml.etree.Element('tractor')
	tractor.set('id', tractor_id)
	if in_time is not None:
		tractor.set('in', utils.seconds_to_timestamp(in_time))
	if out_time is not None:
		tractor.set('out', utils.seconds_to_timestamp(out_time))
	return tractor

#============================================

def add_track_ref(parent, producer_id: str, hide: str = None):
	track = lxml.etree.SubElement(parent, 'track')
	if hide is not None:
		track.set('hide', hide)
	track.set('producer', producer_id)
	return track

#============================================

def make_entry(producer_id: str, in_time: float, out_time: float):
	entry = lxml.etree.Element('entry')
	entry.set('producer', producer_id)
	entry.set('in', utils.seconds_to_timestamp(in_time))
	entry.set('out', utils.seconds_to_timestamp(out_time))
	return entry

#============================================

def make_blank(length: float):
	blank = lxml.etree.Element('blank')
	blank.set('length', utils.seconds_to_timestamp(length))
	return blank

#============================================

def make_fade_filter(filter_id: str, direction: str, start: float, end: float):
	"""
	Build a brightness filter that fades from black ('in') or to black ('out').
	"""
	if direction == 'in':
		kdenlive_id = 'fade_from_black'
		alpha = '0=0;-1=1'
	elif direction == 'out':
		kdenlive_id = 'fade_to_black'
		alpha = '0=1;-1=0'
	else:
		raise RuntimeError(f"fade direction must be 'in' or 'out', not {direction}")
	fade = lxml.etree.Element('filter')
	fade.set('id', filter_id)
	fade.set('in', utils.seconds_to_timestamp(start))
	fade.set('out', utils.seconds_to_timestamp(end))
	set_property(fade, 'start', '1')
	set_property(fade, 'level', '1')
	set_property(fade, 'mlt_service', 'brightness')
	set_property(fade, 'kdenlive_id', kdenlive_id)
	set_property(fade, 'alpha', alpha)
	return fade
