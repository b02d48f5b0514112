#!/usr/bin/env python3

import functools
import os
import yaml
from kdengenlib.core import utils
from kdengenlib.core.project import KdenliveProject
from kdengenlib.document import template

#============================================

class ProjectData():
	def __init__(self):
		self.yaml_file = None
		self.data = {}
		self.project = None
		self.clips = {}
		self.media_folders = []
		self.template_file = None
		self.output_file = 'kdenlive_project'
		self.output_folder = None

#============================================

class ProjectLoader():
	def __init__(self, yaml_file: str):
		self.yaml_file = yaml_file
		self.base_dir = os.path.dirname(os.path.abspath(yaml_file))

	#============================
	def load(self) -> ProjectData:
		result = ProjectData()
		result.yaml_file = self.yaml_file
		result.data = self._load_yaml()
		self._validate_required_keys(result.data)
		(fps, width, height) = self._parse_profile(result.data.get('profile', {}))
		result.template_file = self._parse_template(result.data.get('template'))
		template_loader = None
		if result.template_file is not None:
			template_loader = functools.partial(template.load_template,
				result.template_file)
		result.project = KdenliveProject(fps, width, height,
			template_loader=template_loader)
		result.clips = self._parse_clips(result.project, result.data['clips'])
		for channel in ('video', 'audio'):
			self._parse_placements(result, channel, result.data.get(channel))
		result.media_folders = self._parse_media(result.data.get('media'))
		self._parse_output(result, result.data.get('output'))
		return result

	#============================
	def _load_yaml(self) -> dict:
		utils.ensure_file_exists(self.yaml_file)
		file_size = os.path.getsize(self.yaml_file)
		if file_size > 10 ** 7:
			raise RuntimeError("yaml file is larger than 10MB")
		with open(self.yaml_file, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if not isinstance(data, dict):
			raise RuntimeError("project yaml must be a mapping at the top level")
		return data

	#============================
	def _validate_required_keys(self, data: dict) -> None:
		if data.get('kdengen') != 1:
			raise RuntimeError("kdengen must be set to 1")
		if not isinstance(data.get('clips'), dict):
			raise RuntimeError("clips must be a mapping of clip keys")

	#============================
	def _parse_profile(self, profile: dict) -> tuple:
		if not isinstance(profile, dict):
			raise RuntimeError("profile must be a mapping")
		fps = utils.parse_fps(profile.get('fps', 30))
		resolution = profile.get('resolution', [1920, 1080])
		if not isinstance(resolution, list) or len(resolution) != 2:
			raise RuntimeError("profile.resolution must be [width, height]")
		width = int(resolution[0])
		height = int(resolution[1])
		return (fps, width, height)

	#============================
	def _resolve_path(self, path: str) -> str:
		path = os.path.expanduser(str(path))
		if os.path.isabs(path):
			return path
		return os.path.join(self.base_dir, path)

	#============================
	def _parse_template(self, template_file) -> str:
		if template_file is None:
			return None
		return self._resolve_path(template_file)

	#============================
	def _parse_clips(self, project: KdenliveProject, clips: dict) -> dict:
		refs = {}
		for (key, clip_data) in clips.items():
			if not isinstance(clip_data, dict):
				raise RuntimeError(f"clip {key} must be a mapping")
			name = str(clip_data.get('name', key))
			if os.path.splitext(name)[1] != '':
				utils.warn(f"clip name {name} looks like it has a file extension")
			if clip_data.get('length') is None:
				raise RuntimeError(f"clip {key} is missing length")
			length = float(utils.parse_timecode(clip_data.get('length')))
			if length <= 0:
				raise RuntimeError(f"clip {key} length must be positive")
			start_offset = float(utils.parse_timecode(clip_data.get('start_offset', 0)))
			if start_offset < 0:
				raise RuntimeError(f"clip {key} start_offset must not be negative")
			clip = project.create_clip(name, length, start_offset)
			fade_in = float(utils.parse_timecode(clip_data.get('fade_in', 0)))
			fade_out = float(utils.parse_timecode(clip_data.get('fade_out', 0)))
			if not clip.set_fades(fade_in, fade_out):
				raise RuntimeError(f"clip {key} fades must not be negative")
			refs[key] = clip
		return refs

	#============================
	def _parse_placements(self, result: ProjectData, channel: str, placements) -> None:
		if placements is None:
			return
		if not isinstance(placements, list):
			raise RuntimeError(f"{channel} must be a list of placements")
		for item in placements:
			if not isinstance(item, dict):
				raise RuntimeError(f"{channel} placements must be mappings")
			key = item.get('clip')
			clip = result.clips.get(key)
			if clip is None:
				raise RuntimeError(f"{channel} placement references unknown clip: {key}")
			timestamp = float(utils.parse_timecode(item.get('at')))
			if timestamp < 0:
				raise RuntimeError(f"{channel} placement time must not be negative")
			if channel == 'video':
				result.project.add_clip_to_video_track(timestamp, clip)
			else:
				result.project.add_clip_to_audio_track(timestamp, clip)

	#============================
	def _parse_media(self, media) -> list:
		if media is None:
			return []
		if isinstance(media, str):
			media = [media]
		if not isinstance(media, list):
			raise RuntimeError("media must be a folder path or list of folder paths")
		return [self._resolve_path(folder) for folder in media]

	#============================
	def _parse_output(self, result: ProjectData, output) -> None:
		if output is None:
			return
		if not isinstance(output, dict):
			raise RuntimeError("output must be a mapping")
		if output.get('file') is not None:
			result.output_file = str(output['file'])
		if output.get('folder') is not None:
			result.output_folder = self._resolve_path(output['folder'])
