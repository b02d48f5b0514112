#find media files for clip names

import os
from kdengenlib.core import utils

DEFAULT_MEDIA_EXTENSION = '.mp4'

#===============================
def findMediaFile(media_folders: list, clip_name: str) -> str:
	"""
	Return the first file whose stem equals clip_name.

	Folders are searched in order, non-recursively, and folders that do not
	exist are skipped. When nothing matches, clip_name plus the default
	extension is returned so the project still references the clip.
	"""
	for folder in media_folders:
		if not os.path.isdir(folder):
			continue
		for filename in sorted(os.listdir(folder)):
			filepath = os.path.join(folder, filename)
			if not os.path.isfile(filepath):
				continue
			stem, _ = os.path.splitext(filename)
			if stem == clip_name:
				return filepath
	fallback = clip_name + DEFAULT_MEDIA_EXTENSION
	utils.warn(f"no media file found for {clip_name}, using {fallback}")
	return fallback
