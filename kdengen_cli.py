#!/usr/bin/env python3

import argparse
import yaml
from kdengenlib.core import utils
from kdengenlib.core.loader import ProjectLoader

#============================================

def parse_args(argv: list = None):
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Kdenlive project generator")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='yaml file that lays out the clips on the timeline')
	parser.add_argument('-o', '--output', dest='output_file',
		help='override output file name from yaml, .kdenlive is appended')
	parser.add_argument('-d', '--output-dir', dest='output_dir',
		help='override output folder from yaml')
	parser.add_argument('-m', '--media', dest='media_folders', action='append',
		default=[], help='extra folder to search for clip media, may repeat')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the track allocation as yaml and exit')
	parser.add_argument('-s', '--stdout', dest='to_stdout', action='store_true',
		help='print the project xml instead of writing a file')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress status and warning output')
	args = parser.parse_args(argv)
	return args

#============================================

def main(argv: list = None):
	args = parse_args(argv)
	if args.quiet:
		utils.set_quiet_mode(True)
	loaded = ProjectLoader(args.yamlfile).load()
	project = loaded.project
	if args.dump_plan:
		print(yaml.safe_dump(project.dump_plan(), sort_keys=False))
		return
	media_folders = loaded.media_folders + args.media_folders
	if args.to_stdout:
		print(project.save_as_string(media_folders))
		return
	output_file = args.output_file or loaded.output_file
	output_dir = args.output_dir or loaded.output_folder
	project.save_to_file(media_folders, output_file, output_dir)


if __name__ == '__main__':
	main()
