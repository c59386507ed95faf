#! /usr/bin/env python3

from pathlib import Path
from typing import Optional, Tuple
import argparse
import os
import sys
import tomllib

from packaging.version import Version
from platformdirs import user_config_path

import actions.help_action
from version import VERSION
from coretypes import CommandOptions, OUTPUT_FORMATS
from utils.logging import check_if_value_in_options
from actions import ALL_ACTIONS_IN_ORDER, Context

CONFIG_DIR = Path(os.environ['SMPARAMS_CONFIG_DIR']) if 'SMPARAMS_CONFIG_DIR' in os.environ else user_config_path('smparams', None)
PROJECT_CONFIG_NAME = 'smparams.toml'

def error_out(message: str):
    print(message)
    sys.exit(1)

def load_config() -> Tuple[CommandOptions, Optional[Path]]:
    """ Returns merged options and the project config file that was applied, if any """
    settings_dict = {}
    project_config = None

    # Global defaults are optional, everything has a built-in default
    if (CONFIG_DIR / "defaults.toml").exists():
        with open(CONFIG_DIR / "defaults.toml", 'rb') as fh:
            settings_dict.update(tomllib.load(fh))

    if Path(PROJECT_CONFIG_NAME).exists():
        with open(PROJECT_CONFIG_NAME, 'rb') as fh:
            settings_dict.update(tomllib.load(fh))
        project_config = Path(PROJECT_CONFIG_NAME).absolute()

    try:
        return CommandOptions(**settings_dict), project_config
    except TypeError as e:
        raise RuntimeError(f"Invalid configuration: {e}")

class HelpAction(argparse.Action):
    def __call__(self, parser, namespace, values, option_string=None):
        actions.help_action.help(None)
        parser.exit()

parser = argparse.ArgumentParser(
    prog='smparams',
    add_help=False,
)

parser.add_argument('-o', '--output', type=str)
parser.add_argument('-f', '--format', type=str)
parser.add_argument('--help', '-h', action=HelpAction, nargs=0)
parser.add_argument('--debug', action='store_true')
parser.add_argument('actions_and_files', nargs='+')

# We follow this strategy of using parse_known_args() rather than parse_args()
# so that we can interleave actions_and_files with dashed options
args, unknown_args = parser.parse_known_args()
unknown_dashed_args = [e for e in unknown_args if e.startswith('-')]

if unknown_dashed_args:
    error_out(f"Unknown option(s): {' '.join(unknown_dashed_args)}")

extras = args.actions_and_files + unknown_args
infiles = []
while extras and '.' in extras[-1]:
    infiles.append(extras.pop())

verbs = set([x.lower() for x in extras])

if not len(verbs):
    error_out("Must provide an action verb")


# Check verbs and insert any implied ones (recursively)
def add_implied_actions(verb_name, mutable_verbs_set):
    action = ALL_ACTIONS_IN_ORDER.get(verb_name)
    if action:
        for dependency in action.implied_actions:
            if dependency not in mutable_verbs_set:
                mutable_verbs_set.add(dependency)
                add_implied_actions(dependency, mutable_verbs_set)

verb_count = len(verbs)
should_load_options = False
needs_input_file = False
for verb in list(verbs):
    action = ALL_ACTIONS_IN_ORDER.get(verb)

    if not action or action.internal:
        error_out(f"Unknown action '{verb}'")

    if action.isolated and verb_count > 1:
        error_out(f"The action '{verb}' can only be used on its own")

    if action.needs_options:
        should_load_options = True
    if action.takes_input_file:
        needs_input_file = True

    add_implied_actions(verb, verbs)

if args.output and {"dump", "thumbnail"} <= verbs:
    error_out("--output can only be used with one of dump or thumbnail")

# Load options if necessary
options = None
if should_load_options:
    try:
        options, project_config = load_config()
    except (RuntimeError, tomllib.TOMLDecodeError) as e:
        error_out(f"ERROR: {e}")

    if options.min_smparams_version and project_config:
        current_version = Version(VERSION)
        min_required_version = Version(str(options.min_smparams_version)) # Str in case they put a float in

        if current_version < min_required_version:
            error_out(f"This project requires smparams version {options.min_smparams_version} or newer. "
                     f"Current version is {VERSION}. Please update smparams to continue.")

    if args.format:
        options.output_format = args.format.lower()

    if args.debug:
        options.debug = True

    try:
        check_if_value_in_options('output format', options.output_format, OUTPUT_FORMATS)
    except RuntimeError as e:
        error_out(f"ERROR: {e}")

gcode_path = None
if len(infiles) > 1:
    error_out("Multiple inputs not supported yet")
elif infiles:
    if not needs_input_file:
        error_out("This action does not take an input file")
    gcode_path = Path(infiles[0])
    if not gcode_path.exists():
        error_out(f"ERROR: {gcode_path} not found")
elif needs_input_file:
    error_out("Must specify a G-code file")

context = Context(
    config_dir=CONFIG_DIR,
    options=options,
    gcode_path=gcode_path,
    output_path=Path(args.output) if args.output else None,
)

for name, action in ALL_ACTIONS_IN_ORDER.items():
    if name in verbs:
        try:
            action(context)
        except Exception as e:
            if options and options.debug:
                raise
            else:
                error_out("ERROR: " + str(e))
        except KeyboardInterrupt as e:
            print("Exited.")
            sys.exit(2)
        if action.isolated:
            sys.exit(0)
