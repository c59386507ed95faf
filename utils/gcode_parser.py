from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, TextIO, Tuple

from coretypes import (
    ParameterRecord, ExtruderPair,
    PRINT_MODE_DUPLICATION, PRINT_MODE_MIRROR, PRINT_MODE_BACKUP,
)
from utils.logging import AlreadyProcessedError
from utils.settings import match_setting
from utils.thumbnail import ThumbnailCapture, THUMBNAIL_BEGIN, THUMBNAIL_END
from utils.value_parsers import split_list, split_floats, parse_float, parse_int, parse_duration
from utils.derive import derive_params

POSTPROCESSED_MARKER = '; Postprocessed by smfix'
VERSION_1_MARKER = '; SNAPMAKER_GCODE_V1'


@dataclass
class ScanState:
    """ Everything the scanner accumulates. The extra fields feed the derivation pass. """
    params: ParameterRecord = field(default_factory=ParameterRecord)
    thumbnail: ThumbnailCapture = field(default_factory=ThumbnailCapture)

    printer_model: str = ''
    bed_shape: str = ''
    printers_condition: str = ''

    retract_len: ExtruderPair[float] = field(default_factory=lambda: ExtruderPair(-1.0, -1.0))
    filament_retract_len: ExtruderPair[float] = field(default_factory=lambda: ExtruderPair(-1.0, -1.0))


RuleFunc = Callable[[ScanState, str], bool] # Returns True if the line was consumed

@dataclass(frozen=True)
class Rule:
    name: str
    apply: RuleFunc


def floats_pair(v: str) -> ExtruderPair[float]:
    return ExtruderPair.from_values(split_floats(v), 0.0)

def strings_pair(v: str) -> ExtruderPair[str]:
    return ExtruderPair.from_values(split_list(v), '')


#
# Rule builders
#
def prefix_rule(name: str, prefix: str, action: Callable[[ScanState, str], None]) -> Rule:
    def apply(state: ScanState, line: str) -> bool:
        if not line.startswith(prefix):
            return False
        action(state, line)
        return True
    return Rule(name, apply)

def setting_rule(
    aliases: Tuple[str, ...],
    store: Callable[[ScanState, str], None],
    only_if: Optional[Callable[[ScanState], bool]] = None,
) -> Rule:
    """
    A rule for a "; key = value" setting. If `only_if` is given the rule is skipped once it
    returns False, which is how set-once fields keep their first value.
    """
    def apply(state: ScanState, line: str) -> bool:
        value, ok = match_setting(line, *aliases)
        if not ok:
            return False
        if only_if and not only_if(state):
            return False
        store(state, value)
        return True
    return Rule(aliases[0], apply)

def set_field(field_name: str, convert: Callable[[str], object]) -> Callable[[ScanState, str], None]:
    def store(state: ScanState, value: str):
        setattr(state.params, field_name, convert(value))
    return store

def set_state(attr: str, convert: Callable[[str], object] = str) -> Callable[[ScanState, str], None]:
    def store(state: ScanState, value: str):
        setattr(state, attr, convert(value))
    return store


def _already_processed(state: ScanState, line: str):
    raise AlreadyProcessedError(POSTPROCESSED_MARKER)

def _set_print_mode(mode: str) -> Callable[[ScanState, str], None]:
    def action(state: ScanState, line: str):
        state.params.print_mode = mode
    return action

def _set_version_1(state: ScanState, line: str):
    state.params.version = 1

def _thumbnail_begin(state: ScanState, line: str):
    state.thumbnail.begin()

def _thumbnail_end(state: ScanState, line: str):
    state.thumbnail.end(line)


# Order matters: the first rule that matches a line wins
SCAN_RULES: List[Rule] = [
    prefix_rule('postprocessed', POSTPROCESSED_MARKER, _already_processed),
    prefix_rule('version_1', VERSION_1_MARKER, _set_version_1),
    prefix_rule('duplication_mode', 'M605 S2', _set_print_mode(PRINT_MODE_DUPLICATION)),
    prefix_rule('mirror_mode', 'M605 S3', _set_print_mode(PRINT_MODE_MIRROR)),
    prefix_rule('backup_mode', 'M605 S4', _set_print_mode(PRINT_MODE_BACKUP)),
    prefix_rule('thumbnail_begin', THUMBNAIL_BEGIN, _thumbnail_begin),
    prefix_rule('thumbnail_end', THUMBNAIL_END, _thumbnail_end),

    setting_rule(('filament used [mm]',), set_field('filament_used', floats_pair)),
    setting_rule(('filament used [g]',), set_field('filament_used_weight', floats_pair)),
    setting_rule(('estimated printing time (normal mode)',), set_field('estimated_time_sec', parse_duration)),
    setting_rule(('filament_type',), set_field('filament_types', strings_pair)),
    setting_rule(('total_layer_number',), set_field('total_layers', parse_int)),
    setting_rule(
        ('filament_retract_length', 'filament_retraction_length'), # bbs
        set_state('filament_retract_len', floats_pair),
    ),
    setting_rule(
        ('retract_length', 'retraction_length'), # bbs
        set_state('retract_len', floats_pair),
    ),
    setting_rule(('retract_length_toolchange',), set_field('switch_retraction', parse_float)),
    setting_rule(('nozzle_diameter',), set_field('nozzle_diameters', floats_pair)),
    setting_rule(
        ('layer_height', 'first_layer_height'),
        set_field('layer_height', parse_float),
        only_if=lambda s: s.params.layer_height == 0,
    ),
    setting_rule(('printer_notes',), set_field('printer_notes', str)),
    setting_rule(
        ('max_print_speed', 'outer_wall_speed'), # bbs
        set_field('print_speed_sec', parse_float),
        only_if=lambda s: s.params.print_speed_sec == 0,
    ),
    setting_rule(
        ('first_layer_temperature', 'temperature', 'nozzle_temperature_initial_layer', 'nozzle_temperature'), # bbs
        set_field('nozzle_temperatures', floats_pair),
        only_if=lambda s: s.params.nozzle_temperatures.left == -1,
    ),
    setting_rule(
        ('first_layer_bed_temperature', 'bed_temperature', 'hot_plate_temp_initial_layer', 'hot_plate_temp'), # bbs
        set_field('bed_temperatures', floats_pair),
        only_if=lambda s: s.params.bed_temperatures.left == -1,
    ),
    setting_rule(('min_x',), set_field('min_x', parse_float)),
    setting_rule(('min_y',), set_field('min_y', parse_float)),
    setting_rule(('min_z',), set_field('min_z', parse_float)),
    setting_rule(('max_x',), set_field('max_x', parse_float)),
    setting_rule(('max_y',), set_field('max_y', parse_float)),
    setting_rule(('max_z',), set_field('max_z', parse_float)),
    setting_rule(('printer_model',), set_state('printer_model')),
    setting_rule(('bed_shape',), set_state('bed_shape')),
    setting_rule(
        ('compatible_printers_condition_cummulative', 'print_compatible_printers'), # bbs
        set_state('printers_condition'),
    ),
]


def scan_lines(lines: Iterable[str], debug_stdout: Optional[TextIO] = None) -> ScanState:
    """ Runs every line through SCAN_RULES once, in file order """
    state = ScanState()

    for raw_line in lines:
        state.params.total_lines += 1

        line = raw_line.strip()
        if not line:
            continue

        for rule in SCAN_RULES:
            if rule.apply(state, line):
                if debug_stdout:
                    debug_stdout.write(f"line {state.params.total_lines}: {rule.name}\n")
                break

        state.thumbnail.feed(line)

    return state


def parse_params(lines: Iterable[str], debug_stdout: Optional[TextIO] = None) -> ParameterRecord:
    """
    Extracts the print parameters from the comments of a sliced G-code file.
    Raises AlreadyProcessedError if the file was already post-processed.
    """
    state = scan_lines(lines, debug_stdout)
    state.params.thumbnail = state.thumbnail.decode()
    derive_params(state)
    return state.params


def parse_gcode_file(gcode_path: Path, debug_stdout: Optional[TextIO] = None) -> ParameterRecord:
    # Stray bytes in comments (e.g. a cp1252 degree sign) must not abort the scan
    with open(gcode_path, 'r', encoding='utf-8', errors='replace') as f:
        return parse_params(f, debug_stdout)
