import textwrap
from typing import TextIO

from .framework import Context, file_action
from .parse_action import parse
from .dump_action import dump_params
from coretypes import ParameterRecord, ExtruderPair


def format_duration(seconds: int) -> str:
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h {minutes}m {secs}s"

def format_pair(pair: ExtruderPair) -> str:
    return f"{pair.left} / {pair.right}"

def describe_params(params: ParameterRecord) -> str:
    used = [
        name for name, is_used in (('left', params.left_extruder_used), ('right', params.right_extruder_used))
        if is_used
    ]

    return textwrap.dedent(f'''\
        Printer model: {params.model or 'unknown'}
        G-code flavor: V{params.version}
        Tool head: {params.tool_head}
        Print mode: {params.print_mode}
        Extruders used: {', '.join(used) or 'none'}
        Layer height: {params.layer_height:.2f} mm
        Layers: {params.total_layers}
        Lines: {params.total_lines}
        Estimated time: {format_duration(params.estimated_time_sec)}
        Filament types: {format_pair(params.filament_types)}
        Filament used: {format_pair(params.filament_used)} mm ({params.all_filament_used():.2f} mm total)
        Filament weight: {format_pair(params.filament_used_weight)} g ({params.all_filament_used_weight():.2f} g total)
        Nozzle diameters: {format_pair(params.nozzle_diameters)} mm
        Nozzle temperatures: {format_pair(params.nozzle_temperatures)} C (effective {params.effective_nozzle_temperature()})
        Bed temperatures: {format_pair(params.bed_temperatures)} C (effective {params.effective_bed_temperature()})
        Retractions: {format_pair(params.retractions)} mm, toolchange {params.switch_retraction} mm
        Print speed: {params.print_speed_sec} mm/s
        Bounds: x={params.min_x:.2f}..{params.max_x:.2f}, y={params.min_y:.2f}..{params.max_y:.2f}, z={params.min_z:.2f}..{params.max_z:.2f}
        Thumbnail: {'yes' if params.thumbnail else 'no'}
    ''')


@file_action(implied_actions=[parse])
def info(ctx: Context, stdout: TextIO, debug_stdout: TextIO):
    ''' Show the print parameters found in a G-code file '''
    if ctx.options.output_format == 'json':
        stdout.write(dump_params(ctx.params) + "\n")
    else:
        stdout.write(describe_params(ctx.params))
