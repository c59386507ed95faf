from typing import TextIO

from .framework import Context, internal_action
from utils.gcode_parser import parse_gcode_file

@internal_action
def parse(ctx: Context, stdout: TextIO, debug_stdout: TextIO):
    debug_stdout.write(f"Scanning {ctx.gcode_path}\n")

    # Rule-by-rule tracing is only useful when debugging
    trace = debug_stdout if ctx.options.debug else None
    ctx.params = parse_gcode_file(ctx.gcode_path, trace)

    params = ctx.params
    debug_stdout.write(f"Scanned {params.total_lines} lines\n")
    debug_stdout.write(f"Resolved model: {params.model or 'unknown'}, version {params.version}\n")
    debug_stdout.write(f"Thumbnail: {len(params.thumbnail)} bytes\n")
