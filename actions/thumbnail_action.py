from pathlib import Path
from typing import TextIO

from .framework import Context, file_action
from .parse_action import parse
from utils.thumbnail import thumbnail_png_bytes

@file_action(implied_actions=[parse])
def thumbnail(ctx: Context, stdout: TextIO, debug_stdout: TextIO):
    ''' Save the embedded preview image as a PNG '''
    if not ctx.params.thumbnail:
        raise RuntimeError(f"No thumbnail found in {ctx.gcode_path.name}")

    out_path = ctx.output_path or ctx.gcode_path.parent / ctx.options.thumbnail_name.format(stem=ctx.gcode_path.stem)
    png = thumbnail_png_bytes(ctx.params.thumbnail)
    debug_stdout.write(f"Decoded {len(png)} bytes of PNG data\n")

    Path(out_path).write_bytes(png)
    stdout.write(f"Thumbnail saved to {out_path}\n")
