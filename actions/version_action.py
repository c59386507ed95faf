from typing import TextIO

from .framework import Context, isolated_action
from version import VERSION

@isolated_action
def version(ctx: Context, stdout: TextIO, debug_stdout: TextIO):
    ''' Show the program version '''
    stdout.write(f"smparams version {VERSION}\n")
    stdout.write(f"Configuration dir: {ctx.config_dir}\n")
