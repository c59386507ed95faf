import json
from typing import TextIO

from .framework import Context, file_action
from .parse_action import parse
from coretypes import ParameterRecord

def dump_params(params: ParameterRecord) -> str:
    return json.dumps(params.to_dict(), indent=2)

@file_action(implied_actions=[parse])
def dump(ctx: Context, stdout: TextIO, debug_stdout: TextIO):
    ''' Print the print parameters as JSON '''
    output = dump_params(ctx.params)
    if ctx.output_path:
        with open(ctx.output_path, 'w', encoding='utf-8') as fh:
            fh.write(output + "\n")
        stdout.write(f"Parameters written to {ctx.output_path}\n")
    else:
        stdout.write(output + "\n")
