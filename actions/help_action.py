import textwrap
from typing import TextIO

from .framework import Context, isolated_action

@isolated_action
def help(ctx: Context, stdout: TextIO, debug_stdout: TextIO):
    ''' Display this message ''' # This docstring is used to produce the help

    # We can't do this at the top level or we'll get a circular import and break
    from . import ALL_ACTIONS_IN_ORDER

    max_action_length = max((len(a.name) for a in ALL_ACTIONS_IN_ORDER.values() if not a.internal))

    action_descriptions = "\n".join([
        f"    {a.name:<{max_action_length}}  {a.doc}"
        for a in ALL_ACTIONS_IN_ORDER.values() if not a.internal
    ])

    stdout.write(textwrap.dedent('''\
        Usage: smparams ACTIONS... [OPTIONS]... GCODE_FILE

        Examples:
            smparams info benchy.gcode
            smparams info --format json benchy.gcode
            smparams dump --output benchy.json benchy.gcode
            smparams info thumbnail benchy.gcode

        Actions:
        {action_descriptions}

        Options:
            --output PATH       Where dump and thumbnail write their result
            --format NAME       Output format for info, "text" or "json"
            --debug             Show scan diagnostics and full error tracebacks
    ''').format(action_descriptions=action_descriptions))
