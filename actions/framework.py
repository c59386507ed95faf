import os
import sys
from typing import List, TextIO, Callable, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path

from coretypes import CommandOptions, ParameterRecord

@dataclass(kw_only=True)
class Context:
    config_dir: Path
    options: Optional[CommandOptions]
    gcode_path: Optional[Path]
    output_path: Optional[Path] = None

    # Attached by the parse step
    params: Optional[ParameterRecord] = None


ActionName = str
ActionFunc = Callable[[Context, TextIO, TextIO], None] # stdout, debug stdout

@dataclass(kw_only=True)
class Action:
    name: ActionName  # Must be unique
    doc: Optional[str] = None

    internal: bool = False
    isolated: bool  # True means the verb can't be run with other verbs
    needs_options: bool
    takes_input_file: bool
    implied_actions: List[ActionName] = field(default_factory=list)
    impl: ActionFunc

    def __post_init__(self):
        assert self.doc or self.internal, f"Action `{self.name}` lacks a doc string"

    def __call__(self, context: Context):
        debug_mode = self.needs_options and context.options.debug
        if debug_mode:
            return self.impl(context, sys.stdout, sys.stdout)
        with open(os.devnull, 'w') as devnull:
            return self.impl(context, sys.stdout, devnull)

#
# Decorators
#
def _action_name(fn: Callable[..., Any]) -> str:
    return fn.__name__.replace('_', '-')

def _action_doc(fn: Callable[..., Any]) -> Optional[str]:
    if fn.__doc__:
        return fn.__doc__.strip()
    else:
        return None

def isolated_action(
    func: Optional[ActionFunc] = None,
    needs_options: bool = False
):
    def wrap(func: ActionFunc) -> Action:
        return Action(
            name=_action_name(func),
            doc=_action_doc(func),
            isolated=True,
            takes_input_file=False,
            needs_options=needs_options,
            impl=func,
        )

    if callable(func):
        return wrap(func)
    else:
        return wrap

def file_action(
    func: Optional[ActionFunc] = None,
    implied_actions: List[Action] = [],
    internal = False,
):
    # Callers pass the implied Action objects so they can only name actions that exist
    implied_action_names = [a.name for a in implied_actions]

    def wrap(func: ActionFunc) -> Action:
        return Action(
            name=_action_name(func),
            doc=_action_doc(func),
            isolated=False,
            takes_input_file=True,
            needs_options=True,
            internal=internal,
            implied_actions=implied_action_names,
            impl=func,
        )

    if callable(func):
        return wrap(func)
    else:
        return wrap

def internal_action(
    func: Optional[ActionFunc] = None,
    implied_actions: List[Action] = [],
):
    return file_action(
        func=func,
        implied_actions=implied_actions,
        internal=True,
    )
