from collections import OrderedDict

from .framework import Context
import actions.parse_action as parse_action
import actions.info_action as info_action
import actions.dump_action as dump_action
import actions.thumbnail_action as thumbnail_action
import actions.help_action as help_action
import actions.version_action as version_action

_actions_in_order = [
    parse_action.parse,
    info_action.info,
    dump_action.dump,
    thumbnail_action.thumbnail,

    help_action.help,
    version_action.version,
]

ALL_ACTIONS_IN_ORDER = OrderedDict()

for a in _actions_in_order:
    ALL_ACTIONS_IN_ORDER[a.name] = a
