from typing import List, Tuple, TYPE_CHECKING

from coretypes import (
    ParameterRecord, ExtruderPair,
    MODEL_A150, MODEL_A250, MODEL_A350, MODEL_A400, MODEL_J1,
    TOOLHEAD_DUAL, PRINT_MODE_MIRROR, PRINT_MODE_DUPLICATION,
)

if TYPE_CHECKING:
    from utils.gcode_parser import ScanState

NOTES_VERSION_1 = 'SNAPMAKER_GCODE_V1'
NOTES_VERSION_0 = 'SNAPMAKER_GCODE_V0'

# Identifiers that may appear in printer_model, the compatible printers condition
# or the bed shape, checked in this order. The first one found decides the model.
MODEL_IDENTIFIERS: List[Tuple[str, str]] = [
    ('A150', MODEL_A150),
    ('160x160', MODEL_A150),

    ('A250', MODEL_A250),
    ('230x250', MODEL_A250),

    ('A350', MODEL_A350),
    ('320x350', MODEL_A350),

    ('A400', MODEL_A400),
    ('Artisan', MODEL_A400),
    ('400x400', MODEL_A400),

    ('J1', MODEL_J1),
    ('312x200', MODEL_J1),
    ('324x200', MODEL_J1),
    ('300x200', MODEL_J1),
]


def derive_params(state: 'ScanState') -> None:
    """ Fills in the computed fields of state.params once the whole file has been scanned """
    params = state.params

    params.retractions = merge_retractions(state.retract_len, state.filament_retract_len)
    reset_unused_extruders(params)

    if params.left_extruder_used and params.right_extruder_used:
        params.tool_head = TOOLHEAD_DUAL

    if params.print_mode in (PRINT_MODE_MIRROR, PRINT_MODE_DUPLICATION):
        # Only the IDEX machine can print these
        params.version = 1
        params.model = MODEL_J1

    # The printer notes override the IDEX guess above
    if NOTES_VERSION_1 in params.printer_notes:
        params.version = 1
    elif NOTES_VERSION_0 in params.printer_notes:
        params.version = 0

    model = resolve_model(state.printer_model, state.printers_condition, state.bed_shape)
    if model:
        params.model = model

    if params.model == MODEL_J1:
        # J1 only supports the V1 flavor
        params.version = 1


def merge_retractions(
    retract_len: ExtruderPair[float],
    filament_retract_len: ExtruderPair[float],
) -> ExtruderPair[float]:
    """ Filament specific retraction lengths win, but only when they are positive """
    merged = ExtruderPair(retract_len.left, retract_len.right)
    for i in range(2):
        if filament_retract_len[i] > 0:
            merged[i] = filament_retract_len[i]
    return merged


def reset_unused_extruders(params: ParameterRecord) -> None:
    for i in range(2):
        if params.filament_used[i] > 0:
            if i == 0:
                params.left_extruder_used = True
            else:
                params.right_extruder_used = True
        else:
            params.filament_types[i] = '-'
            params.nozzle_temperatures[i] = 0
            params.bed_temperatures[i] = -1
            params.retractions[i] = 0


def resolve_model(printer_model: str, printers_condition: str, bed_shape: str) -> str:
    """ Returns the model code, or an empty string if nothing matched """
    for identifier, model in MODEL_IDENTIFIERS:
        for text in (printer_model, printers_condition, bed_shape):
            if identifier in text:
                return model
    return ''
