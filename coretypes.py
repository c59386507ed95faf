from dataclasses import dataclass, field
from typing import Optional, Literal, Union, List, Generic, TypeVar, Iterator, Sequence, Dict, Any


# Printer model codes. An empty string means the model could not be resolved.
MODEL_UNKNOWN = ""
MODEL_A150 = "A150"
MODEL_A250 = "A250"
MODEL_A350 = "A350"
MODEL_A400 = "A400"
MODEL_J1 = "J1" # The IDEX machine

TOOLHEAD_SINGLE = "single"
TOOLHEAD_DUAL = "dual"

PRINT_MODE_DEFAULT = "default"
PRINT_MODE_DUPLICATION = "duplication"
PRINT_MODE_MIRROR = "mirror"
PRINT_MODE_BACKUP = "backup"

OutputFormat = Literal["text", "json"]
OUTPUT_FORMATS = ["text", "json"]


@dataclass(kw_only=True)
class CommandOptions:
    debug: bool = False
    output_format: OutputFormat = "text"
    thumbnail_name: str = "{stem}.png" # {stem} is the input file name without extension
    min_smparams_version: Optional[Union[str, float]] = None


T = TypeVar('T')

class ExtruderPair(Generic[T]):
    """
    A value for each extruder. Index 0 is the left (T0) extruder and index 1 the right (T1) one.
    There are always exactly two slots, whatever the slicer wrote.
    """
    __slots__ = ('left', 'right')

    def __init__(self, left: T, right: T):
        self.left = left
        self.right = right

    @classmethod
    def from_values(cls, values: Sequence[T], default: T) -> 'ExtruderPair[T]':
        """ Takes the first two values, padding with `default` if there are fewer. """
        padded = list(values[:2]) + [default] * (2 - len(values[:2]))
        return cls(padded[0], padded[1])

    def __getitem__(self, index: int) -> T:
        if index == 0:
            return self.left
        if index == 1:
            return self.right
        raise IndexError(f"Extruder index {index} out of range")

    def __setitem__(self, index: int, value: T) -> None:
        if index == 0:
            self.left = value
        elif index == 1:
            self.right = value
        else:
            raise IndexError(f"Extruder index {index} out of range")

    def __iter__(self) -> Iterator[T]:
        yield self.left
        yield self.right

    def __len__(self) -> int:
        return 2

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ExtruderPair):
            return self.left == other.left and self.right == other.right
        if isinstance(other, (list, tuple)):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"ExtruderPair({self.left!r}, {self.right!r})"

    def to_list(self) -> List[T]:
        return [self.left, self.right]


def _unset_floats() -> ExtruderPair[float]:
    return ExtruderPair(-1.0, -1.0)

def _unset_strings() -> ExtruderPair[str]:
    return ExtruderPair("", "")


@dataclass(kw_only=True)
class ParameterRecord:
    """
    Print parameters recovered from the comments of a sliced G-code file.
    Built fresh for every parse; -1 (or "") in a per-extruder field means the slicer never set it.
    """
    version: int = 0 # 0 or 1
    model: str = MODEL_UNKNOWN
    tool_head: str = TOOLHEAD_SINGLE
    print_mode: str = PRINT_MODE_DEFAULT
    left_extruder_used: bool = False
    right_extruder_used: bool = False
    printer_notes: str = ""
    layer_height: float = 0.0
    total_layers: int = 0
    total_lines: int = 0
    estimated_time_sec: int = 0
    nozzle_temperatures: ExtruderPair[float] = field(default_factory=_unset_floats)
    nozzle_diameters: ExtruderPair[float] = field(default_factory=_unset_floats)
    retractions: ExtruderPair[float] = field(default_factory=_unset_floats)
    switch_retraction: float = 0.0
    bed_temperatures: ExtruderPair[float] = field(default_factory=_unset_floats)
    filament_types: ExtruderPair[str] = field(default_factory=_unset_strings)
    filament_used: ExtruderPair[float] = field(default_factory=_unset_floats) # mm
    filament_used_weight: ExtruderPair[float] = field(default_factory=_unset_floats) # g
    print_speed_sec: float = 0.0
    min_x: float = 0.0
    min_y: float = 0.0
    min_z: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    max_z: float = 0.0
    thumbnail: bytes = b""

    def effective_nozzle_temperature(self) -> float:
        return _effective(self.nozzle_temperatures)

    def effective_bed_temperature(self) -> float:
        return _effective(self.bed_temperatures)

    def all_filament_used(self) -> float:
        return self.filament_used.left + self.filament_used.right

    def all_filament_used_weight(self) -> float:
        return self.filament_used_weight.left + self.filament_used_weight.right

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for name, value in self.__dict__.items():
            if isinstance(value, ExtruderPair):
                value = value.to_list()
            elif isinstance(value, bytes):
                value = value.decode('ascii', errors='replace')
            result[name] = value
        return result


def _effective(pair: ExtruderPair[float]) -> float:
    # The left extruder wins unless it is effectively off
    if pair.left < 1:
        return pair.right
    return pair.left
