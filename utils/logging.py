from typing import Any, Union


class ParseError(RuntimeError):
    pass


class AlreadyProcessedError(ParseError):
    def __init__(self, marker: str):
        super().__init__(
            f"This file was already processed (found \"{marker}\"), no need to process it again."
        )
        self.marker = marker


def check_if_value_in_options(thing_name: str, value: str, options: Union[list[str], dict[str, Any]]) -> None:
    if value not in options:
        opt_names = options if isinstance(options, list) else options.keys()
        raise RuntimeError(f"No {thing_name} named {value}, options are {', '.join(opt_names)}")
