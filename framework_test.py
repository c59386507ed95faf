import io
import sys
from pathlib import Path

from actions.framework import Context, file_action
from coretypes import CommandOptions


def make_context(debug: bool) -> Context:
    return Context(config_dir=Path('.'), options=CommandOptions(debug=debug), gcode_path=None)


def test_debug_stream_is_closed_after_the_action(monkeypatch):
    streams = []

    @file_action
    def record_streams(ctx, stdout, debug_stdout):
        ''' Remembers the streams it was given '''
        debug_stdout.write("hidden\n")
        streams.append(debug_stdout)

    monkeypatch.setattr(sys, 'stdout', io.StringIO())
    record_streams(make_context(debug=False))

    assert len(streams) == 1
    assert streams[0] is not sys.stdout
    assert streams[0].closed
    assert sys.stdout.getvalue() == ''


def test_debug_mode_writes_to_stdout(monkeypatch):
    @file_action
    def chatty(ctx, stdout, debug_stdout):
        ''' Writes a debug line '''
        debug_stdout.write("details\n")

    monkeypatch.setattr(sys, 'stdout', io.StringIO())
    chatty(make_context(debug=True))

    assert sys.stdout.getvalue() == "details\n"
