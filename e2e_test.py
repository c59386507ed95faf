import base64
import json
import os
import sys
import tempfile
import textwrap
from contextlib import contextmanager
from pathlib import Path
from typing import Any, List, Tuple

import pexpect
from pexpect.popen_spawn import PopenSpawn

SCRIPT_PATH = Path(__file__).parent / 'smparams.py'

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 40
PNG_B64 = base64.b64encode(PNG_BYTES).decode('ascii')

SAMPLE_GCODE = textwrap.dedent('''\
    ; generated by PrusaSlicer 2.6.0
    ; thumbnail begin 16x16 {size}
    {payload}
    ; thumbnail end
    G28
    ; filament used [mm] = 1000,250
    ; filament used [g] = 3.0,0.75
    ; filament_type = PLA;PETG
    ; temperature = 210,240
    ; bed_temperature = 60,60
    ; layer_height = 0.2
    ; nozzle_diameter = 0.4,0.4
    ; printer_model = Snapmaker J1
    ; estimated printing time (normal mode) = 1h 0m 5s
''').format(
    size=len(PNG_B64),
    payload='\n'.join(f'; {PNG_B64[i:i + 20]}' for i in range(0, len(PNG_B64), 20)),
)


@contextmanager
def isolated_smparams_env():
    """
    Context manager that creates a temporary directory and sets up environment
    variables so that smparams uses it as the global config directory.
    Yields the config dir and a scratch working dir.
    """
    with tempfile.TemporaryDirectory(prefix='smparams_test_') as temp_dir:
        temp_path = Path(temp_dir)
        old_config_dir = os.environ.get('SMPARAMS_CONFIG_DIR')

        config_dir = temp_path / 'config'
        work_dir = temp_path / 'work'
        config_dir.mkdir()
        work_dir.mkdir()
        os.environ['SMPARAMS_CONFIG_DIR'] = str(config_dir)

        try:
            yield config_dir, work_dir
        finally:
            if old_config_dir is not None:
                os.environ['SMPARAMS_CONFIG_DIR'] = old_config_dir
            else:
                os.environ.pop('SMPARAMS_CONFIG_DIR', None)


def write_toml(path: Path, settings: dict[str, Any]):
    with open(path, 'w') as fh:
        for key, value in settings.items():
            fh.write(f"{key} = {json.dumps(value)}\n")


def run_smparams(args: List[str], cwd: Path) -> Tuple[int, str]:
    cmd = [sys.executable, str(SCRIPT_PATH)] + args
    child = PopenSpawn(cmd, timeout=30, encoding='utf-8', cwd=str(cwd), env=os.environ.copy())
    child.expect(pexpect.EOF, timeout=30)
    child.wait()
    return child.exitstatus, child.before


def write_sample(work_dir: Path, text: str = SAMPLE_GCODE) -> Path:
    gcode = work_dir / 'sample.gcode'
    gcode.write_text(text, encoding='utf-8')
    return gcode


def test_help():
    with isolated_smparams_env() as (_, work_dir):
        status, output = run_smparams(['help'], work_dir)
        assert status == 0
        assert 'Usage: smparams' in output
        assert 'thumbnail' in output
        # Internal actions are not listed
        assert '    parse ' not in output


def test_version():
    with isolated_smparams_env() as (config_dir, work_dir):
        status, output = run_smparams(['version'], work_dir)
        assert status == 0
        assert 'smparams version' in output
        assert str(config_dir) in output


def test_info_text():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir)
        status, output = run_smparams(['info', str(gcode)], work_dir)

        assert status == 0, output
        assert 'Printer model: J1' in output
        assert 'G-code flavor: V1' in output
        assert 'Tool head: dual' in output
        assert 'Estimated time: 1h 0m 5s' in output
        assert 'Thumbnail: yes' in output


def test_info_json_format_option():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir)
        status, output = run_smparams(['info', '--format', 'json', str(gcode)], work_dir)

        assert status == 0, output
        data = json.loads(output)
        assert data['model'] == 'J1'
        assert data['filament_types'] == ['PLA', 'PETG']
        assert data['estimated_time_sec'] == 3605


def test_output_format_from_config():
    with isolated_smparams_env() as (config_dir, work_dir):
        write_toml(config_dir / 'defaults.toml', {'output_format': 'json'})
        gcode = write_sample(work_dir)
        status, output = run_smparams(['info', str(gcode)], work_dir)

        assert status == 0, output
        assert json.loads(output)['layer_height'] == 0.2


def test_bad_output_format():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir)
        status, output = run_smparams(['info', '--format', 'yaml', str(gcode)], work_dir)

        assert status == 1
        assert 'No output format named yaml' in output


def test_dump_to_file():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir)
        out_file = work_dir / 'params.json'
        status, output = run_smparams(['dump', '--output', str(out_file), str(gcode)], work_dir)

        assert status == 0, output
        data = json.loads(out_file.read_text())
        assert data['nozzle_temperatures'] == [210.0, 240.0]
        assert data['thumbnail'].startswith('data:image/png;base64,')


def test_thumbnail_export():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir)
        status, output = run_smparams(['thumbnail', str(gcode)], work_dir)

        assert status == 0, output
        assert (work_dir / 'sample.png').read_bytes() == PNG_BYTES


def test_thumbnail_missing():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir, '; layer_height = 0.2\n')
        status, output = run_smparams(['thumbnail', str(gcode)], work_dir)

        assert status == 1
        assert 'ERROR: No thumbnail found in sample.gcode' in output


def test_already_processed_file_is_rejected():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir, '; Postprocessed by smfix (v4)\n' + SAMPLE_GCODE)
        status, output = run_smparams(['info', str(gcode)], work_dir)

        assert status == 1
        assert 'ERROR:' in output
        assert 'already processed' in output


def test_debug_shows_scan_details():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir)
        status, output = run_smparams(['info', '--debug', str(gcode)], work_dir)

        assert status == 0, output
        assert 'Scanned ' in output
        assert 'layer_height' in output


def test_min_version_in_project_config():
    with isolated_smparams_env() as (_, work_dir):
        write_toml(work_dir / 'smparams.toml', {'min_smparams_version': '99.0'})
        gcode = write_sample(work_dir)
        status, output = run_smparams(['info', str(gcode)], work_dir)

        assert status == 1
        assert 'requires smparams version 99.0 or newer' in output


def test_unknown_action():
    with isolated_smparams_env() as (_, work_dir):
        status, output = run_smparams(['frobnicate'], work_dir)
        assert status == 1
        assert "Unknown action 'frobnicate'" in output


def test_missing_input_file():
    with isolated_smparams_env() as (_, work_dir):
        status, output = run_smparams(['info'], work_dir)
        assert status == 1
        assert 'Must specify a G-code file' in output


def test_output_with_dump_and_thumbnail_is_rejected():
    with isolated_smparams_env() as (_, work_dir):
        gcode = write_sample(work_dir)
        out_file = work_dir / 'out.bin'
        status, output = run_smparams(['dump', 'thumbnail', '--output', str(out_file), str(gcode)], work_dir)

        assert status == 1
        assert '--output can only be used with one of dump or thumbnail' in output
        assert not out_file.exists()
