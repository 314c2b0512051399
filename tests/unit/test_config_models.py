import pytest
from pathlib import Path
from pydantic import ValidationError
from comwatch.config.models import AppConfig, GeneralConfig
from comwatch.config.loader import load_config

def test_valid_config():
    data = {
        "scan_dirs": ["/srv/recordings"],
        "general": {
            "video_extensions": ["mpg", "ts"],
            "max_runners": 4,
            "idle_delay": 15,
            "commercial_detect_cmd": "comskip",
        },
        "logging": {"log_dir": "/tmp/logs", "log_file": "cw.log"},
    }
    config = AppConfig(**data)
    assert config.general.max_runners == 4
    assert config.scan_dirs == ["/srv/recordings"]
    assert config.logging.log_file == "cw.log"

def test_config_defaults():
    gen = GeneralConfig()
    assert gen.video_extensions == ["mpg", "mpeg", "ts"]
    assert gen.result_extension == "edl"
    assert gen.run_while_recording is False
    assert gen.delete_orphans is True
    assert gen.max_runners == 2

def test_invalid_max_runners():
    with pytest.raises(ValidationError):
        GeneralConfig(max_runners=0)

def test_invalid_sleep_time():
    with pytest.raises(ValidationError):
        GeneralConfig(sleep_time=0)

def test_negative_idle_delay_rejected():
    with pytest.raises(ValidationError):
        GeneralConfig(idle_delay=-1)

def test_empty_command_rejected():
    with pytest.raises(ValidationError):
        GeneralConfig(commercial_detect_cmd="   ")

def test_unbalanced_quotes_in_command_rejected():
    with pytest.raises(ValidationError, match="not a valid command line"):
        GeneralConfig(commercial_detect_cmd="comskip --ini='/etc/x.ini")

def test_quoted_command_accepted():
    gen = GeneralConfig(commercial_detect_cmd="comskip --ini='/etc/comskip tv.ini' {path}")
    assert gen.commercial_detect_cmd.startswith("comskip")

def test_empty_video_extensions_rejected():
    with pytest.raises(ValidationError):
        GeneralConfig(video_extensions=[])

def test_extensions_normalized():
    gen = GeneralConfig(video_extensions=[".MPG", "ts", "mpg"], result_extension=".edl")
    assert gen.video_extensions == ["mpg", "ts"]
    assert gen.result_extension == "edl"

def test_delete_suffixes_longest_first():
    gen = GeneralConfig(delete_suffixes=["txt", ".edl", "logo.txt", "log"])
    assert gen.delete_suffixes[0] == "logo.txt"
    assert gen.delete_suffixes.index("logo.txt") < gen.delete_suffixes.index("txt")
    assert set(gen.delete_suffixes) == {"txt", "edl", "logo.txt", "log"}

def test_load_config_from_yaml(config_yaml_path, tmp_path):
    config = load_config(config_yaml_path)
    assert config.general.max_runners == 3
    assert config.general.video_extensions == ["mpg", "ts"]
    assert config.general.delete_suffixes[0] == "logo.txt"
    assert config.general.run_while_recording is True
    assert config.general.delete_orphans is False
    assert config.scan_dirs == [str(tmp_path / "recordings")]
    assert config.logging.log_file == "watch.log"

def test_load_config_single_scan_dir_string(tmp_path):
    conf = tmp_path / "c.yaml"
    conf.write_text("scan_dirs: /srv/tv\n")
    config = load_config(conf)
    assert config.scan_dirs == ["/srv/tv"]

def test_load_config_empty_file_uses_defaults(tmp_path):
    conf = tmp_path / "empty.yaml"
    conf.write_text("")
    config = load_config(conf)
    assert config.general.max_runners == 2
    assert config.scan_dirs == []

def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")

def test_load_config_invalid_values(tmp_path):
    conf = tmp_path / "bad.yaml"
    conf.write_text("general:\n  max_runners: 0\n")
    with pytest.raises(ValidationError):
        load_config(conf)
