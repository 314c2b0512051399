import os
import time
import pytest
import yaml
from pathlib import Path
from comwatch.config.models import AppConfig
from comwatch.infrastructure.event_bus import EventBus

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Returns a sample AppConfig object for testing."""
    return AppConfig(
        general={
            "video_extensions": ["mpg", "mpeg", "ts"],
            "delete_suffixes": ["edl", "txt", "logo.txt", "log"],
            "result_extension": "edl",
            "max_runners": 2,
            "sleep_time": 1,
            "run_while_recording": False,
            "idle_delay": 10,
            "commercial_detect_cmd": "comskip --quiet",
            "delete_orphans": True,
        },
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "comwatch.yaml"

    recordings = tmp_path / "recordings"
    recordings.mkdir(exist_ok=True)

    content = {
        'scan_dirs': [str(recordings)],
        'general': {
            'video_extensions': ['.mpg', 'ts'],
            'delete_suffixes': ['txt', 'edl', 'logo.txt'],
            'max_runners': 3,
            'sleep_time': 30,
            'run_while_recording': True,
            'idle_delay': 5,
            'commercial_detect_cmd': 'comskip --ini=/etc/comskip.ini',
            'delete_orphans': False,
        },
        'logging': {
            'log_dir': str(tmp_path / "logs"),
            'log_file': 'watch.log',
        },
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

# ============================================================================
# EventBus Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

@pytest.fixture
def recorded_events(event_bus):
    """Returns (bus, list) where every published event is appended to list."""
    from comwatch.domain.events import Event

    received = []
    event_bus.subscribe(Event, received.append)
    return event_bus, received

# ============================================================================
# File System Fixtures
# ============================================================================

@pytest.fixture
def recordings_dir(tmp_path):
    """Creates an empty recordings directory."""
    recordings = tmp_path / "recordings"
    recordings.mkdir(exist_ok=True)
    return recordings

def write_file(directory: Path, name: str, content: bytes = b"video data", age_minutes: float = 60.0) -> Path:
    """Creates a file whose mtime is age_minutes in the past."""
    path = directory / name
    path.write_bytes(content)
    stamp = time.time() - age_minutes * 60
    os.utime(path, (stamp, stamp))
    return path

@pytest.fixture
def make_file():
    return write_file

# ============================================================================
# Process Fixtures
# ============================================================================

class FakeProcess:
    """Stands in for subprocess.Popen; the test decides when it exits."""

    def __init__(self, command):
        self.command = command
        self.returncode = None
        self.terminated = False

    def poll(self):
        return self.returncode

    def finish(self, code: int = 0):
        self.returncode = code

    def terminate(self):
        self.terminated = True

class FakeDetector:
    """DetectorAdapter double that records spawns instead of running anything."""

    def __init__(self, template: str = "comskip"):
        from comwatch.infrastructure.detector import DetectorAdapter

        self._adapter = DetectorAdapter(template)
        self.spawned = []
        self.fail_with = None

    def build_command(self, video_path):
        return self._adapter.build_command(video_path)

    def spawn(self, command):
        if self.fail_with is not None:
            raise self.fail_with
        process = FakeProcess(command)
        self.spawned.append(process)
        return process

@pytest.fixture
def fake_detector():
    return FakeDetector()

# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
