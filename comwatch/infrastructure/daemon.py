import os
import sys
from pathlib import Path
from typing import Optional


def daemonize(pid_file: Optional[Path] = None) -> None:
    """Detaches from the controlling terminal (POSIX double fork).

    The surviving grandchild runs in its own session with cwd '/', umask 022
    and stdio on /dev/null. If pid_file is given its pid is written there.
    """
    if os.fork() > 0:
        os._exit(0)
    os.setsid()
    if os.fork() > 0:
        os._exit(0)

    os.chdir("/")
    os.umask(0o022)

    sys.stdout.flush()
    sys.stderr.flush()
    with open(os.devnull, "rb") as devnull_in, open(os.devnull, "ab") as devnull_out:
        os.dup2(devnull_in.fileno(), sys.stdin.fileno())
        os.dup2(devnull_out.fileno(), sys.stdout.fileno())
        os.dup2(devnull_out.fileno(), sys.stderr.fileno())

    if pid_file is not None:
        write_pid_file(pid_file)


def write_pid_file(pid_file: Path) -> None:
    pid_file = Path(pid_file)
    pid_file.parent.mkdir(parents=True, exist_ok=True)
    pid_file.write_text(f"{os.getpid()}\n")


def remove_pid_file(pid_file: Optional[Path]) -> None:
    if pid_file is None:
        return
    try:
        pid_file = Path(pid_file)
        if pid_file.read_text().strip() == str(os.getpid()):
            pid_file.unlink()
    except OSError:
        pass
