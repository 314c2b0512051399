import typer
import yaml
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from rich.console import Console

from comwatch.config.loader import load_config
from comwatch.config.models import AppConfig
from comwatch.config.scan_dirs import (
    parse_cli_scan_dirs,
    normalize_scan_dir_entries,
    dedupe_scan_dirs,
    validate_scan_dir_entries,
    evaluate_scan_dirs,
    build_scan_dir_lines,
    STATUS_OK,
)
from comwatch.infrastructure.logging import setup_logging
from comwatch.infrastructure.event_bus import EventBus
from comwatch.infrastructure.directory import DirectoryReader
from comwatch.infrastructure.detector import DetectorAdapter
from comwatch.infrastructure.daemon import daemonize, remove_pid_file
from comwatch.pipeline.orphans import OrphanReconciler
from comwatch.pipeline.activity import ActivityGate
from comwatch.pipeline.job_pool import JobPool
from comwatch.pipeline.scan_loop import ScanLoop
from comwatch.pipeline.shutdown import ShutdownHandler
from comwatch.pipeline.stats import RunStats, StatsCollector

DEFAULT_CONFIG_PATH = Path("/etc/comwatch.yaml")

app = typer.Typer(help="comwatch - runs commercial detection on newly recorded videos")


def _fail(message: str):
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command()
def watch(
    scan_dirs_arg: Optional[str] = typer.Argument(
        None,
        help="Directory or comma-separated directories to watch (optional if set in config)"
    ),
    config_path: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to YAML config"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Stay in the foreground and log debug output to the console"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Disable logging entirely"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Only report what would be run or deleted; no log file"),
    max_runners: Optional[int] = typer.Option(None, "--max-runners", "-j", min=1, help="Override max concurrent detection jobs"),
):
    """Watch recording directories and run commercial detection on new videos."""
    cli_scan_dirs = parse_cli_scan_dirs(scan_dirs_arg)

    try:
        if config_path.exists() or not cli_scan_dirs:
            config = load_config(config_path)
        else:
            config = AppConfig()
        if max_runners is not None:
            config.general.max_runners = max_runners
    except (FileNotFoundError, ValidationError, ValueError, yaml.YAMLError) as exc:
        _fail(str(exc))

    requested = cli_scan_dirs if cli_scan_dirs else normalize_scan_dir_entries(config.scan_dirs)
    requested = dedupe_scan_dirs(requested)
    try:
        validate_scan_dir_entries(requested)
    except ValueError as exc:
        _fail(str(exc))

    scan_dirs, status_entries = evaluate_scan_dirs(requested)
    foreground = debug or dry_run
    if foreground and not quiet:
        console = Console(stderr=True)
        console.print("Scan directories:")
        for line in build_scan_dir_lines(status_entries):
            console.print(line)
    if len(scan_dirs) != len(requested):
        bad = [entry for status, entry in status_entries if status != STATUS_OK]
        _fail(f"Scan directory missing or not readable: {', '.join(bad)}")

    pid_file = Path(config.daemon.pid_file) if config.daemon.pid_file else None
    log_path = Path(config.logging.log_dir) / config.logging.log_file
    if not foreground and not quiet:
        # Checked while stderr is still the terminal
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            _fail(f"Cannot create log directory {log_path.parent}: {exc}")

    if not foreground:
        daemonize(pid_file)

    try:
        _run(config, scan_dirs, log_path, debug=debug, quiet=quiet, dry_run=dry_run)
    finally:
        remove_pid_file(pid_file)


def _run(config: AppConfig, scan_dirs, log_path: Path, debug: bool, quiet: bool, dry_run: bool):
    foreground = debug or dry_run
    logger = setup_logging(
        None if dry_run else log_path,
        debug=debug,
        quiet=quiet,
        console=foreground,
    )

    general = config.general
    logger.info(f"comwatch started: scan_dirs={[str(d) for d in scan_dirs]}")
    logger.info(
        f"Config: max_runners={general.max_runners}, sleep_time={general.sleep_time}s, "
        f"idle_delay={general.idle_delay}m, run_while_recording={general.run_while_recording}, "
        f"delete_orphans={general.delete_orphans}, dry_run={dry_run}"
    )

    bus = EventBus()
    stats = RunStats()
    StatsCollector(bus, stats)

    detector = DetectorAdapter(general.commercial_detect_cmd)
    pool = JobPool(general.max_runners, detector, event_bus=bus, dry_run=dry_run)
    shutdown = ShutdownHandler(pool)
    shutdown.install()

    reader = DirectoryReader(general.video_extensions)
    reconciler = OrphanReconciler(
        general.video_extensions,
        general.delete_suffixes,
        delete_enabled=general.delete_orphans and not (dry_run or debug),
        event_bus=bus,
    )
    gate = ActivityGate(general.idle_delay, run_while_recording=general.run_while_recording, event_bus=bus)
    loop = ScanLoop(
        config=general,
        scan_dirs=scan_dirs,
        reader=reader,
        reconciler=reconciler,
        gate=gate,
        pool=pool,
        event_bus=bus,
        stop_event=shutdown.stop_event,
    )

    try:
        loop.run()
    except Exception as e:
        logger.exception(f"Fatal error in scan loop: {e}")
        shutdown.finish()
        raise typer.Exit(code=1)

    shutdown.finish()
    logger.info(f"comwatch stopped: {stats.summary()}")


if __name__ == "__main__":
    app()
