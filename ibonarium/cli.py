#!filepath: ibonarium/cli.py
import threading
import time
from typing import Optional

import typer
from rich import print
from rich.live import Live
from rich.markup import escape

from ibonarium import __version__
from ibonarium.config.app_config import AppConfig
from ibonarium.sinks.console import ConsoleUISink
from ibonarium.utils.errors import UserInputError
from ibonarium.utils.logger import Logging
from ibonarium.workflows.lab import build_lab

app = typer.Typer(help="Ibonarium layer coupling lab")


def _load_config(config: Optional[str], seed: Optional[int]) -> AppConfig:
    """UserInputError: bad path / YAML / field value / env override / seed"""
    cfg = AppConfig.load(path=config)
    if seed is not None:
        if seed < 0:
            raise UserInputError(f"seed must be >= 0 (got {seed})")
        cfg.evolver.seed = seed
    Logging.from_config(cfg.log)
    return cfg


def _reject(e: UserInputError):
    print(f"[red]{escape(str(e))}[/red]")
    raise typer.Exit(code=2)


@app.command()
def version():
    print(f"v{__version__}")


@app.command()
def run(
    duration: float = typer.Option(0.0, help="Seconds to run, 0 = until Ctrl+C"),
    seed: Optional[int] = typer.Option(None, help="Seed for the evolver random source"),
    config: Optional[str] = typer.Option(None, help="Path to a YAML config"),
    api_port: int = typer.Option(0, help="Serve the status API on this port (0 = off)"),
):
    """
    启动 lab：sync(30s) + evolve(100ms) + clock(1s)，console 实时显示
    """
    try:
        cfg = _load_config(config, seed)
        if duration < 0:
            raise UserInputError(f"duration must be >= 0 (got {duration})")
    except UserInputError as e:
        _reject(e)

    ui = ConsoleUISink()
    lab = build_lab(cfg, ui=ui)

    if api_port:
        from ibonarium.api.app import create_app

        api = create_app(lab)
        threading.Thread(
            target=api.run,
            kwargs={"host": "127.0.0.1", "port": api_port, "use_reloader": False},
            name="ibonarium-api",
            daemon=True,
        ).start()
        print(f"[blue]Status API on http://127.0.0.1:{api_port}[/blue]")

    deadline = time.monotonic() + duration if duration else None
    try:
        scheduler = lab.start()
        with Live(ui.renderable(), console=ui.console, refresh_per_second=4) as live:
            while not scheduler.wait(0.25):
                live.update(ui.renderable())
                if deadline is not None and time.monotonic() >= deadline:
                    break
    except KeyboardInterrupt:
        print("[yellow]Interrupted, shutting down...[/yellow]")
    finally:
        lab.stop()


@app.command()
def simulate(
    ticks: int = typer.Option(100, help="Number of evolver ticks"),
    seed: int = typer.Option(0, help="Seed for the evolver random source"),
    config: Optional[str] = typer.Option(None, help="Path to a YAML config"),
):
    """
    离线演化 N 个 tick（不访问网络），打印最终各层状态
    """
    try:
        cfg = _load_config(config, seed)
        if ticks < 1:
            raise UserInputError(f"ticks must be >= 1 (got {ticks})")
    except UserInputError as e:
        _reject(e)

    ui = ConsoleUISink()
    lab = build_lab(cfg, ui=ui, offline=True)
    try:
        for _ in range(ticks):
            lab.step()
        lab.show_clock()
        ui.print()
    finally:
        lab.stop()


@app.command()
def snapshot(
    config: Optional[str] = typer.Option(None, help="Path to a YAML config"),
):
    """
    同步一次外部数据并保存快照
    """
    try:
        cfg = _load_config(config, None)
    except UserInputError as e:
        _reject(e)

    lab = build_lab(cfg)
    try:
        report = lab.sync_once()
        blob = lab.save_snapshot()
    finally:
        lab.stop()

    color = "green" if report.ok else "yellow"
    print(f"[{color}]sync: {report.results}[/{color}]")
    print(f"saved {cfg.persistence.key} @ {blob['date']} -> {cfg.persistence.path}")


if __name__ == "__main__":
    app()

# python -m ibonarium.cli simulate --ticks 50 --seed 7
