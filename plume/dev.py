"""Development mode for Plume.

Builds the site, serves it from a child process and rebuilds on change:
- Watches the plume source, the posts and the templates with watchdog.
- Coalesces bursts of changes into one rebuild after a short quiet period.
- Recompiles and reloads plume itself when its own source changes.
- Skips a rebuild that fires while another one is still running.

Watch handlers only enqueue ChangeEvents. A single coordinator loop owns
the debounce state and starts rebuild cycles, so the scheduling rules can
be driven by a fake clock in tests.

Key classes:
- DevLoop: Owns the dev-mode state and runs the coordinator loop.
- RebuildScheduler: Debounce timer keeping only the latest change.
- ChangeEvent: A file change that asks for a rebuild.
- _ChangeHandler: File system event handler feeding the event queue.
"""

from __future__ import annotations

import importlib
import os
import queue
import signal
import subprocess
import sys
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .build import BuildError
from .config import SiteConfig, load_config
from .utils import is_hidden

SOURCE_DIR = Path(__file__).resolve().parent
SOURCE_SUFFIXES = (".py",)
POST_SUFFIXES = (".md",)
TEMPLATE_SUFFIXES = (".html", ".css")

# Reloaded in dependency order after a successful recompile.
PIPELINE_MODULES = (
    "plume.utils",
    "plume.frontmatter",
    "plume.markdown",
    "plume.config",
    "plume.posts",
    "plume.templates",
    "plume.build",
)

_STOP = object()


class RecompileError(Exception):
    """Raised when the plume source fails to compile or reload."""


@dataclass(frozen=True)
class ChangeEvent:
    """A file change that asks for a rebuild.

    Attributes:
        path: File that changed.
        recompile: Whether plume must be recompiled before regenerating.
    """

    path: Path
    recompile: bool = False


class RebuildScheduler:
    """Debounce timer holding at most one pending ChangeEvent.

    Scheduling replaces any pending event and restarts the delay, so a burst
    of changes fires once, for the last change.

    Attributes:
        delay: Quiet period in seconds before a pending event is due.
    """

    def __init__(self, delay: float, clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self._clock = clock
        self._pending: ChangeEvent | None = None
        self._deadline = 0.0

    @property
    def pending(self) -> ChangeEvent | None:
        return self._pending

    def schedule(self, event: ChangeEvent) -> None:
        self._pending = event
        self._deadline = self._clock() + self.delay

    def cancel(self) -> None:
        self._pending = None

    def remaining(self) -> float | None:
        """Seconds until the pending event is due, or None if nothing is pending."""
        if self._pending is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def pop_due(self) -> ChangeEvent | None:
        """Return and clear the pending event once its delay has passed."""
        if self._pending is None or self._clock() < self._deadline:
            return None
        event, self._pending = self._pending, None
        return event


class DevLoop:
    """Development mode: initial build, preview server, watch and rebuild.

    Attributes:
        project_root: Root directory of the project.
        config: Site configuration.
        source_dir: Plume package directory watched for code changes.
        events: Queue of ChangeEvents fed by the watch handlers.
        scheduler: Debounce state.
        _rebuilding: True while a site regeneration is running.
        _server: Preview server child process.
        _observer: File system observer.
    """

    def __init__(
        self,
        project_root: Path,
        port: int | None = None,
        config: SiteConfig | None = None,
        builder: Callable[[Path, SiteConfig], Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
        source_dir: Path = SOURCE_DIR,
    ):
        """Initialize dev mode.

        Args:
            project_root: Root directory of the project.
            port: Optional override for the preview server port.
            config: Optional pre-loaded configuration.
            builder: Optional build callable, defaults to build.build_site.
            clock: Monotonic clock driving the debounce timer.
            source_dir: Directory holding the plume source.
        """
        self.project_root = project_root
        self.config = config or load_config(project_root, port=port)
        self.source_dir = source_dir
        self.events: queue.Queue = queue.Queue()
        self.scheduler = RebuildScheduler(self.config.debounce_seconds, clock)
        self._builder = builder
        self._lock = threading.Lock()
        self._rebuilding = False
        self._server: subprocess.Popen | None = None
        self._observer: Observer | None = None

    @property
    def url(self) -> str:
        return f"http://localhost:{self.config.port}"

    def start(self) -> None:
        """Run dev mode until interrupted.

        Raises:
            SystemExit: 1 if the initial build fails, 0 on SIGINT/SIGTERM.
        """
        self._print_banner()
        try:
            self._build()
        except BuildError as exc:
            print(f"Initial build failed: {exc}", file=sys.stderr)
            raise SystemExit(1) from None
        print("Initial build complete\n")

        self.start_server()
        self._start_watchers()
        self._install_signal_handlers()
        print("Dev mode active. Press Ctrl+C to stop.\n")
        try:
            self.run_forever()
        except KeyboardInterrupt:
            self.shutdown()

    def _print_banner(self) -> None:
        print("Starting dev mode...\n")
        print("Watching:")
        for root, suffixes, _, _ in self._watch_specs():
            print(f"  - {root} ({', '.join(suffixes)})")
        print()

    def start_server(self) -> None:
        """Spawn the preview server serving the output directory."""
        print("Starting server...")
        cmd = [
            sys.executable,
            "-m",
            "http.server",
            str(self.config.port),
            "--bind",
            "127.0.0.1",
            "--directory",
            str(self.config.output_dir),
        ]
        try:
            self._server = subprocess.Popen(cmd)
        except OSError as exc:
            print(f"Server failed to start: {exc}", file=sys.stderr)
            return
        print(f"Serving {self.config.output_dir} at {self.url}\n")

    def stop(self) -> None:
        """Terminate the preview server, stop watching and end the loop."""
        server = self._server
        if server is not None and server.poll() is None:
            server.terminate()
            try:
                server.wait(timeout=5)
            except subprocess.TimeoutExpired:
                server.kill()
        self._server = None
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        self.events.put(_STOP)

    def shutdown(self) -> None:
        print("\nShutting down...")
        self.stop()
        raise SystemExit(0)

    def _install_signal_handlers(self) -> None:  # pragma: no cover - integration path
        for signum in (signal.SIGINT, signal.SIGTERM):
            signal.signal(signum, lambda *_: self.shutdown())

    def _watch_specs(self) -> list[tuple[Path, tuple[str, ...], bool, frozenset[str]]]:
        changed = frozenset({EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED})
        return [
            (self.source_dir, SOURCE_SUFFIXES, True, changed),
            (
                self.config.posts_dir,
                POST_SUFFIXES,
                False,
                changed | {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED},
            ),
            (self.config.templates_dir, TEMPLATE_SUFFIXES, False, changed),
        ]

    def _start_watchers(self) -> None:
        observer = Observer()
        handlers = []
        for root, suffixes, recompile, event_types in self._watch_specs():
            if not root.is_dir():
                print(f"Not watching missing directory {root}", file=sys.stderr)
                continue
            handler = _ChangeHandler(self.events, root, suffixes, recompile, event_types)
            observer.schedule(handler, str(root), recursive=True)
            handlers.append(handler)
        observer.start()
        # Only changes after the observers are running count.
        for handler in handlers:
            handler.arm()
        self._observer = observer

    def run_forever(self) -> None:
        """Consume change events until stopped, firing due rebuilds."""
        while True:
            timeout = self.scheduler.remaining()
            try:
                event = self.events.get(timeout=1.0 if timeout is None else timeout)
            except queue.Empty:
                pass
            else:
                if event is _STOP:
                    return
                self.schedule_rebuild(event)
            self.poll()

    def schedule_rebuild(self, event: ChangeEvent) -> None:
        """Arm the debounce timer for a change, replacing any pending one."""
        self.scheduler.schedule(event)

    def poll(self) -> ChangeEvent | None:
        """Start a rebuild cycle if the pending change is due.

        Returns:
            The event whose cycle was started, or None.
        """
        event = self.scheduler.pop_due()
        if event is not None:
            self._dispatch(event)
        return event

    def _dispatch(self, event: ChangeEvent) -> None:
        threading.Thread(target=self.run_cycle, args=(event,), daemon=True).start()

    def run_cycle(self, event: ChangeEvent) -> bool:
        """Run one rebuild cycle: optional recompile, then regenerate.

        The cycle holds the in-flight flag for its whole length, so modules
        are never reloaded while another cycle is building.

        Args:
            event: The change that triggered the cycle.

        Returns:
            True if the site was regenerated.
        """
        print(f"Change detected: {event.path}")
        if not self._claim():
            return False
        try:
            if event.recompile:
                try:
                    self.recompile()
                except RecompileError as exc:
                    print(f"Recompilation failed:\n{exc}", file=sys.stderr)
                    return False
            return self._generate()
        finally:
            self._rebuilding = False

    def recompile(self) -> None:
        """Byte-compile the plume source and reload the build pipeline.

        Raises:
            RecompileError: If compilation or reloading fails.
        """
        print("Recompiling plume...")
        result = subprocess.run(
            [sys.executable, "-m", "compileall", "-q", str(self.source_dir)],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise RecompileError((result.stdout + result.stderr).strip())
        _reload_modules(PIPELINE_MODULES)
        print("Recompilation complete")

    def regenerate(self) -> bool:
        """Rebuild the site unless a rebuild is already running.

        Returns:
            True if the build ran and succeeded.
        """
        if not self._claim():
            return False
        try:
            return self._generate()
        finally:
            self._rebuilding = False

    def _claim(self) -> bool:
        with self._lock:
            if self._rebuilding:
                print("Build already in progress, skipping...")
                return False
            self._rebuilding = True
            return True

    def _generate(self) -> bool:
        try:
            print("Regenerating site...")
            self._build()
        except Exception as exc:
            # Reloaded modules define new exception classes, so catch broadly.
            print(f"Site regeneration failed: {exc}", file=sys.stderr)
            return False
        print("Site regenerated successfully\n")
        return True

    def _build(self) -> Any:
        if self._builder is not None:
            return self._builder(self.project_root, self.config)
        build_module = sys.modules.get("plume.build") or importlib.import_module(
            "plume.build"
        )
        return build_module.build_site(self.project_root, self.config)


def _reload_modules(names: Iterable[str]) -> None:
    for name in names:
        module = sys.modules.get(name)
        if module is None:
            continue
        try:
            importlib.reload(module)
        except Exception as exc:
            raise RecompileError(f"Reloading {name} failed: {exc}") from exc


class _ChangeHandler(FileSystemEventHandler):
    """Turns file system events under one root into ChangeEvents.

    Events are ignored until the handler is armed, for directories, for
    hidden files, for ``__pycache__`` and for files without a watched suffix.
    """

    def __init__(
        self,
        events: queue.Queue,
        root: Path,
        suffixes: tuple[str, ...],
        recompile: bool,
        event_types: Iterable[str],
    ):
        super().__init__()
        self.events = events
        self.root = root
        self.suffixes = suffixes
        self.recompile = recompile
        self.event_types = frozenset(event_types)
        self._armed = False

    def arm(self) -> None:
        self._armed = True

    def on_any_event(self, event):
        if not self._armed or event.is_directory:
            return
        if event.event_type not in self.event_types:
            return
        candidates = [event.src_path]
        if event.event_type == EVENT_TYPE_MOVED:
            # A rename away from a watched suffix removes the file.
            dest = getattr(event, "dest_path", "")
            if dest:
                candidates.insert(0, dest)
        for raw in candidates:
            path = Path(os.fsdecode(raw))
            if self._watches(path):
                self.events.put(ChangeEvent(path, self.recompile))
                return

    def _watches(self, path: Path) -> bool:
        if not path.name.endswith(self.suffixes):
            return False
        return not (is_hidden(path, self.root) or "__pycache__" in path.parts)
