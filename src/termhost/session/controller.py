"""Terminal session controller.

TerminalSession ties one process record to a display surface and its
addons. It loads the capability bundles, constructs the widget once,
runs the lifecycle gate on every relevant event (container mounted,
record changed, bundles loaded), starts the session loop exactly once,
and tears everything down when the record is flagged as closing.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from termhost.config.settings import DisplayConfig, SessionConfig
from termhost.display.base import DisplaySurface
from termhost.display.container import Region, RegionEvent, ResizeObserver
from termhost.display.fit import FitAddon
from termhost.domain.models import LifecycleState, ProcessRecord, SessionStatus
from termhost.editor.line_editor import LineEditor
from termhost.errors import SessionError
from termhost.session.autocomplete import AutocompleteProvider
from termhost.session.clipboard import Clipboard, ContextMenuHandler, UnavailableClipboard
from termhost.session.cwd import WorkingDirectory
from termhost.session.launch import initial_directory, resolve_launch_target
from termhost.session.lifecycle import GateConditions, LifecycleGate
from termhost.session.loader import AddonLoader
from termhost.session.loop import SessionLoop
from termhost.system.extensions import ExtensionRegistry
from termhost.system.filesystem import FileSystem
from termhost.system.interpreter import InterpreterContext, InterpreterFactory
from termhost.system.processes import ProcessTable

logger = logging.getLogger(__name__)

TERMINAL = "Terminal"
FIT_ADDON = "FitAddon"
LINE_EDITOR = "LineEditor"


class TerminalSession:
    """Controller for one terminal session.

    Example usage::

        session = TerminalSession(
            "term-1",
            processes=processes,
            filesystem=MemoryFileSystem(),
            interpreter_factory=BasicInterpreter,
            extensions=ExtensionRegistry({".txt": "edit"}),
            loader=AddonLoader(),
        )
        await session.start()
        session.mount(create_window(800, 480))
        ...
        processes.close("term-1")
        await session.wait_closed()
    """

    def __init__(
        self,
        process_id: str,
        *,
        processes: ProcessTable,
        filesystem: FileSystem,
        interpreter_factory: InterpreterFactory,
        extensions: ExtensionRegistry,
        loader: AddonLoader,
        clipboard: Clipboard | None = None,
        display_config: DisplayConfig | None = None,
        session_config: SessionConfig | None = None,
        widget_options: dict[str, Any] | None = None,
        on_loading_finished: Callable[[str], None] | None = None,
    ) -> None:
        self._process_id = process_id
        self._processes = processes
        self._record: ProcessRecord = processes.get(process_id)
        self._filesystem = filesystem
        self._interpreter_factory = interpreter_factory
        self._extensions = extensions
        self._loader = loader
        self._clipboard = clipboard or UnavailableClipboard()
        self._display_config = display_config or DisplayConfig()
        self._session_config = session_config or SessionConfig()
        self._widget_options = dict(widget_options or {})
        self._on_loading_finished = on_loading_finished

        self._cwd = WorkingDirectory(initial_directory(self._record.url, self._session_config.home))
        self._initial_command: str | None = None
        self._loading = True
        self._prompted = False

        self._container: Region | None = None
        self._display: DisplaySurface | None = None
        self._editor: LineEditor | None = None
        self._fit: FitAddon | None = None
        self._observer: ResizeObserver | None = None
        self._context_menu: ContextMenuHandler | None = None
        self._autocomplete: AutocompleteProvider | None = None
        self._loop: SessionLoop | None = None
        self._loop_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()
        self._libraries: list[str] = []

        self._gate = LifecycleGate(self._initialize, self._dispose)
        self._evaluating = False
        self._dirty = False
        self._closed = asyncio.Event()

        self._unsubscribe_record = processes.subscribe(process_id, self._on_record_changed)
        self._unsubscribe_foreground = processes.subscribe_foreground(self._on_foreground_changed)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def process_id(self) -> str:
        return self._process_id

    @property
    def state(self) -> LifecycleState:
        return self._gate.state

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def prompted(self) -> bool:
        return self._prompted

    @property
    def cwd(self) -> str:
        return self._cwd.path

    @property
    def initial_command(self) -> str | None:
        """The launch command still waiting for the loop to start."""
        return self._initial_command

    @property
    def display(self) -> DisplaySurface | None:
        return self._display

    @property
    def editor(self) -> LineEditor | None:
        return self._editor

    @property
    def fit_addon(self) -> FitAddon | None:
        return self._fit

    @property
    def container(self) -> Region | None:
        return self._container

    @property
    def loop(self) -> SessionLoop | None:
        return self._loop

    @property
    def autocomplete(self) -> AutocompleteProvider | None:
        return self._autocomplete

    @property
    def initialize_count(self) -> int:
        return self._gate.initialize_count

    @property
    def dispose_count(self) -> int:
        return self._gate.dispose_count

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load the session's capability bundles and evaluate the gate."""
        await self.reload_libraries()

    async def reload_libraries(self) -> None:
        """Load the bundles named by the process record, then construct the widget."""
        libraries = list(self._record.libraries or self._session_config.libraries)
        self._libraries = libraries
        await self._loader.load(libraries)
        self._construct_widget()
        self.evaluate()

    def mount(self, container: Region) -> None:
        """Attach the container region the widget will be opened into."""
        if self._container is not None and self._container is not container:
            raise SessionError("Session is already mounted", process_id=self._process_id)
        self._container = container
        self.evaluate()

    def evaluate(self) -> LifecycleState:
        """Re-run the launch target, gate and loop checks.

        Calls made while an evaluation is running (for example from a
        record notification it triggered) are folded into one more pass.
        """
        if self._evaluating:
            self._dirty = True
            return self._gate.state

        self._evaluating = True
        try:
            while True:
                self._dirty = False
                self._evaluate_once()
                if not self._dirty:
                    break
        finally:
            self._evaluating = False
        return self._gate.state

    def _evaluate_once(self) -> None:
        record = self._record
        if record.url:
            if self._gate.state is LifecycleState.DISPOSED:
                self._discard_launch_target(record.url)
            else:
                self._handle_launch_target(record.url)

        registry = self._loader.registry
        container = self._container
        conditions = GateConditions(
            widget_ready=self._display is not None,
            container_ready=container is not None and container.mounted,
            editor_available=LINE_EDITOR in registry,
            fit_available=FIT_ADDON in registry,
            loading=self._loading,
            closing=record.closing,
        )
        state = self._gate.evaluate(conditions)

        if state is LifecycleState.DISPOSED:
            self._unsubscribe_record()
            self._unsubscribe_foreground()
            self._closed.set()
            return
        self._start_loop()

    def _on_record_changed(self, record: ProcessRecord) -> None:
        self._record = record
        libraries = list(record.libraries or self._session_config.libraries)
        if not record.closing and libraries != self._libraries:
            self._spawn(self.reload_libraries())
        self.evaluate()

    def _on_foreground_changed(self, process_id: str | None) -> None:
        if process_id == self._process_id:
            self.activate()

    def _handle_launch_target(self, target: str) -> None:
        outcome = resolve_launch_target(target, self._editor, self._extensions)
        if outcome.initial_command:
            self._initial_command = outcome.initial_command
            logger.info("Session %s will start with %r", self._process_id, outcome.initial_command)
        self._processes.set_url(self._process_id, "")

    def _discard_launch_target(self, target: str) -> None:
        logger.debug("Session %s is disposed, dropping target %r", self._process_id, target)
        if self._process_id in self._processes:
            self._processes.set_url(self._process_id, "")

    # ------------------------------------------------------------------
    # Initialization and teardown
    # ------------------------------------------------------------------

    def _construct_widget(self) -> None:
        if self._display is not None or self._record.closing:
            return
        terminal_class = self._loader.registry.get(TERMINAL)
        if terminal_class is None:
            logger.debug("Session %s waiting for the %s capability", self._process_id, TERMINAL)
            return
        self._display = terminal_class(self._display_config, **self._widget_options)
        logger.debug("Session %s constructed %s", self._process_id, terminal_class.__name__)

    def _initialize(self) -> None:
        registry = self._loader.registry
        display = self._display
        container = self._container
        if display is None or container is None:
            raise SessionError(
                "Cannot initialize without a widget and a container",
                process_id=self._process_id,
            )

        editor = registry.get(LINE_EDITOR)(history_size=self._session_config.history_size)
        fit = registry.get(FIT_ADDON)()
        display.load_addon(editor)
        display.load_addon(fit)
        display.open(container)
        fit.fit()
        self._editor = editor
        self._fit = fit

        container.style.update(overflow="auto", height="100%")
        self._context_menu = ContextMenuHandler(display, editor, self._clipboard)
        container.add_event_listener("contextmenu", self._context_menu)
        section = container.closest("section")
        if section is not None:
            section.add_event_listener("focus", self._forward_focus)

        self._observer = ResizeObserver(self._on_container_resize)
        self._observer.observe(container)

        self._loading = False
        logger.info(
            "Session %s initialized (%dx%d)", self._process_id, display.cols, display.rows
        )
        if self._on_loading_finished is not None:
            self._on_loading_finished(self._process_id)

    def _start_loop(self) -> None:
        display = self._display
        editor = self._editor
        if self._prompted or display is None or editor is None or display.is_disposed:
            return
        self._prompted = True

        interpreter = self._interpreter_factory(
            InterpreterContext(
                process_id=self._process_id,
                cwd=self._cwd,
                display=display,
                editor=editor,
                filesystem=self._filesystem,
                home=self._session_config.home,
            )
        )
        self._autocomplete = AutocompleteProvider(editor, interpreter.commands)
        self._loop = SessionLoop(
            editor,
            interpreter,
            self._cwd.view,
            self._session_config.username,
            self._session_config.hostname,
            after_execute=self.refresh_autocomplete,
        )
        command, self._initial_command = self._initial_command, None
        self._loop_task = self._spawn(self._loop.run(command))

        display.focus()
        if self._fit is not None:
            self._fit.fit()
        self.refresh_autocomplete()

    def _dispose(self) -> None:
        if self._loop is not None:
            self._loop.stop()
        if self._loop_task is not None and not self._loop_task.done():
            # A pending read ends on stop(); an execution has to be abandoned
            if self._loop is None or self._loop.is_executing:
                self._loop_task.cancel()
        for task in list(self._tasks):
            if task is not self._loop_task:
                task.cancel()

        if self._observer is not None:
            self._observer.disconnect()
        if self._container is not None:
            if self._context_menu is not None:
                self._container.remove_event_listener("contextmenu", self._context_menu)
            section = self._container.closest("section")
            if section is not None:
                section.remove_event_listener("focus", self._forward_focus)
        if self._autocomplete is not None:
            self._autocomplete.detach()

        if self._display is not None:
            self._display.dispose()
        logger.info("Session %s disposed", self._process_id)

    async def wait_closed(self) -> None:
        """Wait until the session is disposed and its tasks have finished."""
        await self._closed.wait()
        pending = [task for task in self._tasks if not task.done()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def activate(self) -> bool:
        """Focus the widget if it is ready. Returns whether focus was given."""
        display = self._display
        if self._loading or display is None or not display.is_open:
            return False
        display.focus()
        return True

    def send_input(self, data: str) -> None:
        """Feed keystroke data as if typed into the widget."""
        display = self._display
        if display is None or not display.is_open:
            raise SessionError("Session is not ready for input", process_id=self._process_id)
        display.input(data)

    def resize(self, width: int, height: int) -> None:
        """Resize the container region; the widget is refitted on change."""
        if self._container is None:
            raise SessionError("Session is not mounted", process_id=self._process_id)
        self._container.resize(width, height)

    async def open_context_menu(self) -> None:
        if self._container is None:
            raise SessionError("Session is not mounted", process_id=self._process_id)
        await self._container.dispatch(RegionEvent("contextmenu"))

    def refresh_autocomplete(self) -> None:
        """List the working directory in the background and feed autocomplete."""
        if self._autocomplete is None:
            return
        self._spawn(self._autocomplete.refresh(self._filesystem, self._cwd.view))

    def status(self) -> SessionStatus:
        display = self._display
        return SessionStatus(
            process_id=self._process_id,
            state=self._gate.state,
            loading=self._loading,
            prompted=self._prompted,
            cwd=self._cwd.path,
            cols=display.cols if display is not None else 0,
            rows=display.rows if display is not None else 0,
            reading=self._editor.is_reading if self._editor is not None else False,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _forward_focus(self, event: RegionEvent) -> None:
        if self._display is not None and self._display.is_open:
            self._display.focus()

    def _on_container_resize(self, region: Region) -> None:
        if self._fit is not None:
            self._fit.fit()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Session %s task failed: %s", self._process_id, error)
