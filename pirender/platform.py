"""Window, GL context and input handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

WINDOW_TITLE = "Pi Renderer"


@dataclass
class InputState:
    """Which movement keys are held down."""

    up: bool = False
    down: bool = False
    left: bool = False
    right: bool = False


class Platform:
    """A fullscreen window with an OpenGL 3.3 context.

    ``running`` turns False once the window is asked to close.
    """

    def __init__(self, width: int, height: int) -> None:
        # Imported here: loading the windowing layer needs a display.
        import pyglet

        self.width = width
        self.height = height
        self.running = True
        self._pyglet = pyglet
        config = pyglet.gl.Config(
            double_buffer=True,
            depth_size=24,
            major_version=3,
            minor_version=3,
            forward_compatible=True,
        )
        try:
            self._window: Any = pyglet.window.Window(
                width=width,
                height=height,
                caption=WINDOW_TITLE,
                fullscreen=True,
                config=config,
            )
        except Exception as exc:
            raise RuntimeError(f"could not create window: {exc}") from exc
        self._keys = pyglet.window.key.KeyStateHandler()
        self._window.push_handlers(self._keys)
        self._window.push_handlers(on_close=self._on_close)

    def _on_close(self) -> bool:
        self.running = False
        # Keep the window open until shutdown() is called.
        return True

    def poll_events(self) -> InputState:
        """Process pending window events and return the movement keys held."""
        if self._window is None:
            return InputState()
        self._window.dispatch_events()
        key = self._pyglet.window.key
        return InputState(
            up=bool(self._keys[key.W]),
            down=bool(self._keys[key.S]),
            left=bool(self._keys[key.A]),
            right=bool(self._keys[key.D]),
        )

    def swap_buffers(self) -> None:
        """Show the frame that was just rendered."""
        if self._window is not None:
            self._window.flip()

    def shutdown(self) -> None:
        """Close the window and release its context; safe to call twice."""
        if self._window is not None:
            self._window.close()
            self._window = None

    def __enter__(self) -> Platform:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()