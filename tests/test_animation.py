import io
import signal
import sys
import threading

import pytest

import render_torus
from render_torus import (
    CURSOR_HOME,
    TerminalSizeError,
    install_shutdown_handlers,
    present_frame,
    run_animation,
)


class FakeSizeProvider:
    def __init__(self, width=12, height=6, shutdown=None, stop_on_call=None):
        self.width = width
        self.height = height
        self.shutdown = shutdown
        self.stop_on_call = stop_on_call
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls == self.stop_on_call:
            # Shutdown arrives while this frame is being produced
            self.shutdown.set()
        return self.width, self.height


def test_present_frame_homes_cursor_and_writes_rows():
    stream = io.StringIO()
    present_frame([["@", "#", " "], [" ", ".", " "]], stream)
    assert stream.getvalue() == CURSOR_HOME + "@# \n . \n"


def test_present_frame_defaults_to_stdout(capsys):
    present_frame([["~"]])
    assert capsys.readouterr().out == "\x1b[H~\n"


def test_shutdown_finishes_current_frame_then_stops():
    shutdown = threading.Event()
    provider = FakeSizeProvider(shutdown=shutdown, stop_on_call=3)
    presented = []
    sleeps = []

    frames = run_animation(shutdown, provider, presented.append, sleep=sleeps.append)

    assert frames == 3
    assert len(presented) == 3
    assert provider.calls == 3
    assert sleeps == [render_torus.FRAME_DELAY] * 2
    for frame in presented:
        assert len(frame) == 6
        assert all(len(row) == 12 for row in frame)


def test_shutdown_before_start_presents_one_frame():
    shutdown = threading.Event()
    shutdown.set()
    presented = []

    frames = run_animation(
        shutdown, FakeSizeProvider(), presented.append, sleep=lambda _: pytest.fail("slept")
    )

    assert frames == 1
    assert len(presented) == 1


def test_frames_follow_terminal_resizes():
    shutdown = threading.Event()
    sizes = iter([(10, 4), (7, 3)])
    presented = []

    def provider():
        size = next(sizes)
        if size == (7, 3):
            shutdown.set()
        return size

    run_animation(shutdown, provider, presented.append, sleep=lambda _: None)

    assert [(len(f[0]), len(f)) for f in presented] == [(10, 4), (7, 3)]


def test_rotation_advances_between_frames(monkeypatch):
    shutdown = threading.Event()
    angles = []

    def fake_render(a, b, width, height):
        angles.append((a, b))
        if len(angles) == 3:
            shutdown.set()
        return [[" "] * width for _ in range(height)]

    monkeypatch.setattr(render_torus, "render_frame", fake_render)
    run_animation(shutdown, FakeSizeProvider(), lambda frame: None, sleep=lambda _: None)

    assert angles[0] == (0.0, 0.0)
    assert angles[1] == pytest.approx((0.04, 0.02))
    assert angles[2] == pytest.approx((0.08, 0.04))


def test_size_failure_stops_the_loop():
    def provider():
        raise TerminalSizeError("no tty")

    presented = []
    with pytest.raises(TerminalSizeError):
        run_animation(threading.Event(), provider, presented.append)
    assert presented == []


def test_signal_handlers_set_shutdown():
    shutdown = threading.Event()
    previous = install_shutdown_handlers(shutdown)
    try:
        assert set(previous) == {signal.SIGINT, signal.SIGTERM}
        handler = signal.getsignal(signal.SIGTERM)
        assert signal.getsignal(signal.SIGINT) is handler

        handler(signal.SIGTERM, None)
        assert shutdown.is_set()
    finally:
        for signum, old_handler in previous.items():
            signal.signal(signum, old_handler)


def test_main_exits_on_terminal_size_failure(monkeypatch):
    def failing_run(shutdown):
        raise TerminalSizeError("not a terminal")

    monkeypatch.setattr(sys, "argv", ["render_torus.py"])
    monkeypatch.setattr(render_torus, "install_shutdown_handlers", lambda shutdown: {})
    monkeypatch.setattr(render_torus, "run_animation", failing_run)

    with pytest.raises(SystemExit) as excinfo:
        render_torus.main()
    assert excinfo.value.code == 1


def test_main_runs_animation(monkeypatch):
    calls = []

    def fake_run(shutdown):
        calls.append(shutdown)
        return 5

    monkeypatch.setattr(sys, "argv", ["render_torus.py", "-v"])
    monkeypatch.setattr(render_torus, "install_shutdown_handlers", lambda shutdown: {})
    monkeypatch.setattr(render_torus, "run_animation", fake_run)

    render_torus.main()

    assert len(calls) == 1
    assert isinstance(calls[0], threading.Event)
