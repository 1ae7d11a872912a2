from nexusprover.messages import (
    COLOR_INFO,
    COLOR_RESET,
    COLOR_SUCCESS,
    MessageKind,
    SessionMessage,
    print_session_exit_success,
    print_session_shutdown,
    print_session_starting,
)


def test_info_render():
    msg = SessionMessage.info("hello")
    assert msg.kind is MessageKind.INFO
    assert msg.render() == f"{COLOR_INFO}[INFO]{COLOR_RESET} hello"


def test_success_render():
    msg = SessionMessage.success("done")
    assert msg.render() == f"{COLOR_SUCCESS}[SUCCESS]{COLOR_RESET} done"


def test_print_writes_render(capsys):
    msg = SessionMessage.info("x")
    msg.print()
    assert capsys.readouterr().out == msg.render() + "\n"


def test_session_starting(capsys):
    print_session_starting("headless", 42)
    out = capsys.readouterr().out
    assert "Starting headless mode with Node ID: 42" in out
    assert out.startswith(COLOR_INFO)


def test_session_shutdown(capsys):
    print_session_shutdown()
    assert capsys.readouterr().out.strip().endswith("Shutting down...")


def test_session_exit(capsys):
    print_session_exit_success()
    out = capsys.readouterr().out
    assert "[SUCCESS]" in out
    assert "Nexus CLI exited successfully" in out