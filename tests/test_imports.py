"""
Test that all modules can be imported correctly
Run this after installing dependencies to validate the setup
"""


def test_core_imports():
    """Test core module imports"""
    from yak.config import settings
    from yak.exceptions import YakError
    from yak.models import Message
    from yak.logging import setup_logging

    assert settings.default_host
    assert issubclass(YakError, Exception)
    assert Message(type="X").length == 0
    assert callable(setup_logging)


def test_transport_imports():
    """Test transport module imports"""
    from yak.transport import Connection, connect, encode_frame
    from yak.transport.decoder import HeaderState, read_header
    from yak.transport.resolver import open_connection
    from yak.transport.stream_io import read_all, write_all

    assert encode_frame("X", b"ping") == b"X:4\nping\n"
    assert not Connection().is_open
    assert HeaderState.DONE.value == "done"


def test_public_api():
    """Test the names exported from the top-level package"""
    import yak

    for name in yak.__all__:
        assert hasattr(yak, name), name
