import io

import pytest
from rich.console import Console

from cliroute.execution_registry import ExecutionRegistry as er
from cliroute.processor import CliProcessor
from cliroute.themes import get_nord_theme


def make_console() -> Console:
    return Console(
        file=io.StringIO(), width=120, color_system=None, theme=get_nord_theme()
    )


class HelpRecorder:
    """Help renderer that records requests instead of printing them."""

    def __init__(self):
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)

    @property
    def last(self):
        return self.requests[-1] if self.requests else None


@pytest.fixture(autouse=True)
def clean_registry():
    er.clear()
    yield
    er.clear()


@pytest.fixture
def help_recorder():
    return HelpRecorder()


@pytest.fixture
def make_processor(help_recorder):
    def factory(handlers=(), **kwargs):
        kwargs.setdefault("help_renderer", help_recorder)
        kwargs.setdefault("console", make_console())
        kwargs.setdefault("error_console", make_console())
        return CliProcessor(handlers, **kwargs)

    return factory
