import pytest

from zinja.builtin.registry import default_registry
from zinja.config import TemplateOptions
from zinja.template import Template
from zinja.types.environment import Environment


@pytest.fixture(autouse=True)
def _clear_whitespace_env(monkeypatch):
    # option defaults come from the process environment
    monkeypatch.delenv("ZINJA_TRIM_BLOCKS", raising=False)
    monkeypatch.delenv("ZINJA_LSTRIP_BLOCKS", raising=False)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def env(registry):
    """Fresh root scope with the built-in catalogue."""
    return Environment(registry=registry)


@pytest.fixture
def render():
    def _render(source, context=None, **options):
        return Template(source, TemplateOptions(**options)).render(context or {})
    return _render
