import asyncio
import importlib
import inspect
import logging
import sys

import pytest


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    """Run async test functions without requiring external plugins."""
    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            sig = inspect.signature(test_function)
            filtered_args = {k: v for k, v in pyfuncitem.funcargs.items() if k in sig.parameters}
            loop.run_until_complete(test_function(**filtered_args))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
        return True
    return None


def pytest_configure(config):
    """Register markers for pytest."""
    config.addinivalue_line("markers", "asyncio: mark async tests")
    config.addinivalue_line("markers", "integration: mark test as integration test")


@pytest.fixture
def import_root(tmp_path, monkeypatch):
    """A temporary directory on ``sys.path``; modules imported from it are dropped afterwards."""
    monkeypatch.syspath_prepend(str(tmp_path))
    before = set(sys.modules)
    yield tmp_path
    for name in set(sys.modules) - before:
        top = name.split(".", 1)[0]
        if (tmp_path / top).exists() or (tmp_path / f"{top}.py").exists():
            del sys.modules[name]


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """The CLI attaches a stderr handler to ``actiongen``; keep tests isolated from it."""
    package_logger = logging.getLogger("actiongen")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in package_logger.handlers[:]:
        if handler not in handlers:
            package_logger.removeHandler(handler)
    package_logger.setLevel(level)


@pytest.fixture
def write_tree(import_root):
    """Write ``{relative_path: text}`` under the import root and return the root."""

    def _write(files):
        for relative, text in files.items():
            path = import_root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        importlib.invalidate_caches()
        return import_root

    return _write
