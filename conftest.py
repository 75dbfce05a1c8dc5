import os
import sys

import pytest

# Ensure repo-local imports (e.g., `import game`) resolve without extra setup.
src_dir = os.path.abspath(os.path.dirname(__file__))
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "-G",
        "--gui",
        action="store_true",
        default=False,
        dest="run_gui",
        help="Run tests marked with @pytest.mark.gui (requires PySide6/display)",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if not config.getoption("run_gui"):
        skip_gui = pytest.mark.skip(reason="use -G/--gui to enable GUI tests")
        for item in items:
            if "gui" in item.keywords:
                item.add_marker(skip_gui)
