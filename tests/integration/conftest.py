import pytest


def pytest_collection_modifyitems(items):
    """Mark every test under integration/ so they can be selected with -m integration."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
