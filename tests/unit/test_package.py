"""Test that the package is properly structured."""

from crosswatch import __version__


def test_version():
    """Test that version is defined."""
    assert __version__ == "0.1.0"


def test_package_import():
    """Test that all subpackages are importable."""
    import crosswatch.alerts
    import crosswatch.analysis
    import crosswatch.cli
    import crosswatch.core
    import crosswatch.data
    import crosswatch.db
    import crosswatch.models
    import crosswatch.scheduler

    # All imports should succeed
    assert crosswatch.models is not None
    assert crosswatch.analysis is not None
    assert crosswatch.alerts is not None
    assert crosswatch.data is not None
    assert crosswatch.db is not None
    assert crosswatch.core is not None
    assert crosswatch.scheduler is not None
    assert crosswatch.cli is not None
