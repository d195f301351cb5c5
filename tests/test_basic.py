"""Tests for the outdated_stats package."""

import pytest


def test_package_import():
    """Test that the package can be imported."""
    import outdated_stats
    assert outdated_stats.__version__ == "0.1.0"


def test_cli_import():
    """Test that CLI module can be imported."""
    from outdated_stats.cli import main
    assert callable(main)


def test_public_api():
    """Test that the core functions are exported."""
    from outdated_stats import aggregate, aggregate_by_type, classify
    assert callable(aggregate)
    assert callable(aggregate_by_type)
    assert callable(classify)


def test_resolver_factory():
    """Test that resolvers can be created by package manager name."""
    from outdated_stats.resolvers import NpmOutdatedResolver, YarnOutdatedResolver, get_resolver

    assert isinstance(get_resolver("yarn"), YarnOutdatedResolver)
    assert isinstance(get_resolver("NPM", timeout=5), NpmOutdatedResolver)
    assert get_resolver("npm", timeout=5).timeout == 5

    with pytest.raises(ValueError):
        get_resolver("pnpm")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
