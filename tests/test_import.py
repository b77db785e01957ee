"""Verify package imports work correctly."""


def test_import_tagmask() -> None:
    """Test that tagmask can be imported and version matches pyproject."""
    import tomllib
    from pathlib import Path

    import tagmask

    with (Path(__file__).resolve().parent.parent / "pyproject.toml").open("rb") as f:
        expected = tomllib.load(f)["project"]["version"]
    assert tagmask.__version__ == expected


def test_version_format() -> None:
    """Test version string format."""
    from tagmask import __version__

    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)


def test_public_api() -> None:
    """Everything in __all__ is importable from the top-level package."""
    import tagmask

    for name in tagmask.__all__:
        assert hasattr(tagmask, name), name


def test_import_subpackages() -> None:
    from tagmask.grammar import GrammarBuilder, default_grammar
    from tagmask.lexer import Lexer
    from tagmask.substitution import restore_tags, substitute_tags

    assert Lexer is not None
    assert GrammarBuilder is not None
    assert callable(default_grammar)
    assert callable(substitute_tags) and callable(restore_tags)
