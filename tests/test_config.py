"""Tests for ContextVar-based configuration.

Validates thread isolation, context manager behavior, and that explicit
arguments win over the active config.
"""

from threading import Thread

import pytest

from tagmask import (
    TagmaskConfig,
    TokenType,
    config_context,
    get_config,
    lex,
    reset_config,
    set_config,
    substitute_tags,
)


class TestTagmaskConfigDataclass:
    """Test TagmaskConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        """Default config recognizes EL and uses line comments."""
        config = TagmaskConfig()
        assert config.el_enabled is True
        assert config.line_comments is True
        assert config.excerpt_length == 20

    def test_immutability(self) -> None:
        """Config is frozen and cannot be modified."""
        config = TagmaskConfig()
        with pytest.raises(AttributeError):
            config.el_enabled = False  # type: ignore[misc]

    def test_from_dict(self) -> None:
        config = TagmaskConfig.from_dict({"line_comments": False, "excerpt_length": 8})
        assert config.line_comments is False
        assert config.excerpt_length == 8
        assert config.el_enabled is True

    def test_from_dict_ignores_unknown_keys(self) -> None:
        """from_dict should silently ignore unknown keys."""
        config = TagmaskConfig.from_dict({"el_enabled": False, "print_width": 80})
        assert config == TagmaskConfig(el_enabled=False)

    def test_from_empty_dict(self) -> None:
        assert TagmaskConfig.from_dict({}) == TagmaskConfig()


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def teardown_method(self) -> None:
        """Reset config after each test."""
        reset_config()

    def test_default_config(self) -> None:
        assert get_config() == TagmaskConfig()

    def test_set_and_get(self) -> None:
        """set_config() changes the current config."""
        set_config(TagmaskConfig(el_enabled=False))
        assert get_config().el_enabled is False

    def test_set_config_affects_lexing(self) -> None:
        set_config(TagmaskConfig(el_enabled=False))
        assert [token.type for token in lex("${a}")] == [TokenType.TEMPLATE_TEXT]

    def test_reset_restores_default(self) -> None:
        """reset_config() restores default values."""
        set_config(TagmaskConfig(line_comments=False))
        reset_config()
        assert get_config().line_comments is True


class TestConfigContext:
    """Test config_context context manager."""

    def test_context_sets_config(self) -> None:
        """Context manager sets config within the block."""
        with config_context(TagmaskConfig(el_enabled=False)):
            assert get_config().el_enabled is False
        # Restored after context
        assert get_config().el_enabled is True

    def test_nested_contexts(self) -> None:
        """Nested context managers work correctly."""
        with config_context(TagmaskConfig(el_enabled=False)):
            with config_context(TagmaskConfig(line_comments=False)):
                assert get_config().el_enabled is True
                assert get_config().line_comments is False
            assert get_config().el_enabled is False
            assert get_config().line_comments is True

    def test_context_restores_on_exception(self) -> None:
        """Context manager restores config even if exception is raised."""
        with pytest.raises(ValueError, match="test"):
            with config_context(TagmaskConfig(el_enabled=False)):
                raise ValueError("test")

        assert get_config().el_enabled is True

    def test_explicit_config_wins(self) -> None:
        """A config passed to substitute_tags overrides the active one."""
        with config_context(TagmaskConfig(el_enabled=False)):
            _, tags = substitute_tags("${a}", config=TagmaskConfig())
        assert len(tags) == 1

    def test_explicit_config_does_not_leak(self) -> None:
        substitute_tags("${a}", config=TagmaskConfig(el_enabled=False))
        assert get_config().el_enabled is True


class TestThreadIsolation:
    """Test thread-local configuration isolation."""

    def test_thread_isolation(self) -> None:
        """Each thread sees its own config."""
        results: dict[int, int] = {}

        def worker(thread_id: int, config: TagmaskConfig) -> None:
            set_config(config)
            _, tags = substitute_tags("${a} <%= b %>")
            results[thread_id] = len(tags)

        threads = [
            Thread(target=worker, args=(0, TagmaskConfig(el_enabled=False))),
            Thread(target=worker, args=(1, TagmaskConfig(el_enabled=True))),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == {0: 1, 1: 2}

    def test_main_thread_unaffected(self) -> None:
        """Setting config in a worker thread leaves the main thread alone."""
        thread = Thread(target=set_config, args=(TagmaskConfig(el_enabled=False),))
        thread.start()
        thread.join()
        assert get_config().el_enabled is True
