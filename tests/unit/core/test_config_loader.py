"""Unit tests for ConfigLoader."""

from pathlib import Path

import pytest

from screenlapse.core.config_loader import ConfigLoader
from screenlapse.core.errors import ConfigError


class TestConfigLoaderParsing:
    """Test untyped value guessing."""

    def test_parse_value_bool(self):
        for val in ['true', 'True', 'yes', 'on', '1']:
            assert ConfigLoader._parse_value(val) is True
        for val in ['false', 'FALSE', 'no', 'off', '0']:
            assert ConfigLoader._parse_value(val) is False

    def test_parse_value_none(self):
        for val in ['', 'none', 'None', 'null']:
            assert ConfigLoader._parse_value(val) is None

    def test_parse_value_numbers(self):
        assert ConfigLoader._parse_value('42') == 42
        assert ConfigLoader._parse_value('-10') == -10
        assert ConfigLoader._parse_value('2.5') == pytest.approx(2.5)

    def test_parse_value_string(self):
        assert ConfigLoader._parse_value('./captures') == './captures'


class TestConfigLoaderTypedParsing:

    def test_bool(self):
        assert ConfigLoader._parse_value_with_type('k', 'yes', bool) is True
        assert ConfigLoader._parse_value_with_type('k', 'off', bool) is False

    def test_bool_rejects_garbage(self):
        with pytest.raises(ConfigError, match="'compress'"):
            ConfigLoader._parse_value_with_type('compress', 'maybe', bool)

    def test_int(self):
        assert ConfigLoader._parse_value_with_type('k', '30', int) == 30
        assert ConfigLoader._parse_value_with_type('k', '0x10', int) == 16

    def test_int_rejects_float_text(self):
        with pytest.raises(ConfigError):
            ConfigLoader._parse_value_with_type('interval', '2.5', int)

    def test_float(self):
        assert ConfigLoader._parse_value_with_type('k', '0.25', float) == pytest.approx(0.25)

    def test_path(self):
        assert ConfigLoader._parse_value_with_type('k', '/tmp/x', Path) == Path('/tmp/x')

    def test_str(self):
        assert ConfigLoader._parse_value_with_type('k', 'desk', str) == 'desk'


class TestConfigLoaderLoad:

    def test_missing_file_returns_defaults(self, tmp_path):
        defaults = {'interval': 30}
        assert ConfigLoader.load(tmp_path / 'nope.conf', defaults) == defaults

    def test_missing_file_without_defaults(self, tmp_path):
        assert ConfigLoader.load(tmp_path / 'nope.conf') == {}

    def test_reads_typed_values(self, tmp_path):
        path = tmp_path / 'screenlapse.conf'
        path.write_text(
            "# capture settings\n"
            "interval = 10\n"
            "file-prefix = \"desk\"   # quoted\n"
            "compress = no\n"
            "\n"
            "not a setting\n"
        )
        defaults = {'interval': 30, 'file_prefix': 'screen', 'compress': True}

        config = ConfigLoader.load(path, defaults)

        assert config == {'interval': 10, 'file_prefix': 'desk', 'compress': False}

    def test_does_not_mutate_defaults(self, tmp_path):
        path = tmp_path / 'c.conf'
        path.write_text("interval = 5\n")
        defaults = {'interval': 30}

        ConfigLoader.load(path, defaults)

        assert defaults == {'interval': 30}

    def test_strict_ignores_unknown_keys(self, tmp_path):
        path = tmp_path / 'c.conf'
        path.write_text("interval = 5\ncolour = blue\n")

        config = ConfigLoader.load(path, {'interval': 30}, strict=True)

        assert config == {'interval': 5}

    def test_non_strict_keeps_unknown_keys(self, tmp_path):
        path = tmp_path / 'c.conf'
        path.write_text("colour = blue\n")
        assert ConfigLoader.load(path, {'interval': 30})['colour'] == 'blue'

    def test_bad_typed_value_raises(self, tmp_path):
        path = tmp_path / 'c.conf'
        path.write_text("interval = soon\n")
        with pytest.raises(ConfigError):
            ConfigLoader.load(path, {'interval': 30})

    def test_unreadable_path_raises(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigLoader.load(tmp_path, {'interval': 30})
