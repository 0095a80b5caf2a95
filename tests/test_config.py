"""Tests for configuration loading."""

from alert_pipeline.config import DEFAULT_CONFIG, load_config, merge_config


class TestConfig:
    """Test configuration helpers."""

    def test_defaults(self):
        """Test loading without a file."""
        config = load_config()

        assert config == DEFAULT_CONFIG
        assert config is not DEFAULT_CONFIG

        config['notifications']['recipients'].append('x@example.com')
        assert DEFAULT_CONFIG['notifications']['recipients'] == []

    def test_merge_nested(self):
        """Test nested dictionaries merge and lists replace."""
        merged = merge_config(
            {'a': {'b': 1, 'c': 2}, 'tasks': [1, 2]},
            {'a': {'c': 3}, 'tasks': [9]}
        )
        assert merged == {'a': {'b': 1, 'c': 3}, 'tasks': [9]}

    def test_load_yaml(self, tmp_path):
        """Test YAML overrides merge over defaults."""
        path = tmp_path / 'config.yaml'
        path.write_text(
            "scoring_mode: baseline\n"
            "notifications:\n"
            "  batch_size: 10\n"
            "scheduler:\n"
            "  tasks: []\n"
        )

        config = load_config(str(path))

        assert config['scoring_mode'] == 'baseline'
        assert config['notifications']['batch_size'] == 10
        assert config['notifications']['send_delay'] == 1.0
        assert config['scheduler']['tasks'] == []
        assert config['scheduler']['strict_schedules'] is False

    def test_empty_yaml(self, tmp_path):
        """Test an empty file gives the defaults."""
        path = tmp_path / 'empty.yaml'
        path.write_text("")

        assert load_config(str(path)) == DEFAULT_CONFIG
