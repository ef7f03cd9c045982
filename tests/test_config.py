"""
Unit tests for modulehub.config module
"""
import unittest
import tempfile
import os
import shutil
import json
import logging
from pathlib import Path
from unittest.mock import patch

from modulehub.config import (
    load_config,
    save_config,
    get_config_path,
    get_default_config,
    get_cache_base,
    configure_logging,
    merge_configs,
)


class TestConfigManagement(unittest.TestCase):
    """Test configuration management functionality"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.original_home = os.environ.get('HOME')
        os.environ['HOME'] = self.temp_dir
        self.config_dir = Path(self.temp_dir) / '.modulehub'

    def tearDown(self):
        """Clean up test environment"""
        if self.original_home:
            os.environ['HOME'] = self.original_home
        else:
            del os.environ['HOME']
        shutil.rmtree(self.temp_dir)

    def test_get_default_config(self):
        """Test default configuration structure"""
        config = get_default_config()

        self.assertIn('cache', config)
        self.assertIn('http', config)
        self.assertIn('logging', config)

        self.assertEqual(config['http']['timeout_seconds'], 30)
        self.assertEqual(config['http']['chunk_size'], 65536)
        self.assertEqual(config['logging']['level'], 'INFO')
        self.assertEqual(config['cache']['root'], str(self.config_dir / 'modules'))

    def test_load_config_no_file(self):
        """Test loading config when no file exists"""
        config = load_config()
        self.assertEqual(config['http'], get_default_config()['http'])

    def test_load_config_json_file(self):
        """Test loading config from JSON file"""
        self.config_dir.mkdir()
        with open(self.config_dir / 'config.json', 'w') as f:
            json.dump({'http': {'timeout_seconds': 5}, 'logging': {'level': 'DEBUG'}}, f)

        config = load_config()

        self.assertEqual(config['http']['timeout_seconds'], 5)
        self.assertEqual(config['logging']['level'], 'DEBUG')
        # untouched keys keep their defaults
        self.assertEqual(config['http']['chunk_size'], 65536)

    def test_load_config_toml_file(self):
        """Test loading config from TOML file"""
        self.config_dir.mkdir()
        (self.config_dir / 'config.toml').write_text(
            '[cache]\nroot = "/srv/modules"\n\n[logging]\nlevel = "WARNING"\n'
        )

        config = load_config()

        self.assertEqual(config['cache']['root'], '/srv/modules')
        self.assertEqual(config['logging']['level'], 'WARNING')

    def test_load_config_yaml_file(self):
        """Test loading config from YAML file"""
        self.config_dir.mkdir()
        (self.config_dir / 'config.yaml').write_text(
            'http:\n  user_agent: host-app/1.0\n  download_timeout_seconds: 300\n'
        )

        config = load_config()

        self.assertEqual(config['http']['user_agent'], 'host-app/1.0')
        self.assertEqual(config['http']['download_timeout_seconds'], 300)

    def test_load_config_invalid_file(self):
        """Invalid files are logged and defaults are used"""
        self.config_dir.mkdir()
        (self.config_dir / 'config.json').write_text('{"http": {"timeout_seconds": ')

        with self.assertLogs('modulehub', level='ERROR'):
            config = load_config()

        self.assertEqual(config['http']['timeout_seconds'], 30)

    def test_explicit_config_path(self):
        """An explicit path wins over the default location"""
        path = Path(self.temp_dir) / 'other.json'
        path.write_text(json.dumps({'http': {'timeout_seconds': 9}}))

        config = load_config(path)
        self.assertEqual(config['http']['timeout_seconds'], 9)

    def test_config_env_var_path(self):
        """MODULEHUB_CONFIG points at a config file"""
        path = Path(self.temp_dir) / 'env-config.json'
        path.write_text(json.dumps({'logging': {'level': 'ERROR'}}))

        with patch.dict(os.environ, {'MODULEHUB_CONFIG': str(path)}):
            self.assertEqual(get_config_path(), path)
            config = load_config()

        self.assertEqual(config['logging']['level'], 'ERROR')

    def test_default_config_path(self):
        self.assertEqual(get_config_path(), self.config_dir / 'config.json')

    @patch.dict(os.environ, {'MODULEHUB_HTTP_TIMEOUT_SECONDS': '60'})
    def test_environment_override(self):
        """Test environment variable override"""
        config = load_config()
        self.assertEqual(config['http']['timeout_seconds'], 60)

    @patch.dict(os.environ, {'MODULEHUB_CACHE_ROOT': '/tmp/module-cache'})
    def test_environment_override_string(self):
        config = load_config()
        self.assertEqual(config['cache']['root'], '/tmp/module-cache')
        self.assertEqual(get_cache_base(config), Path('/tmp/module-cache'))

    @patch.dict(os.environ, {'MODULEHUB_HTTP_NO_SUCH_KEY': 'x'})
    def test_unknown_environment_key_ignored(self):
        config = load_config()
        self.assertNotIn('no_such_key', config['http'])

    def test_save_and_load_roundtrip_toml(self):
        """Test saving config as TOML and reading it back"""
        path = Path(self.temp_dir) / 'saved' / 'config.toml'
        config = get_default_config()
        config['http']['timeout_seconds'] = 12

        save_config(config, path)

        self.assertTrue(path.exists())
        self.assertEqual(load_config(path)['http']['timeout_seconds'], 12)

    def test_save_config_json_default(self):
        path = Path(self.temp_dir) / 'config.json'
        save_config({'logging': {'level': 'DEBUG'}}, path)
        self.assertEqual(json.loads(path.read_text()), {'logging': {'level': 'DEBUG'}})

    def test_cache_base_expands_home(self):
        config = {'cache': {'root': '~/modules'}}
        self.assertEqual(get_cache_base(config), Path(self.temp_dir) / 'modules')


class TestMergeConfigs(unittest.TestCase):
    """Test recursive config merging"""

    def test_nested_merge(self):
        base = {'http': {'timeout_seconds': 30, 'chunk_size': 10}, 'logging': {'level': 'INFO'}}
        override = {'http': {'timeout_seconds': 5}}

        merged = merge_configs(base, override)

        self.assertEqual(merged['http'], {'timeout_seconds': 5, 'chunk_size': 10})
        self.assertEqual(merged['logging'], {'level': 'INFO'})

    def test_new_keys_added(self):
        merged = merge_configs({'a': 1}, {'b': {'c': 2}})
        self.assertEqual(merged, {'a': 1, 'b': {'c': 2}})


class TestConfigureLogging(unittest.TestCase):
    """Test log level selection"""

    def setUp(self):
        self.logger = logging.getLogger('modulehub')
        self.original_level = self.logger.level

    def tearDown(self):
        self.logger.setLevel(self.original_level)

    def test_level_from_config(self):
        configure_logging({'logging': {'level': 'warning'}})
        self.assertEqual(self.logger.level, logging.WARNING)

    def test_verbose_wins(self):
        configure_logging({'logging': {'level': 'ERROR'}}, verbose=True)
        self.assertEqual(self.logger.level, logging.DEBUG)

    def test_unknown_level_falls_back(self):
        configure_logging({'logging': {'level': 'chatty'}})
        self.assertEqual(self.logger.level, logging.INFO)


if __name__ == '__main__':
    unittest.main()
