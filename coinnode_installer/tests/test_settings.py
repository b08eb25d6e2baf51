# Path and File Name : /home/coinnode/installer/coinnode_installer/tests/test_settings.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Tests for YAML settings overrides and environment lookups

import unittest
import tempfile
import shutil
import os
import yaml
from pathlib import Path
from unittest import mock
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from coinnode_installer.errors import ConfigurationError
from coinnode_installer.settings import SETTINGS_ENV, VERSION_ENV, load_settings


class TestLoadSettings(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="coinnode_settings_test_"))
        self.settings_file = self.test_dir / "installer.yaml"

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _write(self, data):
        with open(self.settings_file, 'w') as f:
            yaml.dump(data, f)

    def test_overrides_applied(self):
        self._write({
            'profile': {'version_pin': 'latest', 'p2p_port': '19333', 'address_prefixes': ['t', 'tltc1']},
            'paths': {'data_dir': '/srv/litecoin'},
        })
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings(self.settings_file)
        self.assertEqual(settings.profile.version_pin, 'latest')
        self.assertEqual(settings.profile.p2p_port, 19333)
        self.assertEqual(settings.profile.address_prefixes, ('t', 'tltc1'))
        self.assertEqual(settings.paths.data_dir, '/srv/litecoin')
        self.assertEqual(settings.paths.config_dir, '/etc/litecoin')
        self.assertEqual(settings.source, self.settings_file)

    def test_unknown_key_rejected(self):
        self._write({'profile': {'no_such_field': 1}})
        with self.assertRaises(ConfigurationError):
            load_settings(self.settings_file)

    def test_unknown_section_rejected(self):
        self._write({'network': {}})
        with self.assertRaises(ConfigurationError):
            load_settings(self.settings_file)

    def test_bad_integer_rejected(self):
        self._write({'profile': {'rpc_port': 'not-a-port'}})
        with self.assertRaises(ConfigurationError):
            load_settings(self.settings_file)

    def test_malformed_yaml_rejected(self):
        self.settings_file.write_text("profile: [unclosed\n")
        with self.assertRaises(ConfigurationError):
            load_settings(self.settings_file)

    def test_env_settings_path_must_exist(self):
        with mock.patch.dict(os.environ, {SETTINGS_ENV: str(self.test_dir / "missing.yaml")}, clear=True):
            with self.assertRaises(ConfigurationError):
                load_settings()

    def test_env_settings_path_used(self):
        self._write({'profile': {'rpc_port': 19332}})
        with mock.patch.dict(os.environ, {SETTINGS_ENV: str(self.settings_file)}, clear=True):
            settings = load_settings()
        self.assertEqual(settings.profile.rpc_port, 19332)

    def test_version_env_override(self):
        self.settings_file.write_text("")
        with mock.patch.dict(os.environ, {VERSION_ENV: 'v0.21.3'}, clear=True):
            settings = load_settings(self.settings_file)
        self.assertEqual(settings.profile.version_pin, 'v0.21.3')


if __name__ == '__main__':
    unittest.main()
