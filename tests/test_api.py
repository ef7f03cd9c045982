"""Tests for the high-level create_manager() API."""

from pathlib import Path

import modulehub
from modulehub import create_manager
from modulehub.config import get_default_config, merge_configs


def make_config(tmp_path, **http):
    return merge_configs(get_default_config(), {
        'cache': {'root': str(tmp_path / 'modules')},
        'http': http,
    })


class TestCreateManager:
    """Tests for create_manager()."""

    def test_default_cache_root_under_config_base(self, tmp_path):
        manager = create_manager(
            "https://github.com/Magic-Loupe/PetStore.git",
            config=make_config(tmp_path),
        )
        assert manager.cache_root == tmp_path / 'modules' / 'github.com' / 'Magic-Loupe' / 'PetStore.git'

    def test_explicit_cache_root(self, tmp_path):
        manager = create_manager(
            "https://github.com/Magic-Loupe/PetStore.git",
            cache_root=str(tmp_path / 'here'),
            config=make_config(tmp_path),
        )
        assert manager.cache_root == Path(tmp_path / 'here')

    def test_http_settings_applied(self, tmp_path):
        config = make_config(
            tmp_path,
            timeout_seconds=3,
            download_timeout_seconds=45,
            chunk_size=1024,
            user_agent='host-app/2.0',
        )
        manager = create_manager("https://gitlab.com/Org/Repo.git", config=config)

        assert manager.source.timeout == 3
        assert manager.source.session.headers['User-Agent'] == 'host-app/2.0'
        assert manager.download_timeout == 45
        assert manager.chunk_size == 1024
        assert manager.source.forge.name == 'gitlab'

    def test_installed_version_and_relative_path(self, tmp_path):
        manager = create_manager(
            "https://github.com/Magic-Loupe/PetStore.git",
            installed_version="v0.4.0",
            relative_path="Sources/PetStore/jx/petstore",
            config=make_config(tmp_path),
        )
        assert manager.installed_version == modulehub.SemVer.parse("0.4.0")
        assert manager.local_dynamic_path(modulehub.Ref.tag("0.4.2")).parts[-4:] == \
            ("Sources", "PetStore", "jx", "petstore")

    def test_package_exports(self):
        assert modulehub.__version__
        assert issubclass(modulehub.NetworkError, modulehub.ModuleHubError)
