import json
import os

import pytest

from apirouter import RouterConfig
from apirouter.utils.env_config import EnvConfig


@pytest.fixture
def clean_env(monkeypatch):
    for key in ('API_VERSION_PARAM', 'API_VERSION_HEADER', 'API_PARAM_ORDER', 'API_PASS_VERSION', 'API_PREFIX'):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_environment_wins_over_file(tmp_path, clean_env):
    config_file = tmp_path / 'apirouter.yaml'
    config_file.write_text('api:\n  version:\n    param: ver\n  prefix: /file\n')
    config = EnvConfig(str(config_file))
    assert config.get('API_VERSION_PARAM') == 'ver'
    assert config.get('API_PREFIX') == '/file'

    clean_env.setenv('API_PREFIX', '/env')
    assert config.get('API_PREFIX') == '/env'


def test_json_file(tmp_path, clean_env):
    config_file = tmp_path / 'apirouter.json'
    config_file.write_text(json.dumps({'API_PARAM_MAP': 'data'}))
    assert EnvConfig(str(config_file)).get('API_PARAM_MAP') == 'data'


def test_unsupported_file_is_logged_not_raised(tmp_path, clean_env):
    config_file = tmp_path / 'apirouter.ini'
    config_file.write_text('[api]\n')
    dumped = EnvConfig(str(config_file)).dump()
    assert not any(key.startswith('API') for key in dumped)


def test_typed_getters(clean_env):
    config = EnvConfig()
    clean_env.setenv('API_PASS_VERSION', 'no')
    assert config.get_bool('API_PASS_VERSION', True) is False
    clean_env.setenv('API_PARAM_ORDER', 'query, body')
    assert config.get_list('API_PARAM_ORDER', ['params']) == ['query', 'body']
    assert config.get_str('API_PREFIX', None) is None


def test_is_development(clean_env):
    config = EnvConfig()
    clean_env.setenv('ENV', 'Development')
    assert config.is_development()
    clean_env.setenv('ENV', 'production')
    assert not config.is_development()


def test_set_triggers_callbacks(clean_env):
    config = EnvConfig()
    changes = []
    config.register_callback('API_PARAM_MAP', lambda old, new: changes.append((old, new)))
    config.set('API_PARAM_MAP', 'data')
    config.set('API_PARAM_MAP', 'data')
    assert changes == [(None, 'data')]


def test_reload_picks_up_environment(clean_env):
    config = EnvConfig()
    changes = []
    config.register_callback('API_PREFIX', lambda old, new: changes.append(new))
    clean_env.setenv('API_PREFIX', '/reloaded')
    config.reload()
    assert changes == ['/reloaded']


def test_router_config_defaults_follow_environment(clean_env):
    clean_env.setenv('API_VERSION_PARAM', 'ver')
    clean_env.setenv('API_PARAM_ORDER', 'query,header')
    clean_env.setenv('API_PASS_VERSION', 'false')
    config = RouterConfig()
    assert config.param == 'ver'
    assert config.param_order == ['query', 'header']
    assert config.pass_version is False
    assert config.header == 'X-ApiVersion'


def test_router_config_defaults():
    config = RouterConfig()
    assert config.param_map == 'args'
    assert config.version_order == ['params', 'query', 'cookie', 'header']
    assert config.response_header == 'X-ApiVersion'


def test_dotenv_file_is_loaded_only_when_named(tmp_path, clean_env):
    dotenv_file = tmp_path / '.env'
    dotenv_file.write_text('API_PARAM_MAP=from_dotenv\n')
    clean_env.delenv('API_PARAM_MAP', raising=False)
    clean_env.chdir(tmp_path)
    try:
        assert EnvConfig().get('API_PARAM_MAP') is None
        assert EnvConfig(dotenv_path=str(dotenv_file)).get('API_PARAM_MAP') == 'from_dotenv'
    finally:
        os.environ.pop('API_PARAM_MAP', None)
