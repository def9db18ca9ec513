import logging

from apirouter.models.endpoint_config_model import EndpointConfig
from apirouter.services.endpoint_registry import EndpointRegistry, join_path
from apirouter.utils.param_util import parse_param


def _config(**params):
    return EndpointConfig(
        param_order=['query'],
        params={name: parse_param(spec) for name, spec in params.items()},
    )


def test_join_path():
    assert join_path(None, '/users') == '/users'
    assert join_path('/api/', '/users') == '/api/users'
    assert join_path('/api', 'users') == '/api/users'


def test_unversion_strips_generated_prefix():
    registry = EndpointRegistry(param='v')
    assert registry.unversion('/v{v}/users') == '/users'
    assert registry.unversion('/v:v/users') == '/users'
    assert registry.unversion('/v{v}') == '/'
    assert registry.unversion('/videos') == '/videos'


def test_add_stamps_versions_and_uppercases_method():
    registry = EndpointRegistry()
    config = registry.add('/v{v}/test', 'get', [1, '^2'], _config(a='integer'))
    assert [spec.label() for spec in config.versions] == ['1', '^2']
    assert registry.get('/test', 'GET', '1') is config
    assert registry.get('/test', 'GET', '2.1') is config


def test_get_selects_bucket_by_version():
    registry = EndpointRegistry()
    first = registry.add('/test', 'GET', [1], _config(a='integer'))
    second = registry.add('/test', 'GET', [2], _config(b='string'))
    assert registry.get('/test', 'GET', '1') is first
    assert registry.get('/test', 'GET', '2') is second
    assert registry.get('/test', 'GET', '3') is None
    assert registry.get('/other', 'GET', '1') is None


def test_unversioned_bucket_accepts_any_version():
    registry = EndpointRegistry()
    config = registry.add('/open', 'POST', None, _config())
    assert registry.get('/open', 'POST') is config
    assert registry.get('/open', 'POST', '9') is config


def test_head_falls_back_to_get_and_all():
    registry = EndpointRegistry()
    get_config = registry.add('/a', 'GET', None, _config())
    all_config = registry.add('/b', 'ALL', None, _config())
    assert registry.get('/a', 'HEAD') is get_config
    assert registry.get('/b', 'DELETE') is all_config


def test_overlapping_buckets_warn_and_first_registration_wins(caplog):
    registry = EndpointRegistry()
    first = registry.add('/test', 'GET', ['^1'], _config())
    with caplog.at_level(logging.WARNING, logger='apirouter.router'):
        registry.add('/test', 'GET', [1], _config())
    assert any('overlaps' in record.getMessage() for record in caplog.records)
    assert registry.get('/test', 'GET', '1') is first


def test_list_returns_one_bucket_with_prefix():
    registry = EndpointRegistry(prefix='/api')
    unversioned = registry.add('/status', 'GET', None, _config())
    registry.add('/users', 'GET', [1], _config())
    assert registry.list() == {'/api/status': {'GET': unversioned}}
    assert list(registry.list(version=1)) == ['/api/users']
    assert list(registry.list(prefix='/x', version=1)) == ['/x/users']


def test_describe_summarizes_every_version():
    registry = EndpointRegistry()
    registry.add('/test', 'GET', [1], _config(var1='integer'))
    registry.add('/test', 'GET', [2], _config(var2='string(abc)'))
    registry.add('/status', 'GET', None, EndpointConfig(param_order=['query'], description='health'))
    api_map = registry.describe('/api')

    v1, v2 = api_map['/api/test']['GET']
    assert v1['versions'] == [1]
    assert v1['params'] == {'var1': {'type': 'integer', 'array': False, 'required': True}}
    assert v2['versions'] == [2]
    assert v2['params']['var2']['default'] == 'abc'

    status = api_map['/api/status']['GET']
    assert status['description'] == 'health'
    assert status['versions'] == [0]


def test_len_counts_path_method_pairs():
    registry = EndpointRegistry()
    registry.add('/a', 'GET', [1], _config())
    registry.add('/a', 'GET', [2], _config())
    registry.add('/a', 'POST', None, _config())
    assert len(registry) == 2
