"""Shared test values for Repacker unit tests"""
from datetime import datetime, timedelta, timezone
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig
from elasticsearch8 import BadRequestError, NotFoundError
from elasticsearch8.exceptions import ApiError

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
named_index = 'logs-000001'
named_alias = 'logs'
target_index = 'repacked-logs-000001'
policy_name = 'logs-policy'
task_id = 'oTUltX4IQMOUUVeiohTt8A:12345'
analysis = {'analyzer': {'lower': {'type': 'custom', 'tokenizer': 'keyword', 'filter': ['lowercase']}}}
mappings = {'properties': {'message': {'type': 'text'}, 'secret': {'type': 'keyword'}}}
routed_mappings = {'_routing': {'required': True}, 'properties': {'message': {'type': 'text'}}}


def epoch_millis(when):
    return str(int(when.timestamp() * 1000))


def meta(status):
    return ApiResponseMeta(
        status=status,
        http_version='1.1',
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig('http', 'localhost', 9200),
    )


def not_found(body=None):
    return NotFoundError('simulated error', meta(404), body or {'error': {'type': 'index_not_found_exception'}})


def bad_request(error_type='illegal_argument_exception'):
    return BadRequestError('simulated error', meta(400), {'error': {'type': error_type}, 'status': 400})


def server_error():
    return ApiError('simulated error', meta(503), {'error': {'type': 'unavailable'}})


def index_response(
    name=named_index,
    created=NOW - timedelta(minutes=47),
    policy=policy_name,
    maps=None,
    refresh='5s',
    idx_analysis=None,
):
    settings = {
        'number_of_shards': '12',
        'number_of_replicas': '1',
        'creation_date': epoch_millis(created),
        'provided_name': name,
    }
    if policy:
        settings['lifecycle'] = {'name': policy}
    if refresh:
        settings['refresh_interval'] = refresh
    if idx_analysis:
        settings['analysis'] = idx_analysis
    return {
        name: {
            'aliases': {},
            'mappings': mappings if maps is None else maps,
            'settings': {'index': settings},
        }
    }


def alias_response(name=named_index, alias=named_alias, write=None):
    props = {}
    if write is not None:
        props['is_write_index'] = write
    return {name: {'aliases': {alias: props}}}


no_alias_response = {named_index: {'aliases': {}}}


def ilm_response(name=policy_name, delete_age='50m'):
    delete = {'actions': {'delete': {'delete_searchable_snapshot': True}}}
    if delete_age:
        delete['min_age'] = delete_age
    return {
        name: {
            'version': 1,
            'modified_date': '2024-01-01T00:00:00.000Z',
            'policy': {
                'phases': {
                    'hot': {
                        'min_age': '0ms',
                        'actions': {'rollover': {'max_age': '1d', 'max_primary_shard_size': '50gb'}},
                    },
                    'delete': delete,
                }
            },
        }
    }


def delete_only_ilm_response(name=policy_name, delete_age='50m'):
    return {
        name: {
            'version': 1,
            'modified_date': '2024-01-01T00:00:00.000Z',
            'policy': {
                'phases': {
                    'delete': {'min_age': delete_age, 'actions': {'delete': {}}},
                }
            },
        }
    }


def target_settings_response(policy=None):
    index = {'number_of_shards': '2'}
    if policy:
        index['lifecycle'] = {'name': policy}
    return {target_index: {'settings': {'index': index}}}


generic_task = {'task': task_id}
incomplete_task = {
    'completed': False,
    'task': {
        'node': 'I0ekFjMhSPCQz7FUs1zJOg',
        'id': 12345,
        'type': 'transport',
        'action': 'indices:data/write/reindex',
        'status': {'total': 1000, 'updated': 0, 'created': 250, 'deleted': 0, 'batches': 1},
        'description': f'reindex from [{named_index}] to [{target_index}]',
        'start_time_in_millis': 1705320000000,
        'running_time_in_nanos': 5000000000,
        'cancellable': True,
    },
}
completed_task = {
    'completed': True,
    'task': {
        'node': 'I0ekFjMhSPCQz7FUs1zJOg',
        'id': 12345,
        'type': 'transport',
        'action': 'indices:data/write/reindex',
        'status': {'total': 1000, 'updated': 0, 'created': 1000, 'deleted': 0, 'batches': 1},
        'description': f'reindex from [{named_index}] to [{target_index}]',
        'start_time_in_millis': 1705320000000,
        'running_time_in_nanos': 9000000000,
        'cancellable': True,
    },
    'response': {'took': 9000, 'timed_out': False, 'total': 1000, 'created': 1000, 'failures': []},
}
failed_task = {
    'completed': True,
    'task': completed_task['task'],
    'response': {
        'took': 9000,
        'timed_out': False,
        'total': 1000,
        'created': 999,
        'failures': [{'index': target_index, 'id': '1', 'cause': {'type': 'mapper_parsing_exception'}}],
    },
}
sync_response = {'took': 9000, 'timed_out': False, 'total': 1000, 'created': 1000, 'failures': []}
