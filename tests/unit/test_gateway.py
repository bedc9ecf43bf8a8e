"""Unit tests for the cluster gateway"""
# pylint: disable=C0115,C0116
from unittest import TestCase
from unittest.mock import Mock
import pytest
from elastic_transport import ConnectionError as TransportConnectionError
from repacker.exceptions import GatewayError
from repacker.gateway import BLANK_FIELDS_SCRIPT, ClusterGateway, IndexInfo
from . import testvars


class TestIndexInfo(TestCase):
    def test_from_response(self):
        data = testvars.index_response(idx_analysis=testvars.analysis)[testvars.named_index]
        info = IndexInfo.from_response(testvars.named_index, data)
        assert info.number_of_shards == 12
        assert info.number_of_replicas == 1
        assert info.policy_id == testvars.policy_name
        assert info.refresh_interval == '5s'
        assert info.analysis == testvars.analysis
        assert info.mappings == testvars.mappings
        assert info.creation_time.tzinfo is not None
        assert not info.routing_required
    def test_routing_required(self):
        data = testvars.index_response(maps=testvars.routed_mappings)[testvars.named_index]
        assert IndexInfo.from_response(testvars.named_index, data).routing_required
    def test_routing_required_string(self):
        maps = {'_routing': {'required': 'true'}}
        data = testvars.index_response(maps=maps)[testvars.named_index]
        assert IndexInfo.from_response(testvars.named_index, data).routing_required
    def test_unmanaged(self):
        data = testvars.index_response(policy=None, refresh=None)[testvars.named_index]
        info = IndexInfo.from_response(testvars.named_index, data)
        assert info.policy_id is None
        assert info.refresh_interval is None


class TestErrors(TestCase):
    def test_api_error(self):
        client = Mock()
        client.indices.create.side_effect = testvars.bad_request(
            'resource_already_exists_exception'
        )
        with pytest.raises(GatewayError) as err:
            ClusterGateway(client).create_index(testvars.target_index, {}, {})
        assert err.value.status_code == 400
        assert err.value.error_type == 'resource_already_exists_exception'
        assert err.value.call == 'create_index'
    def test_transport_error(self):
        client = Mock()
        client.count.side_effect = TransportConnectionError('connection refused')
        with pytest.raises(GatewayError) as err:
            ClusterGateway(client).count(testvars.named_index)
        assert err.value.status_code is None


class TestCalls(TestCase):
    def setUp(self):
        self.client = Mock()
        self.gateway = ClusterGateway(self.client)
    def test_get_index_not_concrete(self):
        self.client.indices.get.return_value = testvars.index_response()
        assert self.gateway.get_index('logs-*') is None
    def test_get_alias(self):
        self.client.indices.get_alias.return_value = testvars.alias_response(write=False)
        assert self.gateway.get_alias(testvars.named_index) == {
            testvars.named_alias: {'is_write_index': False}
        }
    def test_get_alias_404(self):
        self.client.indices.get_alias.side_effect = testvars.not_found()
        assert self.gateway.get_alias(testvars.named_index) == {}
    def test_get_policy(self):
        self.client.ilm.get_lifecycle.return_value = testvars.ilm_response()
        policy = self.gateway.get_policy(testvars.policy_name)
        assert policy.name == testvars.policy_name
        self.client.ilm.get_lifecycle.assert_called_once_with(name=testvars.policy_name)
    def test_get_index_policy(self):
        self.client.indices.get_settings.return_value = testvars.target_settings_response('x')
        assert self.gateway.get_index_policy(testvars.target_index) == 'x'
    def test_get_index_policy_none(self):
        self.client.indices.get_settings.return_value = testvars.target_settings_response()
        assert self.gateway.get_index_policy(testvars.target_index) is None
    def test_attach_policy(self):
        self.gateway.attach_policy(testvars.target_index, 'new-policy')
        self.client.indices.put_settings.assert_called_once_with(
            index=testvars.target_index, settings={'index.lifecycle.name': 'new-policy'}
        )
    def test_update_aliases_is_one_call(self):
        actions = [{'remove': {}}, {'add': {}}]
        self.gateway.update_aliases(actions)
        self.client.indices.update_aliases.assert_called_once_with(actions=actions)
    def test_count(self):
        self.client.count.return_value = {'count': 42}
        assert self.gateway.count(testvars.named_index) == 42


class TestReindexArgs(TestCase):
    def setUp(self):
        self.gateway = ClusterGateway(Mock())
    def test_minimal(self):
        args = self.gateway.reindex_args(testvars.named_index, testvars.target_index)
        assert args == {
            'source': {'index': testvars.named_index},
            'dest': {'index': testvars.target_index},
            'wait_for_completion': False,
            'requests_per_second': -1,
        }
    def test_routing_kept_only_when_asked(self):
        args = self.gateway.reindex_args('a', 'b', keep_routing=True)
        assert args['dest']['routing'] == 'keep'
    def test_blank_fields(self):
        args = self.gateway.reindex_args('a', 'b', blank_fields=['secret', 'token'])
        assert args['script']['source'] == BLANK_FIELDS_SCRIPT
        assert args['script']['params'] == {'fields': ['secret', 'token']}
    def test_throttle_and_slices(self):
        args = self.gateway.reindex_args('a', 'b', requests_per_second=500, slices=4)
        assert args['requests_per_second'] == 500
        assert args['slices'] == 4
    def test_sync_uses_request_timeout(self):
        client = Mock()
        client.options.return_value.reindex.return_value = testvars.sync_response
        gateway = ClusterGateway(client)
        args = gateway.reindex_args('a', 'b', wait_for_completion=True)
        gateway.submit_reindex(args, request_timeout=600)
        client.options.assert_called_once_with(request_timeout=600)
        client.reindex.assert_not_called()
        assert client.options.return_value.reindex.call_args.kwargs == args
