"""Unit tests for the pre-change safety checks"""
from unittest import TestCase
from unittest.mock import Mock, patch
import pytest
from repacker.exceptions import (
    GatewayError,
    IndexMissing,
    NoDeleteCondition,
    NoPolicyAttached,
    RefusedWriteTarget,
)
from repacker.gateway import ClusterGateway, IndexInfo
from repacker.helpers.testers import (
    assert_not_write_index,
    require_delete_age,
    require_index,
    require_policy,
)
from repacker.policy import LifecyclePolicy
from . import testvars


class TestRequireIndex(TestCase):
    """TestRequireIndex

    Test helpers.testers.require_index functionality.
    """
    def test_found(self):
        """Should return the index details"""
        client = Mock()
        client.indices.get.return_value = testvars.index_response()
        info = require_index(ClusterGateway(client), testvars.named_index)
        assert info.name == testvars.named_index
        assert info.policy_id == testvars.policy_name
    def test_missing(self):
        """Should raise IndexMissing on a 404"""
        client = Mock()
        client.indices.get.side_effect = testvars.not_found()
        with pytest.raises(IndexMissing, match=r'not found'):
            require_index(ClusterGateway(client), testvars.named_index)
    def test_alias_name(self):
        """Should raise IndexMissing when the name resolves to another index"""
        client = Mock()
        client.indices.get.return_value = testvars.index_response()
        with pytest.raises(IndexMissing, match=r'not a concrete index name'):
            require_index(ClusterGateway(client), testvars.named_alias)
    def test_other_error(self):
        """Should pass other errors through"""
        client = Mock()
        client.indices.get.side_effect = testvars.server_error()
        with pytest.raises(GatewayError):
            require_index(ClusterGateway(client), testvars.named_index)


class TestAssertNotWriteIndex(TestCase):
    """TestAssertNotWriteIndex

    Test helpers.testers.assert_not_write_index functionality.
    """
    def check(self, response):
        client = Mock()
        client.indices.get_alias.return_value = response
        return assert_not_write_index(
            ClusterGateway(client), testvars.named_index, testvars.named_alias
        )
    def test_write_index(self):
        """Should refuse the explicit write index"""
        with pytest.raises(RefusedWriteTarget, match=r'is the write index'):
            self.check(testvars.alias_response(write=True))
    def test_explicit_non_writer(self):
        """Should return True for a member with is_write_index false"""
        assert self.check(testvars.alias_response(write=False))
    def test_unflagged_member(self):
        """A member without the flag is not treated as the writer"""
        assert self.check(testvars.alias_response())
    def test_sole_unflagged_member_warns(self):
        """A sole member without the flag is the implicit writer, so warn"""
        with self.assertLogs('repacker.helpers.testers', level='WARNING') as logs:
            assert self.check(testvars.alias_response())
        assert 'no write index' in logs.output[0]
    def test_unflagged_member_with_siblings(self):
        """No warning when the alias has other members"""
        client = Mock()
        client.indices.get_alias.side_effect = [
            testvars.alias_response(),
            {testvars.named_index: {}, 'logs-000002': {}},
        ]
        with patch('repacker.helpers.testers.logger') as log:
            assert assert_not_write_index(
                ClusterGateway(client), testvars.named_index, testvars.named_alias
            )
        log.warning.assert_not_called()
        client.indices.get_alias.assert_called_with(name=testvars.named_alias)
    def test_not_a_member(self):
        """Should return False when the index is not in the alias"""
        assert not self.check(testvars.no_alias_response)
    def test_member_of_other_alias(self):
        """Being the writer of a different alias does not matter"""
        assert not self.check(testvars.alias_response(alias='other', write=True))
    def test_alias_lookup_404(self):
        """An index with no aliases can answer 404"""
        client = Mock()
        client.indices.get_alias.side_effect = testvars.not_found()
        assert not assert_not_write_index(
            ClusterGateway(client), testvars.named_index, testvars.named_alias
        )


class TestRequirePolicy(TestCase):
    def test_attached(self):
        info = IndexInfo(name=testvars.named_index, policy_id=testvars.policy_name)
        assert require_policy(info) == testvars.policy_name
    def test_unmanaged(self):
        info = IndexInfo(name=testvars.named_index)
        with pytest.raises(NoPolicyAttached):
            require_policy(info)


class TestRequireDeleteAge(TestCase):
    def test_found(self):
        body = testvars.ilm_response()[testvars.policy_name]
        policy = LifecyclePolicy.from_ilm(testvars.policy_name, body)
        assert require_delete_age(policy) == '50m'
    def test_no_min_age(self):
        body = testvars.ilm_response(delete_age=None)[testvars.policy_name]
        policy = LifecyclePolicy.from_ilm(testvars.policy_name, body)
        with pytest.raises(NoDeleteCondition):
            require_delete_age(policy)
    def test_no_delete_phase(self):
        policy = LifecyclePolicy.from_ilm(
            'hot-only', {'phases': {'hot': {'actions': {}}}}
        )
        with pytest.raises(NoDeleteCondition, match=r'hot-only'):
            require_delete_age(policy)
