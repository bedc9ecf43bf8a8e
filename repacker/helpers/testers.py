"""Safety checks run before anything is changed"""

import logging
from repacker.exceptions import (
    GatewayError,
    IndexMissing,
    NoDeleteCondition,
    NoPolicyAttached,
    RefusedWriteTarget,
)
from repacker.defaults.settings import AGE_CONDITION

logger = logging.getLogger(__name__)


def require_index(gateway, index):
    """
    Calls :py:meth:`~.repacker.gateway.ClusterGateway.get_index`

    :param gateway: The cluster gateway
    :param index: The index name

    :type gateway: :py:class:`~.repacker.gateway.ClusterGateway`
    :type index: str

    :returns: The index details
    :rtype: :py:class:`~.repacker.gateway.IndexInfo`
    """
    try:
        info = gateway.get_index(index)
    except GatewayError as err:
        if err.status_code == 404:
            raise IndexMissing(f'Index "{index}" not found') from err
        raise
    if info is None:
        raise IndexMissing(
            f'"{index}" is not a concrete index name. Pass the index itself, not an '
            f'alias or pattern.'
        )
    return info


def assert_not_write_index(gateway, index, alias):
    """
    Raise :py:exc:`~.repacker.exceptions.RefusedWriteTarget` if ``index`` is the
    designated write index of ``alias``. An index that is not in ``alias`` at all
    is not a writer.

    :param gateway: The cluster gateway
    :param index: The index name
    :param alias: The alias name

    :type gateway: :py:class:`~.repacker.gateway.ClusterGateway`
    :type index: str
    :type alias: str

    :returns: ``True`` if ``index`` is currently a member of ``alias``
    :rtype: bool
    """
    bindings = gateway.get_alias(index)
    if alias not in bindings:
        logger.debug('Index %s is not a member of alias %s', index, alias)
        return False
    if bindings[alias].get('is_write_index', False):
        raise RefusedWriteTarget(
            f'Index "{index}" is the write index for alias "{alias}". Roll the alias '
            f'over before repacking it.'
        )
    if 'is_write_index' not in bindings[alias]:
        if gateway.alias_members(alias) == [index]:
            logger.warning(
                'Index %s is the only member of alias %s and has no is_write_index '
                'flag, so Elasticsearch writes to it. After the swap the alias will '
                'have no write index.',
                index,
                alias,
            )
    return True


def require_policy(info):
    """
    :param info: The index details
    :type info: :py:class:`~.repacker.gateway.IndexInfo`

    :returns: The name of the lifecycle policy attached to the index
    :rtype: str
    """
    if not info.policy_id:
        raise NoPolicyAttached(f'Index "{info.name}" has no lifecycle policy attached')
    return info.policy_id


def require_delete_age(policy):
    """
    :param policy: The source index's lifecycle policy
    :type policy: :py:class:`~.repacker.policy.LifecyclePolicy`

    :returns: The minimum age at which ``policy`` deletes an index, as written in
        the policy (e.g. ``30d``)
    :rtype: str
    """
    transition = policy.delete_transition()
    if transition is None:
        raise NoDeleteCondition(
            f'Policy "{policy.name}" has no delete phase gated on a minimum age'
        )
    return transition.conditions[AGE_CONDITION]
