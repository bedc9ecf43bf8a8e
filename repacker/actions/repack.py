"""Repack action class"""

# pylint: disable=R0902,R0913,R0914
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import List, Optional

import yaml

from repacker.actions.copy import CopySupervisor, CopyTask
from repacker.debug import begin_end, debug
from repacker.defaults.settings import DEFAULT_REFRESH_INTERVAL
from repacker.exceptions import (
    AliasSwapFailed,
    ConfigurationError,
    CreateRejected,
    GatewayError,
    NoPolicyAttached,
    PolicyAttachFailed,
    PostCopySettingsFailed,
    PreconditionFailed,
    RepackException,
    TargetAlreadyExists,
)
from repacker.gateway import ClusterGateway, IndexInfo
from repacker.helpers.date_ops import age_of, policy_timestamp, remaining_retention, utc_now
from repacker.helpers.duration import format_duration, parse_duration
from repacker.helpers.testers import (
    assert_not_write_index,
    require_delete_age,
    require_index,
    require_policy,
)
from repacker.policy import LifecyclePolicy

ALREADY_EXISTS = ['index_already_exists_exception', 'resource_already_exists_exception']


class RepackState(Enum):
    """The states of a repack, in the only order they may run"""

    VALIDATE = 'validate'
    COMPUTE_RETENTION = 'compute_retention'
    CREATE_TARGET = 'create_target'
    COPY = 'copy'
    RESTORE_SETTINGS = 'restore_settings'
    ATTACH_POLICY = 'attach_policy'
    SWAP_ALIAS = 'swap_alias'
    SUMMARIZE = 'summarize'
    DONE = 'done'


STATE_ORDER = list(RepackState)


def next_state(state):
    """
    :param state: The state that just completed
    :type state: :py:class:`RepackState`

    :returns: The state that follows ``state``. :py:attr:`RepackState.DONE` is final.
    :rtype: :py:class:`RepackState`
    """
    if state is RepackState.DONE:
        return RepackState.DONE
    return STATE_ORDER[STATE_ORDER.index(state) + 1]


def changes_cluster(state):
    """
    :returns: ``True`` if ``state`` is at or past the first state that writes
    :rtype: bool
    """
    return STATE_ORDER.index(state) >= STATE_ORDER.index(RepackState.CREATE_TARGET)


@dataclass
class RepackContext:
    """
    Everything a repack learns or decides, handed from state to state.

    Attributes:
        source (str): The index being repacked.
        alias (str): The alias the source sits behind.
        target (str): The new index.
        state (RepackState): The state now running, or the one that failed.
        info (IndexInfo): Source index details, from VALIDATE.
        source_policy (str): The source index's lifecycle policy id.
        original_age (str): The delete ``min_age`` of the source policy.
        alias_member (bool): Whether the source is in :py:attr:`alias`.
        retention (timedelta): What is left of the source's retention.
        retention_text (str): :py:attr:`retention`, rendered for the new policy.
        copy (CopyTask): The copy operation.
        policy_id (str): The id of the new lifecycle policy.
        warnings (list): Non-fatal problems, e.g. settings not restored.
        summary (dict): The final report from SUMMARIZE.
    """

    source: str
    alias: str
    target: str
    state: RepackState = RepackState.VALIDATE
    info: Optional[IndexInfo] = None
    source_policy: Optional[str] = None
    original_age: Optional[str] = None
    alias_member: bool = False
    retention: Optional[timedelta] = None
    retention_text: Optional[str] = None
    copy: Optional[CopyTask] = None
    policy_id: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    summary: dict = field(default_factory=dict)


class Repack:
    """Repack Action Class"""

    def __init__(
        self,
        client,
        index,
        alias,
        number_of_shards,
        number_of_replicas=1,
        prefix='repacked-',
        blank_fields=None,
        compression='best_compression',
        mapping_file=None,
        asynchronous=True,
        slices='auto',
        requests_per_second=0,
        poll_interval=10,
        timeout=86400,
        stop_event=None,
        clock=utc_now,
    ):
        """
        :param client: A client connection object, or a ready gateway
        :param index: The index to repack
        :param alias: The alias ``index`` is served from
        :param number_of_shards: Primary shard count of the new index
        :param number_of_replicas: Replica count of the new index once the copy is done
        :param prefix: Prepended to ``index`` to name the new index
        :param blank_fields: Fields removed from every document during the copy
        :param compression: ``default`` or ``best_compression``
        :param mapping_file: Path to a JSON or YAML mappings file to use instead of
            the source mappings
        :param asynchronous: Copy as a background task and poll it
        :param slices: Positive integer, or ``auto`` to let Elasticsearch decide
        :param requests_per_second: Copy throttle. ``0`` is unthrottled.
        :param poll_interval: Seconds between task checks
        :param timeout: Seconds to watch the copy
        :param stop_event: Set it to stop watching the copy between polls
        :param clock: Returns the current UTC time

        :type client: :py:class:`~.elasticsearch.Elasticsearch`
        :type index: str
        :type alias: str
        :type number_of_shards: int
        :type number_of_replicas: int
        :type prefix: str
        :type blank_fields: list
        :type compression: str
        :type mapping_file: str
        :type asynchronous: bool
        :type slices: int or str
        :type requests_per_second: float
        :type poll_interval: float
        :type timeout: float
        :type stop_event: :py:class:`~.threading.Event`
        :type clock: callable
        """
        self.loggit = logging.getLogger('repacker.actions.repack')
        if not index:
            raise ConfigurationError('No value for "index" provided.')
        if not alias:
            raise ConfigurationError('No value for "alias" provided.')
        if compression not in ('default', 'best_compression'):
            raise ConfigurationError(f'Unknown compression "{compression}"')
        if isinstance(client, ClusterGateway):
            self.gateway = client
        else:
            self.gateway = ClusterGateway(client)
        self.index = index
        self.alias = alias
        #: The name of the new index
        self.target = f'{prefix}{index}'
        self.number_of_shards = number_of_shards
        self.number_of_replicas = number_of_replicas
        self.blank_fields = list(blank_fields or [])
        self.compression = compression
        self.mapping_file = mapping_file
        self.asynchronous = asynchronous
        self.slices = slices
        self.requests_per_second = requests_per_second
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.stop_event = stop_event
        self.clock = clock
        self.dry_run = False
        self.handlers = {
            RepackState.VALIDATE: self.validate,
            RepackState.COMPUTE_RETENTION: self.compute_retention,
            RepackState.CREATE_TARGET: self.create_target,
            RepackState.COPY: self.copy,
            RepackState.RESTORE_SETTINGS: self.restore_settings,
            RepackState.ATTACH_POLICY: self.attach_policy,
            RepackState.SWAP_ALIAS: self.swap_alias,
            RepackState.SUMMARIZE: self.summarize,
        }

    def new_context(self):
        """
        :returns: A fresh context for this repack
        :rtype: :py:class:`RepackContext`
        """
        return RepackContext(source=self.index, alias=self.alias, target=self.target)

    def run(self, dry_run=False):
        """
        Run every state in order. The first fatal error stops the run.

        :param dry_run: Perform the reads, log the writes instead of sending them

        :returns: The final context
        :rtype: :py:class:`RepackContext`
        """
        self.dry_run = dry_run
        if dry_run:
            self.loggit.info('DRY-RUN MODE.  No changes will be made.')
        ctx = self.new_context()
        state = RepackState.VALIDATE
        while state is not RepackState.DONE:
            ctx.state = state
            self.loggit.info('Repack of "%s": %s', self.index, state.value)
            try:
                self.handlers[state](ctx)
            except RepackException as err:
                self.loggit.error(
                    'Repack of "%s" failed in state %s: %s', self.index, state.value, err
                )
                if changes_cluster(state) and not dry_run:
                    self.loggit.error(
                        'Changes made before this failure have been left in place. '
                        'To start over, delete index "%s" and rerun.',
                        self.target,
                    )
                raise
            state = next_state(state)
        ctx.state = RepackState.DONE
        return ctx

    def do_dry_run(self):
        """Log what the output would be, but take no action."""
        return self.run(dry_run=True)

    def do_action(self):
        """Repack :py:attr:`index` into :py:attr:`target`"""
        return self.run()

    @begin_end()
    def validate(self, ctx):
        """Check the source may be repacked and record what is needed later"""
        ctx.info = require_index(self.gateway, self.index)
        ctx.alias_member = assert_not_write_index(self.gateway, self.index, self.alias)
        ctx.source_policy = require_policy(ctx.info)
        try:
            policy = self.gateway.get_policy(ctx.source_policy)
        except GatewayError as err:
            if err.status_code == 404:
                raise NoPolicyAttached(
                    f'Index "{self.index}" names lifecycle policy '
                    f'"{ctx.source_policy}", which does not exist'
                ) from err
            raise
        ctx.original_age = require_delete_age(policy)
        if ctx.info.creation_time is None:
            raise PreconditionFailed(f'Index "{self.index}" has no creation_date')
        self.loggit.info(
            'Source "%s": created %s (%s ago), policy "%s" deletes at %s, '
            'routing required: %s',
            self.index,
            ctx.info.creation_time.isoformat(),
            age_of(ctx.info.creation_time, self.clock()),
            ctx.source_policy,
            ctx.original_age,
            ctx.info.routing_required,
        )

    @begin_end()
    def compute_retention(self, ctx):
        """Work out the remaining retention and render it for the new policy"""
        age = parse_duration(ctx.original_age)
        ctx.retention = remaining_retention(ctx.info.creation_time, age, self.clock())
        ctx.retention_text = format_duration(ctx.retention)
        self.loggit.info(
            'Remaining retention for "%s": %s (of %s)',
            self.index,
            ctx.retention_text,
            ctx.original_age,
        )

    def target_settings(self, ctx):
        """
        :returns: Settings for the new index. Replicas and refresh stay off until the
            copy is done.
        :rtype: dict
        """
        settings = {
            'number_of_shards': self.number_of_shards,
            'number_of_replicas': 0,
            'refresh_interval': '-1',
            'codec': self.compression,
        }
        if ctx.info.analysis:
            settings['analysis'] = deepcopy(ctx.info.analysis)
        return settings

    def target_mappings(self, ctx):
        """
        :returns: The mappings from :py:attr:`mapping_file`, if given, else a copy of
            the source mappings
        :rtype: dict
        """
        if not self.mapping_file:
            return deepcopy(ctx.info.mappings)
        try:
            with open(self.mapping_file, 'r', encoding='utf-8') as fhandle:
                mappings = yaml.safe_load(fhandle)
        except (OSError, yaml.YAMLError) as err:
            raise ConfigurationError(
                f'Unable to read mapping file "{self.mapping_file}": {err}'
            ) from err
        if not isinstance(mappings, dict):
            raise ConfigurationError(
                f'Mapping file "{self.mapping_file}" does not contain a mapping object'
            )
        # Accept the output of GET <index>/_mapping as well as a bare mapping
        if 'mappings' in mappings:
            mappings = mappings['mappings']
        return mappings

    @begin_end()
    def create_target(self, ctx):
        """Create the new index"""
        settings = self.target_settings(ctx)
        mappings = self.target_mappings(ctx)
        if self.dry_run:
            self.loggit.info(
                'DRY-RUN: create_index "%s" with settings: %s mappings: %s',
                self.target,
                settings,
                mappings,
            )
            return
        self.loggit.info('Creating index "%s" with settings: %s', self.target, settings)
        try:
            self.gateway.create_index(self.target, settings, mappings)
        except GatewayError as err:
            if err.error_type in ALREADY_EXISTS:
                raise TargetAlreadyExists(f'Index {self.target} already exists.') from err
            raise CreateRejected(f'Unable to create index "{self.target}": {err}') from err

    def copy_supervisor(self, ctx):
        """
        :returns: The supervisor for this repack's copy
        :rtype: :py:class:`~.repacker.actions.copy.CopySupervisor`
        """
        return CopySupervisor(
            self.gateway,
            self.index,
            self.target,
            blank_fields=self.blank_fields,
            keep_routing=ctx.info.routing_required,
            asynchronous=self.asynchronous,
            slices=self.slices,
            requests_per_second=self.requests_per_second,
            poll_interval=self.poll_interval,
            timeout=self.timeout,
            stop_event=self.stop_event,
        )

    @begin_end()
    def copy(self, ctx):
        """Copy every document from the source into the new index"""
        supervisor = self.copy_supervisor(ctx)
        ctx.copy = supervisor.task
        if self.dry_run:
            supervisor.do_dry_run()
            return
        supervisor.do_action()

    @begin_end()
    def restore_settings(self, ctx):
        """Turn refresh back on, then add the replicas"""
        refresh = ctx.info.refresh_interval or DEFAULT_REFRESH_INTERVAL
        changes = [
            {'index.refresh_interval': refresh},
            {'index.number_of_replicas': self.number_of_replicas},
        ]
        failed = []
        for settings in changes:
            if self.dry_run:
                self.loggit.info(
                    'DRY-RUN: update settings of "%s": %s', self.target, settings
                )
                continue
            try:
                self.gateway.update_settings(self.target, settings)
                debug.lv2('Applied %s to %s', settings, self.target)
            except GatewayError as err:
                failed.append(f'{settings}: {err}')
        if failed:
            warning = PostCopySettingsFailed(
                f'Index "{self.target}" holds all data, but these settings were not '
                f'applied: {"; ".join(failed)}'
            )
            self.loggit.warning(str(warning))
            ctx.warnings.append(str(warning))

    @begin_end()
    def attach_policy(self, ctx):
        """Give the new index its own policy, deleting it when the source would go"""
        ctx.policy_id = f'{self.target}-{policy_timestamp(self.clock())}'
        policy = LifecyclePolicy.retention_policy(ctx.policy_id, ctx.retention_text)
        if self.dry_run:
            self.loggit.info(
                'DRY-RUN: put lifecycle policy "%s": %s, then attach it to "%s"',
                ctx.policy_id,
                policy.to_ilm(),
                self.target,
            )
            return
        try:
            existing = self.gateway.get_index_policy(self.target)
            if existing:
                self.loggit.info(
                    'Removing lifecycle policy "%s" from "%s"', existing, self.target
                )
                self.gateway.detach_policy(self.target)
            self.gateway.put_policy(policy)
            self.gateway.attach_policy(self.target, ctx.policy_id)
        except GatewayError as err:
            self.loggit.critical(
                'Index "%s" holds data but has NO retention policy. Attach one by '
                'hand or delete the index. Error: %s',
                self.target,
                err,
            )
            raise PolicyAttachFailed(
                f'Unable to attach lifecycle policy "{ctx.policy_id}" to '
                f'"{self.target}": {err}'
            ) from err
        self.loggit.info('Attached lifecycle policy "%s" to "%s"', ctx.policy_id, self.target)

    def alias_actions(self, ctx):
        """
        :returns: The ``update_aliases`` actions: remove the source if it is a
            member, add the target as a non-write member
        :rtype: list
        """
        actions = []
        if ctx.alias_member:
            actions.append({'remove': {'index': self.index, 'alias': self.alias}})
        actions.append(
            {'add': {'index': self.target, 'alias': self.alias, 'is_write_index': False}}
        )
        return actions

    @begin_end()
    def swap_alias(self, ctx):
        """Put the new index behind the alias in place of the source"""
        # Membership may have changed during a long copy
        ctx.alias_member = assert_not_write_index(self.gateway, self.index, self.alias)
        actions = self.alias_actions(ctx)
        if self.dry_run:
            self.loggit.info('DRY-RUN: update aliases: %s', actions)
            return
        try:
            self.gateway.update_aliases(actions)
        except GatewayError as err:
            raise AliasSwapFailed(
                f'Index "{self.target}" is ready but not in alias "{self.alias}". '
                f'Retry the alias update alone. Error: {err}'
            ) from err
        self.loggit.info('Alias "%s" now serves "%s"', self.alias, self.target)

    def _count(self, index):
        try:
            return self.gateway.count(index)
        except GatewayError as err:
            self.loggit.warning('Unable to count documents in "%s": %s', index, err)
            return None

    @begin_end()
    def summarize(self, ctx):
        """Report what was done. Nothing here can fail the run."""
        ctx.summary = {
            'source': self.index,
            'target': self.target,
            'source_docs': self._count(self.index),
            'target_docs': None if self.dry_run else self._count(self.target),
            'policy_id': ctx.policy_id,
            'retention': ctx.retention_text,
            'asynchronous': self.asynchronous,
            'slices': self.slices,
            'requests_per_second': self.requests_per_second,
            'poll_interval': self.poll_interval,
            'timeout': self.timeout,
            'warnings': list(ctx.warnings),
        }
        for key, value in ctx.summary.items():
            self.loggit.info('Summary: %s = %s', key, value)
