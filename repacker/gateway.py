"""Cluster gateway

Every request Repacker sends to Elasticsearch goes through
:py:class:`ClusterGateway`. One method is one request. Nothing is retried here.
Any non-success response becomes a :py:exc:`~.repacker.exceptions.GatewayError`.
"""

import logging
import typing as t
from dataclasses import dataclass, field
from datetime import datetime

from elasticsearch8 import Elasticsearch
from elasticsearch8.exceptions import ApiError, TransportError

from repacker.debug import debug
from repacker.defaults.settings import UNTHROTTLED
from repacker.exceptions import GatewayError
from repacker.helpers.date_ops import creation_to_datetime
from repacker.policy import LifecyclePolicy

logger = logging.getLogger(__name__)

#: Painless source removing each of ``params.fields`` from every copied document
BLANK_FIELDS_SCRIPT = 'for (def f : params.fields) { ctx._source.remove(f) }'


@dataclass
class IndexInfo:
    """
    What Repacker needs to know about an index.

    Attributes:
        name (str): The index name.
        number_of_shards (int): Primary shard count.
        number_of_replicas (int): Replica count.
        creation_time (datetime): From ``index.creation_date``, in UTC.
        mappings (dict): The index mappings.
        analysis (dict): ``index.analysis`` settings, if any.
        refresh_interval (str): ``index.refresh_interval``, or ``None`` if unset.
        policy_id (str): ``index.lifecycle.name``, or ``None`` if unmanaged.
        routing_required (bool): Whether ``mappings._routing.required`` is set.
    """

    name: str
    number_of_shards: int = 1
    number_of_replicas: int = 1
    creation_time: t.Optional[datetime] = None
    mappings: dict = field(default_factory=dict)
    analysis: dict = field(default_factory=dict)
    refresh_interval: t.Optional[str] = None
    policy_id: t.Optional[str] = None
    routing_required: bool = False

    @classmethod
    def from_response(cls, name: str, data: dict) -> 'IndexInfo':
        """
        :param name: The index name
        :param data: The value under ``name`` in the
            :py:meth:`~.elasticsearch.client.IndicesClient.get` response
        """
        settings = data.get('settings', {}).get('index', {})
        mappings = data.get('mappings', {})
        required = mappings.get('_routing', {}).get('required', False)
        if isinstance(required, str):
            required = required.lower() == 'true'
        creation = settings.get('creation_date')
        return cls(
            name=name,
            number_of_shards=int(settings.get('number_of_shards', 1)),
            number_of_replicas=int(settings.get('number_of_replicas', 1)),
            creation_time=creation_to_datetime(creation) if creation else None,
            mappings=mappings,
            analysis=settings.get('analysis', {}),
            refresh_interval=settings.get('refresh_interval'),
            policy_id=settings.get('lifecycle', {}).get('name'),
            routing_required=bool(required),
        )


class ClusterGateway:
    """
    Thin wrapper around an :py:class:`~.elasticsearch.Elasticsearch` client exposing
    only the calls a repack makes.

    :param client: A client connection object
    :type client: :py:class:`~.elasticsearch.Elasticsearch`
    """

    def __init__(self, client: Elasticsearch):
        self.client = client

    def _call(self, call: str, func: t.Callable, **kwargs) -> t.Any:
        debug.lv4('%s: %s', call, kwargs)
        try:
            response = func(**kwargs)
        except ApiError as err:
            raise GatewayError(err.meta.status, err.body, call) from err
        except TransportError as err:
            raise GatewayError(None, str(err), call) from err
        debug.lv5('%s response: %s', call, response)
        return response

    def get_index(self, index: str) -> t.Optional[IndexInfo]:
        """
        Calls :py:meth:`~.elasticsearch.client.IndicesClient.get`

        :returns: Settings, mappings and lifecycle details of ``index``, or ``None``
            if ``index`` is not a concrete index name (an alias or a wildcard
            answers under the names of the indices it resolves to)
        """
        response = self._call('get_index', self.client.indices.get, index=index)
        if index not in response:
            logger.debug('%s resolved to %s', index, list(response))
            return None
        return IndexInfo.from_response(index, response[index])

    def get_alias(self, index: str) -> dict:
        """
        Calls :py:meth:`~.elasticsearch.client.IndicesClient.get_alias`

        :returns: ``{alias_name: alias_properties}`` for every alias ``index``
            belongs to. An index with no aliases yields ``{}``.
        """
        try:
            response = self._call('get_alias', self.client.indices.get_alias, index=index)
        except GatewayError as err:
            if err.status_code == 404:
                return {}
            raise
        return dict(response.get(index, {}).get('aliases', {}))

    def alias_members(self, alias: str) -> t.List[str]:
        """
        Calls :py:meth:`~.elasticsearch.client.IndicesClient.get_alias` by alias name

        :returns: The names of every index in ``alias``. A missing alias yields
            ``[]``.
        """
        try:
            response = self._call(
                'alias_members', self.client.indices.get_alias, name=alias
            )
        except GatewayError as err:
            if err.status_code == 404:
                return []
            raise
        return list(response)

    def get_policy(self, name: str) -> LifecyclePolicy:
        """
        Calls :py:meth:`~.elasticsearch.client.IlmClient.get_lifecycle`
        """
        response = self._call('get_policy', self.client.ilm.get_lifecycle, name=name)
        return LifecyclePolicy.from_ilm(name, response[name])

    def get_index_policy(self, index: str) -> t.Optional[str]:
        """
        Calls :py:meth:`~.elasticsearch.client.IndicesClient.get_settings`

        :returns: The ``index.lifecycle.name`` of ``index``, or ``None``. Having no
            policy is not an error.
        """
        response = self._call(
            'get_index_policy', self.client.indices.get_settings, index=index
        )
        settings = response.get(index, {}).get('settings', {}).get('index', {})
        return settings.get('lifecycle', {}).get('name')

    def put_policy(self, policy: LifecyclePolicy) -> dict:
        """
        Calls :py:meth:`~.elasticsearch.client.IlmClient.put_lifecycle`
        """
        return self._call(
            'put_policy',
            self.client.ilm.put_lifecycle,
            name=policy.name,
            policy=policy.to_ilm(),
        )

    def attach_policy(self, index: str, policy_id: str) -> dict:
        """
        Set ``index.lifecycle.name`` on ``index``
        """
        return self._call(
            'attach_policy',
            self.client.indices.put_settings,
            index=index,
            settings={'index.lifecycle.name': policy_id},
        )

    def detach_policy(self, index: str) -> dict:
        """
        Calls :py:meth:`~.elasticsearch.client.IlmClient.remove_policy`
        """
        return self._call('detach_policy', self.client.ilm.remove_policy, index=index)

    def create_index(self, index: str, settings: dict, mappings: dict) -> dict:
        """
        Calls :py:meth:`~.elasticsearch.client.IndicesClient.create`
        """
        return self._call(
            'create_index',
            self.client.indices.create,
            index=index,
            settings=settings,
            mappings=mappings,
        )

    def reindex_args(
        self,
        source: str,
        dest: str,
        blank_fields: t.Optional[t.Sequence[str]] = None,
        keep_routing: bool = False,
        wait_for_completion: bool = False,
        requests_per_second: float = 0,
        slices: t.Optional[int] = None,
    ) -> dict:
        """
        :returns: The keyword arguments :py:meth:`submit_reindex` will send to
            :py:meth:`~.elasticsearch.Elasticsearch.reindex`

        ``requests_per_second`` of ``0`` means unthrottled. ``slices`` is only
        sent when not ``None``.
        """
        args = {
            'source': {'index': source},
            'dest': {'index': dest},
            'wait_for_completion': wait_for_completion,
            'requests_per_second': (
                requests_per_second if requests_per_second > 0 else UNTHROTTLED
            ),
        }
        if keep_routing:
            args['dest']['routing'] = 'keep'
        if blank_fields:
            args['script'] = {
                'lang': 'painless',
                'source': BLANK_FIELDS_SCRIPT,
                'params': {'fields': list(blank_fields)},
            }
        if slices is not None:
            args['slices'] = slices
        return args

    def submit_reindex(self, args: dict, request_timeout: t.Optional[float] = None) -> dict:
        """
        Calls :py:meth:`~.elasticsearch.Elasticsearch.reindex` with ``args``, as
        built by :py:meth:`reindex_args`

        :param request_timeout: Seconds to wait for the response. Needed when
            ``wait_for_completion`` is ``True``.
        """
        client = self.client
        if request_timeout:
            client = self.client.options(request_timeout=request_timeout)
        return self._call('submit_reindex', client.reindex, **args)

    def get_task(self, task_id: str) -> dict:
        """
        Calls :py:meth:`~.elasticsearch.client.TasksClient.get`
        """
        return self._call('get_task', self.client.tasks.get, task_id=task_id)

    def update_settings(self, index: str, settings: dict) -> dict:
        """
        Calls :py:meth:`~.elasticsearch.client.IndicesClient.put_settings`
        """
        return self._call(
            'update_settings',
            self.client.indices.put_settings,
            index=index,
            settings=settings,
        )

    def update_aliases(self, actions: t.List[dict]) -> dict:
        """
        Calls :py:meth:`~.elasticsearch.client.IndicesClient.update_aliases` with all
        ``actions`` in one request, so they are applied atomically
        """
        return self._call(
            'update_aliases', self.client.indices.update_aliases, actions=actions
        )

    def count(self, index: str) -> int:
        """
        Calls :py:meth:`~.elasticsearch.Elasticsearch.count`

        :returns: The number of documents in ``index``
        """
        return int(self._call('count', self.client.count, index=index)['count'])
