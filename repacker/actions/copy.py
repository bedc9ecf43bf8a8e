"""Reindex (copy) supervision"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from repacker.debug import debug
from repacker.exceptions import (
    CopyError,
    CopyFailed,
    CopyInterrupted,
    CopySubmissionFailed,
    CopyTimedOut,
    GatewayError,
    NoTaskHandle,
)
from repacker.helpers.waiters import wait_for_task

COMPLETED = 'completed'
FAILED = 'failed'
TIMED_OUT = 'timed_out'
INTERRUPTED = 'interrupted'


@dataclass
class CopyTask:
    """
    The state of one copy operation.

    Attributes:
        asynchronous (bool): Whether the copy runs as a background task.
        slices (int): The slice count sent, or ``None`` if none was sent.
        requests_per_second (float): The throttle. ``0`` is unthrottled.
        task_id (str): Task handle, asynchronous mode only.
        polls (int): How many times the task was checked.
        elapsed (float): Seconds from submission to the terminal status.
        status (str): ``completed``, ``failed``, ``timed_out`` or ``interrupted``.
    """

    asynchronous: bool
    slices: Optional[int] = None
    requests_per_second: float = 0
    task_id: Optional[str] = None
    polls: int = 0
    elapsed: float = 0.0
    status: Optional[str] = None


def slice_count(value):
    """
    :param value: The requested slice count, e.g. ``4``, ``'4'`` or ``'auto'``

    :returns: ``value`` as an :py:class:`int` if it is a positive integer, else
        ``None``, meaning no ``slices`` parameter is sent at all
    :rtype: int
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number > 0 else None
    return None


class CopySupervisor:
    """Copy every document from one index to another and see it through"""

    def __init__(
        self,
        gateway,
        source,
        dest,
        blank_fields=None,
        keep_routing=False,
        asynchronous=True,
        slices='auto',
        requests_per_second=0,
        poll_interval=10,
        timeout=86400,
        stop_event=None,
    ):
        """
        :param gateway: The cluster gateway
        :param source: The index to copy from
        :param dest: The index to copy into
        :param blank_fields: Fields removed from every document while copying
        :param keep_routing: Keep each document's ``_routing``. Only wanted when
            the source mapping requires routing.
        :param asynchronous: Submit as a background task and poll it. Otherwise make
            one blocking request.
        :param slices: A positive integer to split the task into that many slices.
            Anything else (``auto`` included) leaves slicing to Elasticsearch.
        :param requests_per_second: Throttle. ``0`` means no throttle.
        :param poll_interval: Seconds between task checks
        :param timeout: Seconds to watch an asynchronous task, or the request timeout
            of a blocking copy
        :param stop_event: Set it to stop watching the task between polls

        :type gateway: :py:class:`~.repacker.gateway.ClusterGateway`
        :type source: str
        :type dest: str
        :type blank_fields: list
        :type keep_routing: bool
        :type asynchronous: bool
        :type slices: int or str
        :type requests_per_second: float
        :type poll_interval: float
        :type timeout: float
        :type stop_event: :py:class:`~.threading.Event`
        """
        self.loggit = logging.getLogger('repacker.actions.copy')
        self.gateway = gateway
        self.source = source
        self.dest = dest
        self.blank_fields = list(blank_fields or [])
        self.keep_routing = keep_routing
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.stop_event = stop_event
        #: The :py:class:`CopyTask` this supervisor reports on
        self.task = CopyTask(
            asynchronous=asynchronous,
            slices=slice_count(slices),
            requests_per_second=requests_per_second,
        )
        if slices is not None and self.task.slices is None:
            debug.lv2('Slice request "%s" left to Elasticsearch', slices)

    def submission(self):
        """
        :returns: The arguments the reindex request is sent with
        :rtype: dict
        """
        return self.gateway.reindex_args(
            source=self.source,
            dest=self.dest,
            blank_fields=self.blank_fields,
            keep_routing=self.keep_routing,
            wait_for_completion=not self.task.asynchronous,
            requests_per_second=self.task.requests_per_second,
            slices=self.task.slices,
        )

    def do_dry_run(self):
        """Log what would be submitted, but take no action."""
        self.loggit.info('DRY-RUN: reindex with arguments: %s', self.submission())

    def do_action(self):
        """
        Run the copy until a terminal status is reached.

        :returns: The finished :py:attr:`task`
        :rtype: :py:class:`CopyTask`
        """
        start = time.monotonic()
        try:
            if self.task.asynchronous:
                self._run_async()
            else:
                self._run_sync()
        except (CopyTimedOut, CopyInterrupted) as err:
            self.task.status = TIMED_OUT if isinstance(err, CopyTimedOut) else INTERRUPTED
            raise
        except CopyError:
            self.task.status = FAILED
            raise
        finally:
            self.task.elapsed = time.monotonic() - start
        self.task.status = COMPLETED
        self.loggit.info(
            'Copy from "%s" to "%s" completed in %.1f seconds.',
            self.source,
            self.dest,
            self.task.elapsed,
        )
        return self.task

    def _submit(self, request_timeout=None):
        args = self.submission()
        self.loggit.debug('REINDEX: %s', args)
        try:
            return self.gateway.submit_reindex(args, request_timeout=request_timeout)
        except GatewayError as err:
            raise CopySubmissionFailed(
                f'Reindex from "{self.source}" to "{self.dest}" was rejected: {err}'
            ) from err

    def _run_async(self):
        self.loggit.info('Submitting background reindex of "%s"', self.source)
        response = self._submit()
        task_id = response.get('task') if response else None
        if not task_id:
            raise NoTaskHandle(f'Reindex response contained no task id: {response}')
        self.task.task_id = task_id
        self.loggit.info('Reindex task id: %s', task_id)
        self.task.polls = wait_for_task(
            self.gateway,
            task_id,
            poll_interval=self.poll_interval,
            timeout=self.timeout,
            stop_event=self.stop_event,
        )

    def _run_sync(self):
        self.loggit.info('Reindexing "%s" and waiting for the response', self.source)
        response = self._submit(request_timeout=self.timeout)
        failures = response.get('failures', [])
        if failures:
            raise CopyFailed(f'Failures found in reindex response: {failures}')
        if response.get('timed_out', False):
            raise CopyFailed('Reindex reported timed_out=true')
        self.loggit.info(
            'Reindex created %s of %s documents', response.get('created'), response.get('total')
        )
