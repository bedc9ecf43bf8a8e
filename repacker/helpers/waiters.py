"""The function that waits

...and its helpers
"""

import logging
import signal
import threading
import time
from contextlib import contextmanager
from repacker.exceptions import CopyFailed, CopyInterrupted, CopyTimedOut, GatewayError


def transient(err):
    """
    :param err: A failed task lookup
    :type err: :py:exc:`~.repacker.exceptions.GatewayError`

    :returns: ``True`` if the lookup is worth repeating: no response at all, or a
        5xx status
    :rtype: bool
    """
    return err.status_code is None or err.status_code >= 500


@contextmanager
def stop_on_signal(stop_event):
    """
    While the block runs, SIGINT or SIGTERM sets ``stop_event`` so the poll loop can
    stop watching a copy that keeps running. A second signal raises
    :py:exc:`KeyboardInterrupt`. The previous handlers are restored on exit, so
    outside the block a signal stops the process as usual.

    Handlers can only be installed from the main thread. Elsewhere, or without a
    ``stop_event``, this does nothing.

    :param stop_event: The event to set
    :type stop_event: :py:class:`~.threading.Event`
    """
    if stop_event is None or threading.current_thread() is not threading.main_thread():
        yield
        return
    logger = logging.getLogger(__name__)

    def handler(signum, frame):
        if stop_event.is_set():
            raise KeyboardInterrupt(f'Received signal {signum} again')
        logger.warning(
            'Received signal %s. Stopping after the current poll. Send it again to '
            'exit immediately.',
            signum,
        )
        stop_event.set()

    previous = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
    for sig in previous:
        signal.signal(sig, handler)
    try:
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


def task_check(gateway, task_id):
    """
    Calls :py:meth:`~.repacker.gateway.ClusterGateway.get_task` with ``task_id``. If
    the task data contains ``'completed': True``, return ``True``. Otherwise log the
    progress of the task and return ``False``.

    A completed task whose response lists failures, or which carries an ``error``,
    raises :py:exc:`~.repacker.exceptions.CopyFailed`.

    :param gateway: The cluster gateway
    :param task_id: The task id

    :type gateway: :py:class:`~.repacker.gateway.ClusterGateway`
    :type task_id: str

    :rtype: bool
    """
    logger = logging.getLogger(__name__)
    task_data = gateway.get_task(task_id)
    task = task_data.get('task', {})
    if 'error' in task_data:
        raise CopyFailed(f'Task "{task_id}" failed: {task_data["error"]}')
    if 'response' in task_data:
        failures = task_data['response'].get('failures', [])
        if failures:
            raise CopyFailed(f'Failures found in reindex response: {failures}')
    running_time = 0.000000001 * task.get('running_time_in_nanos', 0)
    if task_data.get('completed', False):
        logger.info('Task "%s" completed after %.1f seconds.', task_id, running_time)
        return True
    status = task.get('status', {})
    logger.info(
        'Task "%s" has been running for %.1f seconds. Copied %s of %s documents.',
        task_id,
        running_time,
        status.get('created', 0) + status.get('updated', 0),
        status.get('total', '?'),
    )
    logger.debug('Full Task Data: %s', task_data)
    return False


def wait_for_task(gateway, task_id, poll_interval=10, timeout=86400, stop_event=None):
    """
    Poll ``task_id`` with :py:func:`task_check` every ``poll_interval`` seconds until
    it completes.

    Neither a timeout nor a stop signal touches the remote task: it keeps running,
    and this function only stops watching it.

    :param gateway: The cluster gateway
    :param task_id: The task id
    :param poll_interval: Seconds to wait between checks
    :param timeout: Give up with :py:exc:`~.repacker.exceptions.CopyTimedOut` once
        this many seconds have elapsed
    :param stop_event: If set while waiting, raise
        :py:exc:`~.repacker.exceptions.CopyInterrupted`. SIGINT and SIGTERM set it
        while this function runs, see :py:func:`stop_on_signal`.

    :type gateway: :py:class:`~.repacker.gateway.ClusterGateway`
    :type task_id: str
    :type poll_interval: float
    :type timeout: float
    :type stop_event: :py:class:`~.threading.Event`

    :returns: The number of polls made
    :rtype: int
    """
    with stop_on_signal(stop_event):
        return _poll(gateway, task_id, poll_interval, timeout, stop_event)


def _poll(gateway, task_id, poll_interval, timeout, stop_event):
    logger = logging.getLogger(__name__)
    start_time = time.monotonic()
    polls = 0
    while True:
        polls += 1
        try:
            done = task_check(gateway, task_id)
        except GatewayError as err:
            if not transient(err):
                raise CopyFailed(f'Unable to check on task "{task_id}": {err}') from err
            logger.warning('Transient error checking task %s: %s', task_id, err)
            done = False
        if done:
            logger.debug('Task %s complete after %s polls', task_id, polls)
            return polls
        elapsed = time.monotonic() - start_time
        if elapsed >= timeout:
            msg = (
                f'Task "{task_id}" did not complete within {timeout} seconds. It has '
                f'NOT been cancelled and is still running.'
            )
            logger.error(msg)
            raise CopyTimedOut(msg)
        logger.debug(
            'Task %s not yet complete, %.1f total seconds elapsed. Waiting %s seconds '
            'before checking again.',
            task_id,
            elapsed,
            poll_interval,
        )
        if stop_event is not None:
            if stop_event.wait(poll_interval):
                msg = (
                    f'Stopped waiting on task "{task_id}". The task has NOT been '
                    f'cancelled and is still running.'
                )
                logger.warning(msg)
                raise CopyInterrupted(msg)
        else:
            time.sleep(poll_interval)
