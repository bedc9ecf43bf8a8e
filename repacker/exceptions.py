"""Repacker Exceptions"""


class RepackException(Exception):
    """
    Base class for all exceptions raised by Repacker which are not Elasticsearch
    exceptions.
    """


class ConfigurationError(RepackException):
    """
    Exception raised when a misconfiguration is detected
    """


class GatewayError(RepackException):
    """
    Exception raised when Elasticsearch returns a non-success response to any
    :py:class:`~.repacker.gateway.ClusterGateway` call.

    :param status_code: The HTTP status code, or ``None`` for transport failures
    :param body: The response body (or error text)
    :param call: The name of the gateway call that failed
    """

    def __init__(self, status_code=None, body=None, call=None):
        self.status_code = status_code
        self.body = body
        self.call = call
        super().__init__(f'{call} failed with status {status_code}: {body}')

    @property
    def error_type(self):
        """
        :returns: The ``error.type`` value from :py:attr:`body`, if present
        :rtype: str
        """
        if isinstance(self.body, dict):
            error = self.body.get('error')
            if isinstance(error, dict):
                return error.get('type')
            return error
        return None


class PreconditionFailed(RepackException):
    """
    Exception raised when a safety check fails before any change is made
    """


class IndexMissing(PreconditionFailed):
    """
    Exception raised when the source index does not exist
    """


class RefusedWriteTarget(PreconditionFailed):
    """
    Exception raised when the source index is the write index of the alias
    """


class NoPolicyAttached(PreconditionFailed):
    """
    Exception raised when the source index has no lifecycle policy
    """


class NoDeleteCondition(PreconditionFailed):
    """
    Exception raised when a lifecycle policy has no minimum-age gated delete
    """


class MalformedDuration(RepackException):
    """
    Exception raised when a duration string contains no recognized unit token
    """


class CreateRejected(RepackException):
    """
    Exception raised when Elasticsearch refuses to create the target index
    """


class TargetAlreadyExists(CreateRejected):
    """
    Exception raised when the target index already exists
    """


class CopyError(RepackException):
    """
    Base class for failures of the reindex (copy) step
    """


class CopySubmissionFailed(CopyError):
    """
    Exception raised when the reindex request itself is rejected
    """


class NoTaskHandle(CopyError):
    """
    Exception raised when an asynchronous reindex returns no task id
    """


class CopyTimedOut(CopyError):
    """
    Exception raised when the reindex task does not complete in the allotted time.
    The task is left running.
    """


class CopyFailed(CopyError):
    """
    Exception raised when failures are found in the reindex response
    """


class CopyInterrupted(CopyError):
    """
    Exception raised when a stop signal is received while waiting on the reindex
    task. The task is left running.
    """


class PostCopySettingsFailed(RepackException):
    """
    Exception raised when refresh interval or replica count could not be restored
    on the target index. The data is intact.
    """


class PolicyAttachFailed(RepackException):
    """
    Exception raised when the new lifecycle policy could not be created or attached.
    The target index holds data without a retention guarantee.
    """


class AliasSwapFailed(RepackException):
    """
    Exception raised when the alias update fails. The target index is complete but
    not yet live.
    """
