from reprit.base import generate_repr

from .status import Status


class QuorumToolError(Exception):
    def __init__(self, operation: str, status: Status) -> None:
        super().__init__(operation, status)
        self.operation, self.status = operation, status

    __repr__ = generate_repr(__init__)

    def __str__(self) -> str:
        return f'{self.operation} FAILED: {int(self.status)}'


class ConnectError(QuorumToolError):
    pass


class NotVoteProvider(ConnectError):
    def __str__(self) -> str:
        return (f'{super().__str__()}, '
                'this is probably a configuration error')


class NotConfigured(QuorumToolError):
    pass


class QueryError(QuorumToolError):
    pass


class CommandError(QuorumToolError):
    pass


class ChannelError(QuorumToolError):
    pass


class WaitTimeout(ChannelError):
    def __init__(self, operation: str) -> None:
        super().__init__(operation, Status.ERR_TIMEOUT)

    __repr__ = generate_repr(__init__)


class WaitCancelled(ChannelError):
    def __init__(self, operation: str) -> None:
        super().__init__(operation, Status.ERR_INTERRUPT)

    __repr__ = generate_repr(__init__)
