import enum


class MessageKind(enum.IntEnum):
    GET_QUORATE = 0
    TRACK_START = 1
    TRACK_STOP = 2
    NOTIFICATION = 3

    @property
    def operation(self) -> str:
        return _OPERATIONS[self]


_OPERATIONS = {MessageKind.GET_QUORATE: 'quorum_getquorate',
               MessageKind.TRACK_START: 'quorum_trackstart',
               MessageKind.TRACK_STOP: 'quorum_trackstop',
               MessageKind.NOTIFICATION: 'quorum_dispatch'}
