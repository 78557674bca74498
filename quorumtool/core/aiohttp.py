import json as _json
from asyncio import (AbstractEventLoop as _AbstractEventLoop,
                     Queue as _Queue,
                     Task as _Task,
                     TimeoutError as _TimeoutError,
                     gather as _gather,
                     new_event_loop as _new_event_loop,
                     wait_for as _wait_for)
from collections import deque as _deque
from typing import (Any as _Any,
                    Deque as _Deque,
                    Dict as _Dict,
                    List as _List,
                    Optional as _Optional,
                    Type as _Type)

from aiohttp import (ClientError as _ClientError,
                     ClientSession as _ClientSession,
                     ClientTimeout as _ClientTimeout,
                     ClientWebSocketResponse as _ClientWebSocketResponse,
                     WSMsgType as _WSMsgType,
                     hdrs as _hdrs)
from reprit import seekers as _seekers
from reprit.base import generate_repr as _generate_repr
from yarl import URL as _URL

from .channels import (AddressChannel as _AddressChannel,
                       ConfigurationStore as _ConfigurationStore,
                       Daemon as _Daemon,
                       MembershipChannel as _MembershipChannel,
                       VoteChannel as _VoteChannel)
from .errors import (ChannelError as _ChannelError,
                     CommandError as _CommandError,
                     ConnectError as _ConnectError,
                     NotConfigured as _NotConfigured,
                     NotVoteProvider as _NotVoteProvider,
                     QueryError as _QueryError,
                     QuorumToolError as _QuorumToolError)
from .hints import (NodeId as _NodeId,
                    Time as _Time)
from .messages import MessageKind as _MessageKind
from .status import Status as _Status
from .view import (ClusterView as _ClusterView,
                   TrackFlag as _TrackFlag)
from .vote_info import NodeVoteInfo as _NodeVoteInfo


class Daemon(_Daemon):
    __slots__ = '_loop', '_poll_interval', '_request_timeout', '_url'

    def __init__(self,
                 url: _URL,
                 *,
                 poll_interval: _Time = 0.1,
                 request_timeout: _Time = 10) -> None:
        self._poll_interval, self._request_timeout, self._url = (
            poll_interval, request_timeout, url
        )
        self._loop = _new_event_loop()

    __repr__ = _generate_repr(__init__)

    @property
    def poll_interval(self) -> _Time:
        return self._poll_interval

    @property
    def request_timeout(self) -> _Time:
        return self._request_timeout

    @property
    def url(self) -> _URL:
        return self._url

    def close(self) -> None:
        if not self._loop.is_closed():
            self._loop.close()

    def connect_addresses(self) -> 'AddressChannel':
        return AddressChannel.connect(self._url / 'cfg',
                                      loop=self._loop,
                                      operation='corosync_cfg_initialize',
                                      timeout=self._request_timeout)

    def connect_membership(self) -> 'MembershipChannel':
        return MembershipChannel.connect(self._url / 'quorum',
                                         loop=self._loop,
                                         poll_interval=self._poll_interval,
                                         request_timeout=self._request_timeout)

    def connect_store(self) -> 'ConfigurationStore':
        return ConfigurationStore.connect(self._url / 'confdb',
                                          loop=self._loop,
                                          operation='confdb_initialize',
                                          timeout=self._request_timeout)

    def connect_votes(self) -> 'VoteChannel':
        return VoteChannel.connect(self._url / 'votequorum',
                                   loop=self._loop,
                                   operation='votequorum_initialize',
                                   refusal_cls=_NotVoteProvider,
                                   timeout=self._request_timeout)


class _HttpChannel:
    __slots__ = '_loop', '_session', '_url'

    def __init__(self,
                 url: _URL,
                 *,
                 loop: _AbstractEventLoop,
                 session: _ClientSession) -> None:
        self._loop, self._session, self._url = loop, session, url

    __repr__ = _generate_repr(__init__,
                              field_seeker=_seekers.complex_)

    @classmethod
    def connect(cls,
                url: _URL,
                *,
                loop: _AbstractEventLoop,
                operation: str,
                refusal_cls: _Type[_ConnectError] = _ConnectError,
                timeout: _Time) -> '_HttpChannel':
        session = loop.run_until_complete(
                _create_session(_ClientTimeout(total=timeout))
        )
        self = cls(url,
                   loop=loop,
                   session=session)
        try:
            self._request(_hdrs.METH_GET, url,
                          error_cls=_ConnectError,
                          operation=operation,
                          refusal_cls=refusal_cls)
        except _QuorumToolError:
            self.close()
            raise
        return self

    def close(self) -> None:
        if not self._session.closed:
            self._loop.run_until_complete(self._session.close())

    def _request(self,
                 method: str,
                 url: _URL,
                 *,
                 error_cls: _Type[_QuorumToolError],
                 operation: str,
                 payload: _Optional[_Dict[str, _Any]] = None,
                 refusal_cls: _Optional[_Type[_QuorumToolError]] = None
                 ) -> _Dict[str, _Any]:
        try:
            reply = self._loop.run_until_complete(
                    _request_json(self._session, method, url, payload)
            )
        except _TimeoutError:
            raise error_cls(operation, _Status.ERR_TIMEOUT)
        except (_ClientError, OSError, ValueError):
            raise error_cls(operation, _Status.ERR_LIBRARY)
        if not isinstance(reply, dict):
            raise error_cls(operation, _Status.ERR_MESSAGE_ERROR)
        status = _Status.from_json(reply.get('status',
                                             _Status.ERR_MESSAGE_ERROR))
        if status is not _Status.OK:
            raise (error_cls
                   if refusal_cls is None
                   else refusal_cls)(operation, status)
        return reply


class AddressChannel(_HttpChannel, _AddressChannel):
    __slots__ = ()

    def get_node_addresses(self,
                           node_id: _NodeId,
                           max_count: int) -> _List[str]:
        operation = 'corosync_cfg_get_node_addrs'
        reply = self._request(_hdrs.METH_GET,
                              (self._url / 'nodes' / str(node_id)
                               / 'addresses').with_query(max=max_count),
                              error_cls=_QueryError,
                              operation=operation)
        addresses = reply.get('addresses')
        if (not isinstance(addresses, list)
                or not all(isinstance(address, str)
                           for address in addresses)):
            raise _QueryError(operation, _Status.ERR_MESSAGE_ERROR)
        return addresses[:max_count]


class ConfigurationStore(_HttpChannel, _ConfigurationStore):
    __slots__ = ()

    def get_value(self, object_name: str, key: str) -> str:
        operation = 'confdb_key_get'
        reply = self._request(_hdrs.METH_GET,
                              self._url / object_name / key,
                              error_cls=_NotConfigured,
                              operation=operation)
        value = reply.get('value')
        if not isinstance(value, str):
            raise _NotConfigured(operation, _Status.ERR_MESSAGE_ERROR)
        return value


class VoteChannel(_HttpChannel, _VoteChannel):
    __slots__ = ()

    def get_info(self, node_id: _NodeId) -> _NodeVoteInfo:
        operation = 'votequorum_getinfo'
        reply = self._request(_hdrs.METH_GET,
                              self._url / 'nodes' / str(node_id),
                              error_cls=_QueryError,
                              operation=operation)
        try:
            return _NodeVoteInfo.from_json(**reply['info'])
        except (KeyError, TypeError):
            raise _QueryError(operation, _Status.ERR_MESSAGE_ERROR)

    def set_expected(self, expected_votes: int) -> None:
        self._request(_hdrs.METH_PUT,
                      self._url / 'expected',
                      error_cls=_CommandError,
                      operation='votequorum_setexpected',
                      payload={'expected_votes': expected_votes})

    def set_votes(self, node_id: _NodeId, votes: int) -> None:
        self._request(_hdrs.METH_PUT,
                      self._url / 'nodes' / str(node_id) / 'votes',
                      error_cls=_CommandError,
                      operation='votequorum_setvotes',
                      payload={'votes': votes})


class MembershipChannel(_MembershipChannel):
    __slots__ = ('_frames', '_loop', '_pending', '_poll_interval', '_reader',
                 '_request_timeout', '_session', '_websocket')

    def __init__(self,
                 *,
                 frames: _Queue,
                 loop: _AbstractEventLoop,
                 poll_interval: _Time,
                 request_timeout: _Time,
                 session: _ClientSession,
                 websocket: _ClientWebSocketResponse) -> None:
        super().__init__()
        (
            self._frames, self._loop, self._poll_interval,
            self._request_timeout, self._session, self._websocket
        ) = frames, loop, poll_interval, request_timeout, session, websocket
        self._pending: _Deque[_Dict[str, _Any]] = _deque()
        self._reader: _Task = self._loop.create_task(self._read())

    __repr__ = _generate_repr(__init__,
                              field_seeker=_seekers.complex_)

    @classmethod
    def connect(cls,
                url: _URL,
                *,
                loop: _AbstractEventLoop,
                poll_interval: _Time,
                request_timeout: _Time) -> 'MembershipChannel':
        session = loop.run_until_complete(
                _create_session(_ClientTimeout(total=None,
                                               sock_connect=request_timeout))
        )
        try:
            websocket = loop.run_until_complete(
                    _wait_for(session.ws_connect(url), request_timeout)
            )
        except (_ClientError, OSError, _TimeoutError):
            loop.run_until_complete(session.close())
            raise _ConnectError('quorum_initialize', _Status.ERR_LIBRARY)
        return cls(frames=loop.run_until_complete(_create_queue()),
                   loop=loop,
                   poll_interval=poll_interval,
                   request_timeout=request_timeout,
                   session=session,
                   websocket=websocket)

    def _close(self) -> None:
        try:
            self._loop.run_until_complete(self._websocket.close())
        finally:
            self._reader.cancel()
            self._loop.run_until_complete(_gather(self._reader,
                                                  return_exceptions=True))
            self._loop.run_until_complete(self._session.close())
            self._pending.clear()

    def _dispatch_one(self) -> bool:
        if self._pending:
            frame = self._pending.popleft()
        else:
            operation = _MessageKind.NOTIFICATION.operation
            try:
                frame = self._loop.run_until_complete(
                        _wait_for(self._next_frame(operation),
                                  self._poll_interval)
                )
            except _TimeoutError:
                return False
        self._process(frame)
        return True

    def _get_quorate(self) -> bool:
        reply = self._call(_MessageKind.GET_QUORATE, {})
        try:
            return bool(reply['quorate'])
        except KeyError:
            raise _ChannelError(_MessageKind.GET_QUORATE.operation,
                                _Status.ERR_MESSAGE_ERROR)

    def _track_start(self, flags: _TrackFlag) -> None:
        self._call(_MessageKind.TRACK_START, {'flags': int(flags)})

    def _track_stop(self) -> None:
        self._call(_MessageKind.TRACK_STOP, {})

    def _call(self,
              kind: _MessageKind,
              message: _Dict[str, _Any]) -> _Dict[str, _Any]:
        operation = kind.operation
        try:
            reply = self._loop.run_until_complete(
                    _wait_for(self._exchange(kind, message),
                              self._request_timeout)
            )
        except _TimeoutError:
            raise _ChannelError(operation, _Status.ERR_TIMEOUT)
        except (_ClientError, OSError):
            raise _ChannelError(operation, _Status.ERR_LIBRARY)
        if not isinstance(reply, dict):
            raise _ChannelError(operation, _Status.ERR_MESSAGE_ERROR)
        status = _Status.from_json(reply.get('status',
                                             _Status.ERR_MESSAGE_ERROR))
        if status is not _Status.OK:
            raise _ChannelError(operation, status)
        return reply

    async def _exchange(self,
                        kind: _MessageKind,
                        message: _Dict[str, _Any]) -> _Any:
        await self._websocket.send_json({'kind': int(kind),
                                         'message': message})
        while True:
            frame = await self._next_frame(kind.operation)
            if frame.get('kind') == kind:
                return frame.get('message')
            self._pending.append(frame)

    async def _next_frame(self, operation: str) -> _Dict[str, _Any]:
        raw_frame = await self._frames.get()
        if raw_frame is None:
            self._frames.put_nowait(None)
            raise _ChannelError(operation, _Status.ERR_LIBRARY)
        try:
            frame = _json.loads(raw_frame)
        except ValueError:
            raise _ChannelError(operation, _Status.ERR_MESSAGE_ERROR)
        if not isinstance(frame, dict):
            raise _ChannelError(operation, _Status.ERR_MESSAGE_ERROR)
        return frame

    def _process(self, frame: _Dict[str, _Any]) -> None:
        if frame.get('kind') != _MessageKind.NOTIFICATION:
            return
        try:
            view = _ClusterView.from_json(**frame['message'])
        except (KeyError, TypeError):
            raise _ChannelError(_MessageKind.NOTIFICATION.operation,
                                _Status.ERR_MESSAGE_ERROR)
        self.mailbox.deliver(view)

    async def _read(self) -> None:
        try:
            async for message in self._websocket:
                if message.type is not _WSMsgType.TEXT:
                    break
                self._frames.put_nowait(message.data)
        finally:
            self._frames.put_nowait(None)


async def _create_queue() -> _Queue:
    return _Queue()


async def _create_session(timeout: _ClientTimeout) -> _ClientSession:
    return _ClientSession(timeout=timeout)


async def _request_json(session: _ClientSession,
                        method: str,
                        url: _URL,
                        payload: _Optional[_Dict[str, _Any]]) -> _Any:
    async with session.request(method, url,
                               json=payload) as response:
        return await response.json(content_type=None)
