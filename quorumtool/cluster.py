from .core import (AddressChannel,
                   ChannelError,
                   ClusterView,
                   CommandError,
                   CommandKind,
                   ConfigurationStore,
                   ConnectError,
                   Daemon,
                   Intent,
                   MembershipChannel,
                   NameFormat,
                   NodeId,
                   NodeIdFormat,
                   NodeVoteInfo,
                   NotConfigured,
                   NotVoteProvider,
                   QueryError,
                   QuorumToolError,
                   RingId,
                   Session,
                   Status,
                   VoteChannel,
                   VoteCommandUnavailable,
                   VoteFlag,
                   WaitCancelled,
                   WaitTimeout,
                   aiohttp,
                   dispatch,
                   plain,
                   run,
                   to_intent)

AddressChannel = AddressChannel
ChannelError = ChannelError
ClusterView = ClusterView
CommandError = CommandError
CommandKind = CommandKind
ConfigurationStore = ConfigurationStore
ConnectError = ConnectError
Daemon = Daemon
Intent = Intent
MembershipChannel = MembershipChannel
NameFormat = NameFormat
NodeId = NodeId
NodeIdFormat = NodeIdFormat
NodeVoteInfo = NodeVoteInfo
NotConfigured = NotConfigured
NotVoteProvider = NotVoteProvider
QueryError = QueryError
QuorumToolError = QuorumToolError
RingId = RingId
Session = Session
Status = Status
VoteChannel = VoteChannel
VoteCommandUnavailable = VoteCommandUnavailable
VoteFlag = VoteFlag
WaitCancelled = WaitCancelled
WaitTimeout = WaitTimeout
aiohttp = aiohttp
dispatch = dispatch
plain = plain
run = run
to_intent = to_intent
