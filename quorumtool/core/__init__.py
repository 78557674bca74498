from . import (aiohttp,
               plain)
from .addresses import NameFormat
from .channels import (AddressChannel,
                       ConfigurationStore,
                       Daemon,
                       MembershipChannel,
                       VoteChannel)
from .dispatcher import (CommandKind,
                         Intent,
                         Session,
                         VoteCommandUnavailable,
                         dispatch,
                         run,
                         to_intent)
from .errors import (ChannelError,
                     CommandError,
                     ConnectError,
                     NotConfigured,
                     NotVoteProvider,
                     QueryError,
                     QuorumToolError,
                     WaitCancelled,
                     WaitTimeout)
from .hints import (NodeId,
                    RingId)
from .report import NodeIdFormat
from .status import Status
from .view import ClusterView
from .vote_info import (NodeVoteInfo,
                        VoteFlag)
