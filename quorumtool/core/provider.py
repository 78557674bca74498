from .channels import ConfigurationStore
from .utils import bounded_copy

PROVIDER_KEY = 'provider'
PROVIDER_NAME_SIZE = 256
QUORUM_OBJECT_NAME = 'quorum'
VOTE_PROVIDER_NAME = 'corosync_votequorum'


def get_quorum_provider_name(store: ConfigurationStore) -> str:
    value = store.get_value(QUORUM_OBJECT_NAME, PROVIDER_KEY)
    return bounded_copy(value, PROVIDER_NAME_SIZE)


def using_vote_provider(store: ConfigurationStore) -> bool:
    return get_quorum_provider_name(store) == VOTE_PROVIDER_NAME
