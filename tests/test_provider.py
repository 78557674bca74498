import pytest
from hypothesis import given

from quorumtool.cluster import (NotConfigured,
                                plain)
from quorumtool.core.provider import (PROVIDER_KEY,
                                      PROVIDER_NAME_SIZE,
                                      QUORUM_OBJECT_NAME,
                                      VOTE_PROVIDER_NAME,
                                      get_quorum_provider_name,
                                      using_vote_provider)
from . import strategies


def test_vote_provider() -> None:
    daemon = plain.Daemon(configuration={(QUORUM_OBJECT_NAME, PROVIDER_KEY):
                                             VOTE_PROVIDER_NAME})

    with daemon.connect_store() as store:
        assert get_quorum_provider_name(store) == VOTE_PROVIDER_NAME
        assert using_vote_provider(store)


@given(strategies.non_vote_providers_names)
def test_other_provider(name: str) -> None:
    daemon = plain.Daemon(configuration={(QUORUM_OBJECT_NAME, PROVIDER_KEY):
                                             name})

    with daemon.connect_store() as store:
        assert not using_vote_provider(store)


def test_not_configured() -> None:
    daemon = plain.Daemon()

    with daemon.connect_store() as store:
        with pytest.raises(NotConfigured):
            get_quorum_provider_name(store)
        with pytest.raises(NotConfigured):
            using_vote_provider(store)


def test_truncation() -> None:
    name = 'x' * (2 * PROVIDER_NAME_SIZE)
    daemon = plain.Daemon(configuration={(QUORUM_OBJECT_NAME, PROVIDER_KEY):
                                             name})

    with daemon.connect_store() as store:
        result = get_quorum_provider_name(store)

    assert result == name[:PROVIDER_NAME_SIZE - 1]


def test_truncated_vote_provider_prefix_is_not_vote_provider() -> None:
    daemon = plain.Daemon(configuration={(QUORUM_OBJECT_NAME, PROVIDER_KEY):
                                             VOTE_PROVIDER_NAME + '_v2'})

    with daemon.connect_store() as store:
        assert not using_vote_provider(store)
