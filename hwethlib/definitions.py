# Network definition download

import logging
import requests

from typing import Optional

from .errors import NetworkDefinitionError

LOG = logging.getLogger(__name__)

DEFINITIONS_URL = 'https://data.trezor.io/firmware/eth-definitions/chain-id/{}/network.dat'

def network_definition_url(chain_id: int) -> str:
    return DEFINITIONS_URL.format(chain_id)

def fetch_network_definition(chain_id: int, insecure_derivation: bool = False, session: Optional[requests.Session] = None, timeout: Optional[float] = None) -> Optional[bytes]:
    """
    Download the signed network definition for a chain.

    The device uses it to display the network name and symbol of chains it does not know by itself.
    Without it the device may refuse to derive keys for the chain, so a failed download is only tolerated in insecure derivation mode.

    :param chain_id: The chain id
    :param insecure_derivation: Whether to continue without a definition when it can not be fetched
    :param session: The requests session to use
    :param timeout: Request timeout in seconds
    :return: The encoded network definition, or None when it could not be fetched in insecure derivation mode
    :raises NetworkDefinitionError: if the definition could not be fetched and insecure derivation is not enabled
    """
    url = network_definition_url(chain_id)
    getter = session.get if session is not None else requests.get
    try:
        r = getter(url, timeout=timeout)
        r.raise_for_status()
    except requests.exceptions.RequestException as e:
        if insecure_derivation:
            LOG.warning('Could not fetch network definition for chain {}, continuing without it: {}'.format(chain_id, e))
            return None
        raise NetworkDefinitionError('Could not fetch network definition for chain {}: {}'.format(chain_id, e)) from e
    LOG.debug('Fetched network definition for chain {} ({} bytes)'.format(chain_id, len(r.content)))
    return r.content
