"""
chains/networks.py - Network id to name resolution.
"""

from core.constants import DEV_NETWORK_PREFIX, MAINNET_NETWORK_NAME, NETWORKS

# net_version answers with a decimal string, so look ids up by their text
_NETWORKS_BY_ID = {str(chain_id): name for chain_id, name in NETWORKS.items()}


def get_network_name(network_id: int | str) -> str:
    """
    Resolve a network id (as returned by net_version) to a name.

    Known ids map through NETWORKS; anything else becomes "dev-<id>"
    with the id rendered exactly as given.
    """
    name = _NETWORKS_BY_ID.get(str(network_id))
    if name is None:
        return f"{DEV_NETWORK_PREFIX}{network_id}"
    return name


def is_mainnet_name(name: str) -> bool:
    return name == MAINNET_NETWORK_NAME
