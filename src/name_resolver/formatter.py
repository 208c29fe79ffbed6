"""Mapping of resolved records to redirect URLs."""

from .enums import RecordType


IPFS_GATEWAY = "https://cloudflare-ipfs.com/ipfs/"
ARWEAVE_GATEWAY = "https://arweave.net/"
SHDW_GATEWAY = "https://shdw-drive.genesysgo.net/"

PREFIXES: dict[RecordType, str] = {
    RecordType.IPFS: IPFS_GATEWAY,
    RecordType.ARWV: ARWEAVE_GATEWAY,
    RecordType.SHDW: SHDW_GATEWAY,
    RecordType.A: "http://",
    RecordType.CNAME: "http://",
}


def format_url(record_type: RecordType, value: str) -> str:
    """Build the redirect target; unlisted types pass the value through."""
    return PREFIXES.get(record_type, "") + value
