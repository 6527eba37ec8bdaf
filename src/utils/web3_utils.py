import secrets

from eth_abi import decode, encode
from web3 import Web3

from core.constants import ZERO_ADDRESS


def event_topic(signature: str) -> str:
    return Web3.to_hex(Web3.solidity_keccak(["string"], [signature]))


def random_address() -> str:
    return Web3.to_checksum_address("0x" + secrets.token_hex(20))


def random_txhash() -> str:
    return Web3.to_hex(Web3.keccak(secrets.token_bytes(32)))


def normalize_address(address: str) -> str:
    """Checksum ``address``; anything that is not a 20 byte hex address is rejected."""
    if not Web3.is_address(address):
        raise ValueError(f"invalid address {address!r}")
    return Web3.to_checksum_address(address)


def is_zero_address(address) -> bool:
    return address is None or str(address).lower() == ZERO_ADDRESS


def encode_payload(types, values) -> bytes:
    return encode(list(types), list(values))


def decode_payload(types, data: bytes) -> tuple:
    return decode(list(types), data)
