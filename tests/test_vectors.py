"""Test vectors for idseal."""

# secp256k1 private keys and their well-known addresses
SIGNER_ONE_SECRET_HEX = "0000000000000000000000000000000000000000000000000000000000000001"
SIGNER_ONE_COMPRESSED_HEX = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
SIGNER_ONE_ADDRESS = "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"

SIGNER_TWO_SECRET_HEX = "0000000000000000000000000000000000000000000000000000000000000002"
SIGNER_TWO_ADDRESS = "0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF"

# Keccak-256 and personal message digests
KECCAK_EMPTY_HEX = "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
HELLO_WORLD_MESSAGE_HASH_HEX = "a1de988600a42c4b4ab089b619297c17d53cffae5d5120d82d8a92d0bb3b78f2"

# EIP-55 checksum example
CHECKSUM_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"

# Principals
ANONYMOUS_TEXT = "2vxsx-fae"
MANAGEMENT_CANISTER_TEXT = "aaaaa-aa"
ALICE_PRINCIPAL = bytes(range(1, 30))
BOB_PRINCIPAL = bytes(range(100, 129))
CAROL_PRINCIPAL = bytes([7] * 10)

# Key-derivation service
MASTER_SEED = bytes([42] * 32)
KEY_NAME = "test_key_1"
CONTEXT = "motoko-show"

SIGNED_MESSAGE = "release 1.2.6 is frozen"

TEST_MESSAGES = {
    "single_char": "X",
    "whitespace": "   \t\n   ",
    "emoji": "Hello \U0001f44b World \U0001f30d",
    "chinese": "你好世界 - Hello World",
    "json": '{"key": "value", "num": 42}',
    "long_text": "The quick brown fox jumps over the lazy dog. " * 40,
}
