"""
Transaction Signer - handles transaction encoding and signing.

Manages the relayer's signing key and produces ``SIGN_MODE_DIRECT``
signed transactions.
"""

import hashlib
import json
from typing import List, Optional

import structlog
from bip_utils import (
    Bip32Secp256k1,
    Bip39MnemonicGenerator,
    Bip39MnemonicValidator,
    Bip39SeedGenerator,
    Bip39WordsNum,
)
from coincurve import PrivateKey

from relayer.config import RelayerConfig
from relayer.core.address import address_from_public_key
from relayer.core.coins import Coins
from relayer.core.messages import ContractMint, ContractTransfer, OutboundMessage, Transfer
from relayer.node.interface import Fee
from relayer.tx import proto

logger = structlog.get_logger(__name__)

# BIP-44 path for coin type 330 (Terra)
DERIVATION_PATH = "m/44'/330'/0'/0/0"


class SignerError(Exception):
    """Raised when key material is missing or invalid."""
    pass


def pack_message(msg: OutboundMessage) -> proto.ProtoAny:
    """
    Encode an outbound message as a protobuf ``Any``.

    Args:
        msg: Message to encode

    Returns:
        Packed message

    Raises:
        TypeError: If the message kind is unknown
    """
    if isinstance(msg, Transfer):
        body = proto.MsgSend(
            from_address=msg.from_address,
            to_address=msg.to_address,
            amount=[proto.ProtoCoin(denom=msg.coin.denom, amount=f"{msg.coin.amount:f}")],
        )
        return proto.ProtoAny(type_url=proto.MSG_SEND_TYPE_URL, value=bytes(body))

    if isinstance(msg, (ContractTransfer, ContractMint)):
        body = proto.MsgExecuteContract(
            sender=msg.from_address,
            contract=msg.contract,
            execute_msg=json.dumps(msg.execute_msg(), separators=(",", ":")).encode("utf-8"),
            coins=[],
        )
        return proto.ProtoAny(type_url=proto.MSG_EXECUTE_CONTRACT_TYPE_URL, value=bytes(body))

    raise TypeError(f"Unsupported message type: {type(msg).__name__}")


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _proto_coins(coins: Coins) -> List[proto.ProtoCoin]:
    return [proto.ProtoCoin(denom=c.denom, amount=f"{c.amount:f}") for c in coins]


class TransactionSigner:
    """
    Handles transaction signing with the relayer's key.

    The key is derived from a BIP-39 mnemonic, either given directly or read
    from the configuration.
    """

    def __init__(self, config: RelayerConfig):
        """
        Initialize the transaction signer.

        Args:
            config: Relayer configuration
        """
        self.config = config
        self._private_key: Optional[PrivateKey] = None
        self._public_key: Optional[bytes] = None
        self._address: Optional[str] = None

    def load_mnemonic(self, words: str) -> None:
        """
        Derive the signing key from a mnemonic.

        Args:
            words: BIP-39 mnemonic phrase

        Raises:
            SignerError: If the mnemonic is not valid
        """
        words = " ".join(words.split())
        if not Bip39MnemonicValidator().IsValid(words):
            raise SignerError("Invalid mnemonic")

        seed = Bip39SeedGenerator(words).Generate()
        node = Bip32Secp256k1.FromSeed(seed).DerivePath(DERIVATION_PATH)

        self._private_key = PrivateKey(node.PrivateKey().Raw().ToBytes())
        self._public_key = node.PublicKey().RawCompressed().ToBytes()
        self._address = address_from_public_key(self._public_key, self.config.address_prefix)

        logger.info("signing_key_loaded", address=self._address)

    def load_from_config(self) -> None:
        """Load signing key from configuration."""
        if not self.config.mnemonic_value:
            raise SignerError("No mnemonic configured")
        self.load_mnemonic(self.config.mnemonic_value)

    @property
    def address(self) -> Optional[str]:
        """Get the relayer's account address."""
        return self._address

    @property
    def public_key(self) -> Optional[bytes]:
        """Get the compressed public key."""
        return self._public_key

    @property
    def is_loaded(self) -> bool:
        """Check if a signing key is loaded."""
        return self._private_key is not None

    def sign(self, message: bytes) -> bytes:
        """
        Sign bytes with the relayer key.

        Returns:
            64-byte compact ``r || s`` signature over SHA-256 of ``message``
        """
        if not self._private_key:
            raise SignerError("No signing key loaded")
        return self._private_key.sign_recoverable(message, hasher=_sha256)[:64]

    def encode_transaction(
        self,
        msgs: List[OutboundMessage],
        sequence: int,
        fee: Fee,
        account_number: int,
        sign: bool = True,
    ) -> bytes:
        """
        Encode (and optionally sign) a transaction.

        Args:
            msgs: Messages to include
            sequence: Account sequence
            fee: Fee to attach
            account_number: On-chain account number of the relayer
            sign: When False an empty signature is attached, as simulation expects

        Returns:
            Encoded ``TxRaw`` bytes
        """
        if not self._public_key:
            raise SignerError("No signing key loaded")

        body_bytes = bytes(proto.TxBody(messages=[pack_message(m) for m in msgs], memo=""))

        signer_info = proto.SignerInfo(
            public_key=proto.ProtoAny(
                type_url=proto.SECP256K1_PUBKEY_TYPE_URL,
                value=bytes(proto.PubKey(key=self._public_key)),
            ),
            mode_info=proto.ModeInfo(single=proto.ModeInfoSingle(mode=proto.SignMode.SIGN_MODE_DIRECT)),
            sequence=sequence,
        )
        auth_info_bytes = bytes(proto.AuthInfo(
            signer_infos=[signer_info],
            fee=proto.ProtoFee(amount=_proto_coins(fee.amount), gas_limit=fee.gas_limit),
        ))

        signature = b""
        if sign:
            sign_doc = proto.SignDoc(
                body_bytes=body_bytes,
                auth_info_bytes=auth_info_bytes,
                chain_id=self.config.chain_id,
                account_number=account_number,
            )
            signature = self.sign(bytes(sign_doc))
            logger.debug("transaction_signed", sequence=sequence, messages=len(msgs))

        return bytes(proto.TxRaw(
            body_bytes=body_bytes,
            auth_info_bytes=auth_info_bytes,
            signatures=[signature],
        ))


def generate_test_signer(config: RelayerConfig) -> TransactionSigner:
    """
    Create a signer with a fresh random mnemonic.

    WARNING: Do not use in production. The mnemonic is not persisted.
    """
    signer = TransactionSigner(config)
    words = Bip39MnemonicGenerator().FromWordsNumber(Bip39WordsNum.WORDS_NUM_24)
    signer.load_mnemonic(words.ToStr())

    logger.warning("test_key_generated", address=signer.address)

    return signer
