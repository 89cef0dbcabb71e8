"""
Test suite for key handling and transaction encoding.
"""

import hashlib
import json

import pytest
from coincurve import PublicKey
from pydantic import SecretStr

from relayer.core.address import address_from_public_key, is_valid_address
from relayer.core.coins import Coin, Coins
from relayer.core.messages import ContractMint, ContractTransfer, Transfer
from relayer.node.interface import Fee
from relayer.tx import proto
from relayer.tx.signer import (
    SignerError,
    TransactionSigner,
    generate_test_signer,
    pack_message,
)
from tests.conftest import TEST_MNEMONIC, TOKEN_CONTRACT, WRAPPED_CONTRACT, generate_test_address

ALICE = generate_test_address(2)


# ============================================================================
# Key Management
# ============================================================================

class TestKeyLoading:

    def test_mnemonic_derives_terra_address(self, test_signer):
        assert test_signer.is_loaded
        assert test_signer.address.startswith("terra1")
        assert is_valid_address(test_signer.address)
        assert len(test_signer.public_key) == 33

    def test_derivation_is_deterministic(self, test_config, test_signer):
        other = TransactionSigner(test_config)
        other.load_mnemonic("  " + TEST_MNEMONIC.replace(" ", "   ") + "\n")

        assert other.address == test_signer.address

    def test_address_matches_public_key(self, test_signer):
        assert address_from_public_key(test_signer.public_key) == test_signer.address

    def test_invalid_mnemonic_rejected(self, test_config):
        signer = TransactionSigner(test_config)

        with pytest.raises(SignerError, match="Invalid mnemonic"):
            signer.load_mnemonic("abandon " * 12)

        assert not signer.is_loaded

    def test_load_from_config(self, test_config, test_signer):
        config = test_config.model_copy(update={"mnemonic": SecretStr(TEST_MNEMONIC)})
        signer = TransactionSigner(config)

        signer.load_from_config()

        assert signer.address == test_signer.address

    def test_load_from_config_without_mnemonic(self, test_config):
        with pytest.raises(SignerError, match="No mnemonic"):
            TransactionSigner(test_config).load_from_config()

    def test_generate_test_signer(self, test_config, test_signer):
        signer = generate_test_signer(test_config)

        assert signer.is_loaded
        assert is_valid_address(signer.address)
        assert signer.address != test_signer.address


# ============================================================================
# Signing
# ============================================================================

class TestSigning:

    def test_signature_is_compact(self, test_signer):
        signature = test_signer.sign(b"sign-doc")

        assert len(signature) == 64

    def test_signature_is_deterministic(self, test_signer):
        assert test_signer.sign(b"sign-doc") == test_signer.sign(b"sign-doc")
        assert test_signer.sign(b"sign-doc") != test_signer.sign(b"other-doc")

    def test_signature_verifies(self, test_signer):
        signature = test_signer.sign(b"sign-doc")
        pub = PublicKey(test_signer.public_key)
        der = _compact_to_der(signature)

        assert pub.verify(der, b"sign-doc", hasher=lambda m: hashlib.sha256(m).digest())

    def test_sign_without_key(self, test_config):
        with pytest.raises(SignerError):
            TransactionSigner(test_config).sign(b"sign-doc")

    def test_encode_without_key(self, test_config):
        with pytest.raises(SignerError):
            TransactionSigner(test_config).encode_transaction([], 0, Fee(gas_limit=1, amount=Coins()), 0)


def _compact_to_der(signature: bytes) -> bytes:
    def encode_int(value: bytes) -> bytes:
        value = value.lstrip(b"\x00") or b"\x00"
        if value[0] & 0x80:
            value = b"\x00" + value
        return b"\x02" + bytes([len(value)]) + value

    body = encode_int(signature[:32]) + encode_int(signature[32:])
    return b"\x30" + bytes([len(body)]) + body


# ============================================================================
# Transaction Encoding
# ============================================================================

class TestEncoding:

    def _decode(self, tx: bytes):
        raw = proto.TxRaw().parse(tx)
        body = proto.TxBody().parse(raw.body_bytes)
        auth_info = proto.AuthInfo().parse(raw.auth_info_bytes)
        return raw, body, auth_info

    def test_encodes_all_message_kinds(self, test_signer):
        sender = test_signer.address
        msgs = [
            Transfer(from_address=sender, to_address=ALICE, coin=Coin("uusd", 1_990_000)),
            ContractTransfer(from_address=sender, contract=TOKEN_CONTRACT, recipient=ALICE, amount=7_000_000),
            ContractMint(from_address=sender, contract=WRAPPED_CONTRACT, recipient=ALICE, amount=5),
        ]
        fee = Fee(gas_limit=300_000, amount=Coins({"uusd": 55_000}))

        _, body, _ = self._decode(test_signer.encode_transaction(msgs, 11, fee, 42))

        assert [m.type_url for m in body.messages] == [
            proto.MSG_SEND_TYPE_URL,
            proto.MSG_EXECUTE_CONTRACT_TYPE_URL,
            proto.MSG_EXECUTE_CONTRACT_TYPE_URL,
        ]

        send = proto.MsgSend().parse(body.messages[0].value)
        assert send.from_address == sender
        assert send.to_address == ALICE
        assert [(c.denom, c.amount) for c in send.amount] == [("uusd", "1990000")]

        transfer = proto.MsgExecuteContract().parse(body.messages[1].value)
        assert transfer.sender == sender
        assert transfer.contract == TOKEN_CONTRACT
        assert json.loads(transfer.execute_msg) == {"transfer": {"recipient": ALICE, "amount": "7000000"}}

        mint = proto.MsgExecuteContract().parse(body.messages[2].value)
        assert mint.contract == WRAPPED_CONTRACT
        assert json.loads(mint.execute_msg) == {"mint": {"recipient": ALICE, "amount": "5"}}

    def test_fee_and_sequence_in_auth_info(self, test_signer):
        fee = Fee(gas_limit=300_000, amount=Coins({"uusd": 55_000, "ukrw": 5_000}))
        msgs = [Transfer(from_address=test_signer.address, to_address=ALICE, coin=Coin("uusd", 1))]

        _, _, auth_info = self._decode(test_signer.encode_transaction(msgs, 11, fee, 42))

        assert auth_info.fee.gas_limit == 300_000
        assert [(c.denom, c.amount) for c in auth_info.fee.amount] == [("ukrw", "5000"), ("uusd", "55000")]
        signer_info = auth_info.signer_infos[0]
        assert signer_info.sequence == 11
        assert signer_info.mode_info.single.mode == proto.SignMode.SIGN_MODE_DIRECT
        assert proto.PubKey().parse(signer_info.public_key.value).key == test_signer.public_key

    def test_signature_covers_sign_doc(self, test_signer, test_config):
        msgs = [Transfer(from_address=test_signer.address, to_address=ALICE, coin=Coin("uusd", 1))]
        fee = Fee(gas_limit=100_000, amount=Coins({"uusd": 15_000}))

        raw, _, _ = self._decode(test_signer.encode_transaction(msgs, 3, fee, 42))

        sign_doc = proto.SignDoc(
            body_bytes=raw.body_bytes,
            auth_info_bytes=raw.auth_info_bytes,
            chain_id=test_config.chain_id,
            account_number=42,
        )
        assert raw.signatures == [test_signer.sign(bytes(sign_doc))]

    def test_unsigned_encoding_has_empty_signature(self, test_signer):
        msgs = [Transfer(from_address=test_signer.address, to_address=ALICE, coin=Coin("uusd", 1))]

        raw, _, _ = self._decode(
            test_signer.encode_transaction(msgs, 3, Fee(gas_limit=0, amount=Coins()), 42, sign=False)
        )

        assert raw.signatures == [b""]

    def test_unknown_message_rejected(self):
        with pytest.raises(TypeError, match="Unsupported message type"):
            pack_message(object())
