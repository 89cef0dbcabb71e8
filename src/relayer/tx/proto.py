"""
Protobuf messages for Cosmos-SDK transactions.

Hand-maintained betterproto definitions of the subset of the
``cosmos.tx.v1beta1``, ``cosmos.bank.v1beta1`` and ``terra.wasm.v1beta1``
schemas the relayer needs. Field numbers follow the upstream ``.proto`` files.
"""

from dataclasses import dataclass
from typing import List

import betterproto

MSG_SEND_TYPE_URL = "/cosmos.bank.v1beta1.MsgSend"
MSG_EXECUTE_CONTRACT_TYPE_URL = "/terra.wasm.v1beta1.MsgExecuteContract"
SECP256K1_PUBKEY_TYPE_URL = "/cosmos.crypto.secp256k1.PubKey"


class SignMode(betterproto.Enum):
    SIGN_MODE_UNSPECIFIED = 0
    SIGN_MODE_DIRECT = 1


@dataclass(eq=False, repr=False)
class ProtoAny(betterproto.Message):
    """``google.protobuf.Any``"""
    type_url: str = betterproto.string_field(1)
    value: bytes = betterproto.bytes_field(2)


@dataclass(eq=False, repr=False)
class ProtoCoin(betterproto.Message):
    denom: str = betterproto.string_field(1)
    amount: str = betterproto.string_field(2)


@dataclass(eq=False, repr=False)
class MsgSend(betterproto.Message):
    from_address: str = betterproto.string_field(1)
    to_address: str = betterproto.string_field(2)
    amount: List[ProtoCoin] = betterproto.message_field(3)


@dataclass(eq=False, repr=False)
class MsgExecuteContract(betterproto.Message):
    sender: str = betterproto.string_field(1)
    contract: str = betterproto.string_field(2)
    execute_msg: bytes = betterproto.bytes_field(3)
    coins: List[ProtoCoin] = betterproto.message_field(4)


@dataclass(eq=False, repr=False)
class PubKey(betterproto.Message):
    key: bytes = betterproto.bytes_field(1)


@dataclass(eq=False, repr=False)
class ModeInfoSingle(betterproto.Message):
    mode: SignMode = betterproto.enum_field(1)


@dataclass(eq=False, repr=False)
class ModeInfo(betterproto.Message):
    single: ModeInfoSingle = betterproto.message_field(1)


@dataclass(eq=False, repr=False)
class SignerInfo(betterproto.Message):
    public_key: ProtoAny = betterproto.message_field(1)
    mode_info: ModeInfo = betterproto.message_field(2)
    sequence: int = betterproto.uint64_field(3)


@dataclass(eq=False, repr=False)
class ProtoFee(betterproto.Message):
    amount: List[ProtoCoin] = betterproto.message_field(1)
    gas_limit: int = betterproto.uint64_field(2)


@dataclass(eq=False, repr=False)
class AuthInfo(betterproto.Message):
    signer_infos: List[SignerInfo] = betterproto.message_field(1)
    fee: ProtoFee = betterproto.message_field(2)


@dataclass(eq=False, repr=False)
class TxBody(betterproto.Message):
    messages: List[ProtoAny] = betterproto.message_field(1)
    memo: str = betterproto.string_field(2)


@dataclass(eq=False, repr=False)
class SignDoc(betterproto.Message):
    body_bytes: bytes = betterproto.bytes_field(1)
    auth_info_bytes: bytes = betterproto.bytes_field(2)
    chain_id: str = betterproto.string_field(3)
    account_number: int = betterproto.uint64_field(4)


@dataclass(eq=False, repr=False)
class TxRaw(betterproto.Message):
    body_bytes: bytes = betterproto.bytes_field(1)
    auth_info_bytes: bytes = betterproto.bytes_field(2)
    signatures: List[bytes] = betterproto.bytes_field(3)
