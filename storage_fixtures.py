"""
测试用内存链

不依赖节点, 按POA布局构造各检查点的存储字, 供单元测试使用。
"""

import sys
from pathlib import Path
from typing import Dict, Optional

sys.path.insert(0, str(Path(__file__).parent / "src" / "test"))

from web3 import Web3

from poa_storage_toolkit.lifecycle import poa_defaults as defaults
from poa_storage_toolkit.lifecycle.poa_defaults import PoaActors
from poa_storage_toolkit.storage_layout import MappingSlotCalculator, Stage, pad_address_word
from poa_storage_toolkit.storage_layout.layout_tables import (
    ALLOWED_SLOT,
    FUNDED_ETH_AMOUNT_PER_USER_IN_WEI_SLOT,
)


def _addr(byte_hex: str) -> str:
    return Web3.to_checksum_address('0x' + byte_hex * 20)


POA_ADDRESS = _addr('c0')
REGISTRY_ADDRESS = _addr('ae')
MANAGER_ADDRESS = _addr('9f')
TOKEN_MASTER = _addr('7b')
CROWDSALE_MASTER = _addr('cd')
UPGRADED_TOKEN_MASTER = _addr('e5')

ACTORS = PoaActors(
    owner=_addr('01'),
    broker=_addr('b1'),
    custodian=_addr('c2'),
    whitelisted_buyers=(_addr('d4'), _addr('a5'), _addr('f6')),
)

FUNDING_START_TIME = 1700000000
# 唯一买家买下全部代币, 总额等于其个人投入
FUNDED_ETH_AMOUNT_IN_WEI = defaults.expected_investment_in_wei()


def uint_word(value: int) -> bytes:
    return value.to_bytes(32, byteorder='big')


def registry_stage_word(registry: str, stage: Stage) -> bytes:
    """slot 2: 低20字节 registry, 紧随其后一个字节 stage"""
    word = bytearray(pad_address_word(registry))
    word[11] = int(stage)
    return bytes(word)


def status_flags_word(crowdsale_initialized: bool, fee_paid: bool, token_initialized: bool, paused: bool) -> bytes:
    word = bytearray(32)
    word[28] = int(crowdsale_initialized)
    word[29] = int(fee_paid)
    word[30] = int(token_initialized)
    word[31] = int(paused)
    return bytes(word)


def upgrade_flags_word(is_upgraded: bool, whitelist_transfers: bool) -> bytes:
    word = bytearray(32)
    word[30] = int(is_upgraded)
    word[31] = int(whitelist_transfers)
    return bytes(word)


def poa_storage(checkpoint: str) -> Dict[int, bytes]:
    """
    构造某个检查点的存储

    Args:
        checkpoint: pre_init / post_init / post_active / post_upgrade
    """
    storage: Dict[int, bytes] = {
        0: pad_address_word(TOKEN_MASTER),
        1: pad_address_word(CROWDSALE_MASTER),
        2: pad_address_word(REGISTRY_ADDRESS),
    }
    if checkpoint == 'pre_init':
        return storage

    active = checkpoint in ('post_active', 'post_upgrade')
    if checkpoint == 'post_upgrade':
        storage[0] = pad_address_word(UPGRADED_TOKEN_MASTER)

    storage.update({
        3: pad_address_word(ACTORS.broker),
        4: pad_address_word(ACTORS.custodian),
        7: uint_word(defaults.DEFAULT_TOTAL_SUPPLY),
        13: status_flags_word(True, active, True, not active),
        14: uint_word(FUNDING_START_TIME),
        15: uint_word(defaults.DEFAULT_FUNDING_TIMEOUT),
        16: uint_word(defaults.DEFAULT_ACTIVATION_TIMEOUT),
        17: defaults.DEFAULT_FIAT_CURRENCY32,
        18: uint_word(defaults.DEFAULT_FUNDING_GOAL),
        20: defaults.DEFAULT_NAME32,
        21: defaults.DEFAULT_SYMBOL32,
        23: pad_address_word(MANAGER_ADDRESS),
    })

    if active:
        calculator = MappingSlotCalculator()
        buyer0, buyer1 = ACTORS.whitelisted_buyers[:2]
        storage.update({
            2: registry_stage_word(REGISTRY_ADDRESS, Stage.Active),
            5: defaults.DEFAULT_IPFS_HASH_ARRAY32[0],
            6: defaults.DEFAULT_IPFS_HASH_ARRAY32[1],
            10: uint_word(FUNDED_ETH_AMOUNT_IN_WEI),
            calculator.calculate_mapping_slot(buyer0, FUNDED_ETH_AMOUNT_PER_USER_IN_WEI_SLOT):
                uint_word(FUNDED_ETH_AMOUNT_IN_WEI),
            calculator.calculate_nested_mapping_slot(buyer0, buyer1, ALLOWED_SLOT):
                uint_word(defaults.DEFAULT_APPROVED_ALLOWANCE),
        })

    if checkpoint == 'post_upgrade':
        storage[28] = upgrade_flags_word(True, False)

    return storage


class FakeEth:
    """只实现 get_storage_at 的 w3.eth"""

    def __init__(self):
        self.storage: Dict[str, Dict[int, bytes]] = {}
        self.error: Optional[Exception] = None
        self.calls = []

    def set_storage(self, address: str, words: Dict[int, bytes]) -> None:
        self.storage[address.lower()] = dict(words)

    def get_storage_at(self, address: str, slot: int) -> bytes:
        self.calls.append((address, slot))
        if self.error is not None:
            raise self.error
        return self.storage.get(address.lower(), {}).get(slot, b'\x00' * 32)


class FakeWeb3:
    def __init__(self):
        self.eth = FakeEth()


class FakeRegistry:
    """registry 句柄: address + get_contract_address"""

    def __init__(self, address: str = REGISTRY_ADDRESS, token_master: str = TOKEN_MASTER,
                 crowdsale_master: str = CROWDSALE_MASTER):
        self.address = address
        self.contracts = {
            'PoaTokenMaster': token_master,
            'PoaCrowdsaleMaster': crowdsale_master,
        }

    def get_contract_address(self, name: str) -> str:
        return self.contracts[name]


class FakeManager:
    def __init__(self, address: str = MANAGER_ADDRESS):
        self.address = address


def fake_chain(checkpoint: str) -> FakeWeb3:
    w3 = FakeWeb3()
    w3.eth.set_storage(POA_ADDRESS, poa_storage(checkpoint))
    return w3
