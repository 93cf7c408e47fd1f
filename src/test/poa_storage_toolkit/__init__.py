"""
POA Storage Toolkit - POA代理合约原始存储校验

直接读取代理合约的存储槽, 按版本化偏移表还原各层字段,
并在生命周期各检查点断言存储状态:
- storage_layout: 偏移表、存储字解码、mapping槽位计算
- storage_access: 存储读取、registry查询、本地链控制
- snapshot: proxy common / common / token 三层解析
- lifecycle: 默认值与阶段推进
- invariant_checking: 检查点校验
"""

from .errors import (
    CheckpointAssertionError,
    LifecycleTransitionError,
    PoaStorageError,
    SlotDecodeError,
    StorageReadError,
)
from .storage_layout import Stage
from .storage_access import AnvilManager, ContractRegistryClient, StorageReader, StorageSlot
from .snapshot import ContractSnapshot, parse_common, parse_proxy_common, parse_snapshot, parse_token
from .lifecycle import LifecycleOracle, PoaActors
from .invariant_checking import CHECKPOINTS, InvariantChecker

__version__ = "1.0.0"

__all__ = [
    "CheckpointAssertionError",
    "LifecycleTransitionError",
    "PoaStorageError",
    "SlotDecodeError",
    "StorageReadError",
    "Stage",
    "AnvilManager",
    "ContractRegistryClient",
    "StorageReader",
    "StorageSlot",
    "ContractSnapshot",
    "parse_common",
    "parse_proxy_common",
    "parse_snapshot",
    "parse_token",
    "LifecycleOracle",
    "PoaActors",
    "CHECKPOINTS",
    "InvariantChecker",
]
