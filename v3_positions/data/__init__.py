"""
Data layer

외부 수집기가 넘겨주는 스냅샷 레코드 타입과 주소/키 헬퍼
"""

from .types import (
    PoolSnapshot,
    TickCheckpoint,
    Position,
    PositionFeeSnapshot,
    PositionFeeRecord,
    OwnerAmounts,
    PositionPendingFees,
)
from .keys import normalize_address, position_key
