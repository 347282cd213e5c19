"""
Snapshot layer

풀 스냅샷 단위의 계산:
- composition: LP별 token0/token1 구성
- pending_fees: 포지션별 미수령 수수료
"""

from .composition import (
    decompose_position,
    decompose,
    aggregate_by_owner,
    aggregate_in_batches,
    merge_owner_totals,
    format_composition,
    position_composition,
)
from .pending_fees import (
    compute_pending_fees,
    format_pending_fees,
    positions_pending_fees,
)
