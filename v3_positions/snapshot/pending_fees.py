"""
Pending Fees - 포지션별 미수령 수수료

풀 스냅샷의 feeGrowthGlobal, 경계 틱 체크포인트, 포지션의 마지막 inside 값으로
포지션마다 미수령 수수료를 계산합니다.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..config import settings
from ..data.keys import normalize_address
from ..data.types import PoolSnapshot, PositionFeeRecord, PositionPendingFees
from ..math.fee_math import calculate_pending_fees_both_tokens

logger = logging.getLogger(__name__)


def compute_pending_fees(
    snapshot: PoolSnapshot,
    records: Sequence[PositionFeeRecord]
) -> List[PositionPendingFees]:
    """포지션별 미수령 수수료 (최소 단위), 입력 순서 유지

    모든 레코드를 먼저 검증합니다.
    """
    for record in records:
        record.validate()

    results = []
    for record in records:
        position = record.position
        fees = calculate_pending_fees_both_tokens(
            liquidity=record.fee_snapshot.liquidity,
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            current_tick=snapshot.current_tick,
            fee_growth_global_0=snapshot.fee_growth_global_0_x128,
            fee_growth_global_1=snapshot.fee_growth_global_1_x128,
            fee_growth_outside_lower_0=record.lower.fee_growth_outside_0_x128,
            fee_growth_outside_lower_1=record.lower.fee_growth_outside_1_x128,
            fee_growth_outside_upper_0=record.upper.fee_growth_outside_0_x128,
            fee_growth_outside_upper_1=record.upper.fee_growth_outside_1_x128,
            fee_growth_inside_last_0=record.fee_snapshot.fee_growth_inside_0_last_x128,
            fee_growth_inside_last_1=record.fee_snapshot.fee_growth_inside_1_last_x128,
            tokens_owed_0=record.fee_snapshot.tokens_owed_0,
            tokens_owed_1=record.fee_snapshot.tokens_owed_1,
        )
        results.append(PositionPendingFees(
            pool=snapshot.pool_id,
            owner=position.owner,
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            pending_fees_0=fees.pending_fees_0,
            pending_fees_1=fees.pending_fees_1,
        ))
    return results


def format_pending_fees(
    results: Iterable[PositionPendingFees],
    token0_decimals: int,
    token1_decimals: int
) -> List[Dict[str, Any]]:
    """[{pool, owner, tickLower, tickUpper, pendingFees0, pendingFees1}]"""
    return [result.to_dict(token0_decimals, token1_decimals) for result in results]


def positions_pending_fees(
    snapshot: PoolSnapshot,
    records: Sequence[PositionFeeRecord],
    excluded_owners: Optional[Iterable[str]] = None
) -> List[Dict[str, Any]]:
    """풀 스냅샷의 포지션별 미수령 수수료

    Args:
        snapshot: 블록 시점 풀 상태 (feeGrowthGlobal 포함)
        records: 포지션 + 체크포인트 레코드
        excluded_owners: 제외할 소유자, None이면 settings.EXCLUDED_OWNERS

    Returns:
        입력 순서의 결과 딕셔너리 목록
    """
    if excluded_owners is None:
        excluded_owners = settings.EXCLUDED_OWNERS
    excluded = {normalize_address(owner) for owner in excluded_owners}

    kept = [
        record for record in records
        if normalize_address(record.position.owner) not in excluded
    ]
    if len(kept) != len(records):
        logger.debug("excluded %d positions owned by %s", len(records) - len(kept), sorted(excluded))

    results = compute_pending_fees(snapshot, kept)
    logger.info("pool %s: pending fees for %d positions", snapshot.pool_id, len(results))
    return format_pending_fees(results, snapshot.token0_decimals, snapshot.token1_decimals)
