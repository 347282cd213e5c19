"""
Position Composition - LP별 토큰 구성

풀의 현재 틱 기준으로 각 포지션을 token0/token1 수량으로 분해하고
소유자별로 합산합니다. 10진 문자열 변환은 합산이 모두 끝난 뒤 한 번만 수행합니다.

분해 규칙 (i_c = 현재 틱):
    i_l > i_c:  전부 token0 (비활성)
    i_u < i_c:  전부 token1 (비활성)
    그 외:      token0 = Δx(√P_c, √P_u), token1 = Δy(√P_l, √P_c)
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import settings
from ..data.keys import normalize_address
from ..data.types import OwnerAmounts, PoolSnapshot, Position
from ..math.sqrt_price_math import get_amount0_delta, get_amount1_delta
from ..math.tick_math import get_sqrt_ratio_at_tick

logger = logging.getLogger(__name__)

OwnerTotals = Dict[str, OwnerAmounts]


def decompose_position(
    tick_lower: int,
    tick_upper: int,
    liquidity: int,
    current_tick: int,
    active_only: bool
) -> Tuple[int, int]:
    """포지션을 (amount0, amount1)로 분해 (내림)

    Args:
        tick_lower: 하한 틱
        tick_upper: 상한 틱
        liquidity: 포지션 유동성
        current_tick: 풀의 현재 틱
        active_only: True면 범위 밖 포지션은 (0, 0)

    Returns:
        (amount0, amount1) 최소 단위
    """
    sqrt_lower = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_upper = get_sqrt_ratio_at_tick(tick_upper)

    if tick_lower > current_tick:
        # 범위가 현재 틱 위: token0만 보유
        if active_only:
            return 0, 0
        return get_amount0_delta(sqrt_lower, sqrt_upper, liquidity, False), 0

    if tick_upper < current_tick:
        # 범위가 현재 틱 아래: token1만 보유
        if active_only:
            return 0, 0
        return 0, get_amount1_delta(sqrt_lower, sqrt_upper, liquidity, False)

    sqrt_current = get_sqrt_ratio_at_tick(current_tick)
    amount0 = get_amount0_delta(sqrt_current, sqrt_upper, liquidity, False)
    amount1 = get_amount1_delta(sqrt_lower, sqrt_current, liquidity, False)
    return amount0, amount1


def decompose(position: Position, current_tick: int, active_only: bool) -> Tuple[int, int]:
    """Position 레코드 분해"""
    return decompose_position(
        position.tick_lower,
        position.tick_upper,
        position.liquidity,
        current_tick,
        active_only,
    )


def aggregate_by_owner(
    positions: Iterable[Position],
    current_tick: int,
    active_only: bool = True
) -> OwnerTotals:
    """소유자별 토큰 수량 합산 (최소 단위)

    모든 포지션을 먼저 검증하므로 잘못된 포지션이 있으면
    어떤 합산도 하기 전에 예외가 발생합니다.
    (0, 0)으로 분해되는 포지션은 항목을 만들지 않습니다.
    """
    positions = list(positions)
    for position in positions:
        position.validate()

    totals: OwnerTotals = {}
    for position in positions:
        amount0, amount1 = decompose(position, current_tick, active_only)
        if amount0 == 0 and amount1 == 0:
            logger.debug(
                "skipping empty position %s [%d, %d]",
                position.owner, position.tick_lower, position.tick_upper,
            )
            continue

        owner = normalize_address(position.owner)
        totals.setdefault(owner, OwnerAmounts()).add(amount0, amount1)

    return totals


def merge_owner_totals(*partials: OwnerTotals) -> OwnerTotals:
    """배치별 부분합 병합

    합산은 교환/결합 법칙을 만족하므로 배치 순서와 무관합니다.
    """
    merged: OwnerTotals = {}
    for partial in partials:
        for owner, amounts in partial.items():
            merged.setdefault(owner, OwnerAmounts()).add(amounts.token0, amounts.token1)
    return merged


def aggregate_in_batches(
    positions: Sequence[Position],
    current_tick: int,
    active_only: bool = True,
    batch_size: Optional[int] = None
) -> OwnerTotals:
    """positions를 batch_size 단위로 나누어 합산 후 병합

    결과는 aggregate_by_owner와 같습니다.
    """
    if batch_size is None:
        batch_size = settings.POSITION_BATCH_SIZE
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive: {batch_size}")

    for position in positions:
        position.validate()

    partials: List[OwnerTotals] = [
        aggregate_by_owner(positions[start:start + batch_size], current_tick, active_only)
        for start in range(0, len(positions), batch_size)
    ]
    return merge_owner_totals(*partials)


def format_composition(
    totals: OwnerTotals,
    token0_decimals: int,
    token1_decimals: int
) -> Dict[str, Dict[str, str]]:
    """{owner: {"token0Amount": str, "token1Amount": str}}"""
    return {
        owner: amounts.to_dict(token0_decimals, token1_decimals)
        for owner, amounts in totals.items()
    }


def position_composition(
    snapshot: PoolSnapshot,
    positions: Sequence[Position],
    active_only: Optional[bool] = None
) -> Dict[str, Dict[str, str]]:
    """풀 스냅샷의 LP별 토큰 구성

    Args:
        snapshot: 블록 시점 풀 상태
        positions: 유동성 > 0 인 포지션 목록
        active_only: None이면 settings.ACTIVE_ONLY

    Returns:
        {체크섬 주소: {"token0Amount": str, "token1Amount": str}}
    """
    if active_only is None:
        active_only = settings.ACTIVE_ONLY

    totals = aggregate_in_batches(positions, snapshot.current_tick, active_only)
    logger.info(
        "pool %s: %d positions -> %d providers (tick=%d, active_only=%s)",
        snapshot.pool_id, len(positions), len(totals), snapshot.current_tick, active_only,
    )
    return format_composition(totals, snapshot.token0_decimals, snapshot.token1_decimals)
