"""
Fee Math - fee growth 체크포인트 기반 미수령 수수료 계산

틱별 feeGrowthOutside 체크포인트와 포지션의 마지막 feeGrowthInside로부터
현재 포지션이 받을 수수료를 계산합니다.

References:
- 백서 Section 6.3: Tick-Indexed State (feeGrowthOutside)
- 백서 Section 6.4.1: Position-Indexed State (uncollected fees)

범위 내 fee growth (f_r), 현재 틱 i_c 기준:
    i_c < i_u, i_c >= i_l:  f_r = f_g - f_o(i_l)
    i_c < i_u, i_c <  i_l:  f_r = f_o(i_l)
    i_c >= i_u:             f_r = f_o(i_u) - f_o(i_l)

미수령 수수료:
    f_u = l × (f_r(t_1) - f_r(t_0)) / 2^128 + tokensOwed

모든 뺄셈은 uint256 랩어라운드로 처리합니다.
"""

from typing import NamedTuple

from ..constants import Q128
from .full_math import mul_div, wrapping_sub


class FeeCalculationResult(NamedTuple):
    """수수료 계산 결과"""
    pending_fees_0: int  # token0 미수령 수수료 (최소 단위)
    pending_fees_1: int  # token1 미수령 수수료 (최소 단위)
    fee_growth_inside_0: int  # 현재 범위 내 fee growth token0
    fee_growth_inside_1: int  # 현재 범위 내 fee growth token1


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """[tick_lower, tick_upper) 범위에 귀속되는 fee growth (f_r)

    i_c가 범위 아래이면 하한 틱 체크포인트 자체가 범위 내 성장분입니다.
    결과는 uint256 (뺄셈은 랩어라운드).
    """
    if current_tick < tick_upper:
        if current_tick >= tick_lower:
            return wrapping_sub(fee_growth_global, fee_growth_outside_lower)
        return fee_growth_outside_lower
    return wrapping_sub(fee_growth_outside_upper, fee_growth_outside_lower)


def pending_fees(
    fee_growth_inside_current: int,
    fee_growth_inside_last: int,
    liquidity: int,
    tokens_owed: int = 0
) -> int:
    """f_u = l × (f_r(t_1) - f_r(t_0)) / 2^128 + tokensOwed (내림)"""
    delta = wrapping_sub(fee_growth_inside_current, fee_growth_inside_last)
    return mul_div(delta, liquidity, Q128) + tokens_owed


def fee_growth_delta(fee_growth_current: int, fee_growth_previous: int) -> int:
    """두 시점 간 fee growth 변화량 (uint256 랩어라운드)"""
    return wrapping_sub(fee_growth_current, fee_growth_previous)


def calculate_pending_fees_both_tokens(
    liquidity: int,
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global_0: int,
    fee_growth_global_1: int,
    fee_growth_outside_lower_0: int,
    fee_growth_outside_lower_1: int,
    fee_growth_outside_upper_0: int,
    fee_growth_outside_upper_1: int,
    fee_growth_inside_last_0: int,
    fee_growth_inside_last_1: int,
    tokens_owed_0: int = 0,
    tokens_owed_1: int = 0
) -> FeeCalculationResult:
    """token0/token1 미수령 수수료를 한 번에 계산

    파라미터 접미사 _0/_1은 토큰, _lower/_upper는 경계 틱 체크포인트입니다.
    """
    per_token = (
        (fee_growth_global_0, fee_growth_outside_lower_0, fee_growth_outside_upper_0,
         fee_growth_inside_last_0, tokens_owed_0),
        (fee_growth_global_1, fee_growth_outside_lower_1, fee_growth_outside_upper_1,
         fee_growth_inside_last_1, tokens_owed_1),
    )

    inside = []
    owed = []
    for global_growth, outside_lower, outside_upper, inside_last, token_owed in per_token:
        current_inside = fee_growth_inside(
            tick_lower, tick_upper, current_tick, global_growth, outside_lower, outside_upper
        )
        inside.append(current_inside)
        owed.append(pending_fees(current_inside, inside_last, liquidity, token_owed))

    return FeeCalculationResult(
        pending_fees_0=owed[0],
        pending_fees_1=owed[1],
        fee_growth_inside_0=inside[0],
        fee_growth_inside_1=inside[1],
    )
