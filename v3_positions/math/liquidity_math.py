"""
Liquidity Math - 유동성 상한 계산

가격 범위와 보유 토큰 수량에서 민트 가능한 최대 유동성을 계산합니다.

References:
- Uniswap V3 Periphery: contracts/libraries/LiquidityAmounts.sol
- Uniswap V3 SDK: src/utils/maxLiquidityForAmounts.ts
- 백서 Section 6.2.1: Concentrated Liquidity

핵심 공식:
    L = Δx * √P_a * √P_b / (√P_b - √P_a)  # token0 기준
    L = Δy / (√P_b - √P_a)                # token1 기준
"""

from typing import Tuple

from ..constants import Q96
from ..exceptions import ArithmeticDivisionByZero
from .sqrt_price_math import get_amount0_delta, get_amount1_delta


def _sorted(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int) -> Tuple[int, int]:
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        return sqrt_ratio_b_x96, sqrt_ratio_a_x96
    return sqrt_ratio_a_x96, sqrt_ratio_b_x96


def _require_width(sqrt_ratio_a_x96: int, sqrt_ratio_b_x96: int) -> None:
    if sqrt_ratio_a_x96 == sqrt_ratio_b_x96:
        raise ArithmeticDivisionByZero("liquidity bound over an empty price range")


def max_liquidity_for_amount0_imprecise(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int
) -> int:
    """amount0에서 유동성 계산 (periphery 호환, 부정확)

    중간 단계에서 Q96으로 먼저 나누므로 약 32비트 정밀도를 잃습니다.
    LiquidityAmounts.getLiquidityForAmount0와 같은 값을 냅니다.
    """
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _sorted(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _require_width(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    intermediate = sqrt_ratio_a_x96 * sqrt_ratio_b_x96 // Q96
    return amount0 * intermediate // (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def max_liquidity_for_amount0_precise(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int
) -> int:
    """amount0에서 유동성 계산 (정확)

    Q96 나눗셈을 마지막으로 미룹니다.
    """
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _sorted(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _require_width(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    numerator = amount0 * sqrt_ratio_a_x96 * sqrt_ratio_b_x96
    denominator = Q96 * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)
    return numerator // denominator


def max_liquidity_for_amount1(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount1: int
) -> int:
    """amount1에서 유동성 계산

    공식: L = Δy * 2^96 / (√P_b - √P_a)
    """
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _sorted(sqrt_ratio_a_x96, sqrt_ratio_b_x96)
    _require_width(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    return amount1 * Q96 // (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def max_liquidity_for_amounts(
    sqrt_ratio_current_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int,
    use_full_precision: bool = True
) -> int:
    """토큰 수량에서 민트 가능한 최대 유동성

    Args:
        sqrt_ratio_current_x96: 현재 sqrtPriceX96
        sqrt_ratio_a_x96: 범위 한쪽 sqrtPriceX96
        sqrt_ratio_b_x96: 범위 다른 쪽 sqrtPriceX96
        amount0: token0 수량
        amount1: token1 수량
        use_full_precision: False면 periphery 라우터가 계산하는 값(부정확)에 맞춤

    Returns:
        유동성 (범위 내에서는 두 제약 조건 중 작은 값)
    """
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _sorted(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    liquidity_for_amount0 = (
        max_liquidity_for_amount0_precise if use_full_precision
        else max_liquidity_for_amount0_imprecise
    )

    if sqrt_ratio_current_x96 <= sqrt_ratio_a_x96:
        # 가격이 범위 아래: token0만 사용
        return liquidity_for_amount0(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount0)

    if sqrt_ratio_current_x96 < sqrt_ratio_b_x96:
        # 가격이 범위 내: 양쪽 토큰 사용, 작은 값 반환
        liquidity0 = liquidity_for_amount0(sqrt_ratio_current_x96, sqrt_ratio_b_x96, amount0)
        liquidity1 = max_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_current_x96, amount1)
        return min(liquidity0, liquidity1)

    # 가격이 범위 위: token1만 사용
    return max_liquidity_for_amount1(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount1)


def get_amounts_for_liquidity(
    sqrt_ratio_current_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int
) -> Tuple[int, int]:
    """유동성에서 토큰 수량 계산 (내림)

    Returns:
        (amount0, amount1) 튜플
    """
    sqrt_ratio_a_x96, sqrt_ratio_b_x96 = _sorted(sqrt_ratio_a_x96, sqrt_ratio_b_x96)

    if sqrt_ratio_current_x96 <= sqrt_ratio_a_x96:
        return get_amount0_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, False), 0

    if sqrt_ratio_current_x96 < sqrt_ratio_b_x96:
        amount0 = get_amount0_delta(sqrt_ratio_current_x96, sqrt_ratio_b_x96, liquidity, False)
        amount1 = get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_current_x96, liquidity, False)
        return amount0, amount1

    return 0, get_amount1_delta(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity, False)
