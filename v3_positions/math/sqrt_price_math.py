"""
Sqrt Price Math - sqrtPriceX96 기반 토큰 수량/가격 계산

두 sqrtPriceX96 사이에서 유동성이 나타내는 token0/token1 수량과,
토큰 입출력에 따른 다음 sqrtPriceX96을 계산합니다.

References:
- Uniswap V3 Core: contracts/libraries/SqrtPriceMath.sol
- 백서 Section 6.2.3: Price movement

핵심 공식:
    Δx = L * (√P_b - √P_a) / (√P_a * √P_b)
    Δy = L * (√P_b - √P_a)

반올림 규칙:
    입력(input) 쪽은 올림, 출력(output) 쪽은 내림 -> 항상 풀에 유리한 방향
"""

from ..constants import Q96, UINT160_MAX, UINT256_MAX
from ..exceptions import (
    ArithmeticDivisionByZero,
    ArithmeticOverflowUnrecoverable,
    InsufficientLiquidity,
    InvalidPriceInput,
)
from .full_math import (
    div_rounding_up,
    mul_div,
    mul_div_rounding_up,
    wrapping_add,
    wrapping_mul,
)


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool
) -> int:
    """두 가격 사이에서 유동성에 해당하는 token0 수량

    공식: Δx = L * 2^96 * (√P_b - √P_a) / √P_b / √P_a

    uint256 중간값을 넘지 않도록 √P_b, √P_a로 두 번 나눕니다.

    Args:
        sqrt_ratio_a_x96: 한쪽 sqrtPriceX96
        sqrt_ratio_b_x96: 다른 쪽 sqrtPriceX96
        liquidity: 유동성
        round_up: True면 올림, False면 내림

    Returns:
        amount0 (token0 최소 단위)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_a_x96 == 0:
        raise ArithmeticDivisionByZero("get_amount0_delta: lower sqrt ratio is zero")

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96
        )
    return mul_div(numerator1, numerator2, sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool
) -> int:
    """두 가격 사이에서 유동성에 해당하는 token1 수량

    공식: Δy = L * (√P_b - √P_a) / 2^96

    Args:
        sqrt_ratio_a_x96: 한쪽 sqrtPriceX96
        sqrt_ratio_b_x96: 다른 쪽 sqrtPriceX96
        liquidity: 유동성
        round_up: True면 올림, False면 내림

    Returns:
        amount1 (token1 최소 단위)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    return mul_div(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool
) -> int:
    """입력 토큰 양에 따른 다음 sqrtPriceX96

    zero_for_one이면 token0 입력(가격 하락), 아니면 token1 입력(가격 상승).
    목표 가격을 넘지 않도록 올림 방향으로 계산합니다.

    Raises:
        InvalidPriceInput: sqrt_price_x96 <= 0 또는 liquidity <= 0
    """
    _require_positive(sqrt_price_x96, liquidity)

    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in, True)
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool
) -> int:
    """출력 토큰 양에 따른 다음 sqrtPriceX96

    zero_for_one이면 token1 출력(가격 하락), 아니면 token0 출력(가격 상승).

    Raises:
        InvalidPriceInput: sqrt_price_x96 <= 0 또는 liquidity <= 0
    """
    _require_positive(sqrt_price_x96, liquidity)

    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_out, False)
    return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_out, False)


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount0 변화에 따른 다음 sqrtPriceX96 계산 (올림)

    공식: √P' = L * √P / (L ± Δx * √P)

    add이고 amount * √P가 uint256을 넘으면
    √P' = L / (L / √P + Δx) 로 재배열하여 계산합니다.

    Args:
        sqrt_price_x96: 현재 sqrtPriceX96
        liquidity: 유동성
        amount: amount0 변화량
        add: True면 추가, False면 제거

    Returns:
        새로운 sqrtPriceX96

    Raises:
        ArithmeticOverflowUnrecoverable: 재배열로도 결과를 구할 수 없는 경우
    """
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << 96
    product = wrapping_mul(amount, sqrt_price_x96)

    if add:
        if product // amount == sqrt_price_x96:
            denominator = wrapping_add(numerator1, product)
            if denominator >= numerator1:
                return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)

        denominator = numerator1 // sqrt_price_x96 + amount
        if denominator > UINT256_MAX:
            raise ArithmeticOverflowUnrecoverable(
                "get_next_sqrt_price_from_amount0_rounding_up: denominator exceeds uint256"
            )
        return div_rounding_up(numerator1, denominator)

    if product // amount != sqrt_price_x96 or numerator1 <= product:
        raise ArithmeticOverflowUnrecoverable(
            "get_next_sqrt_price_from_amount0_rounding_up: amount exceeds virtual reserves"
        )
    return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 - product)


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount1 변화에 따른 다음 sqrtPriceX96 계산 (내림)

    공식: √P' = √P ± Δy / L

    Args:
        sqrt_price_x96: 현재 sqrtPriceX96
        liquidity: 유동성
        amount: amount1 변화량
        add: True면 추가, False면 제거

    Returns:
        새로운 sqrtPriceX96

    Raises:
        InsufficientLiquidity: 제거량이 현재 가격 이상을 요구하는 경우
        ArithmeticOverflowUnrecoverable: 새 가격이 uint160 범위를 넘는 경우
    """
    if add:
        if amount <= UINT160_MAX:
            quotient = (amount << 96) // liquidity
        else:
            quotient = mul_div(amount, Q96, liquidity)
        next_sqrt_price = sqrt_price_x96 + quotient
        if next_sqrt_price > UINT160_MAX:
            raise ArithmeticOverflowUnrecoverable(
                f"get_next_sqrt_price_from_amount1_rounding_down: price exceeds uint160: {next_sqrt_price}"
            )
        return next_sqrt_price

    quotient = mul_div_rounding_up(amount, Q96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise InsufficientLiquidity(
            f"amount1 out {amount} exceeds what liquidity {liquidity} provides at {sqrt_price_x96}"
        )
    return sqrt_price_x96 - quotient


def _require_positive(sqrt_price_x96: int, liquidity: int) -> None:
    if sqrt_price_x96 <= 0:
        raise InvalidPriceInput(f"sqrt price must be positive: {sqrt_price_x96}")
    if liquidity <= 0:
        raise InvalidPriceInput(f"liquidity must be positive: {liquidity}")
