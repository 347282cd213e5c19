"""
Tick Math - Tick ↔ sqrtPriceX96 변환

Uniswap V3의 틱 수학 함수들. 온체인 컨트랙트와 동일한 정밀도로 구현.

References:
- Uniswap V3 Core: contracts/libraries/TickMath.sol
- Uniswap V3 SDK: src/utils/tickMath.ts, src/utils/nearestUsableTick.ts
- 백서 Section 6.1: Ticks and Tick Spacing

핵심 공식:
    price = 1.0001^tick
    sqrtPriceX96 = sqrt(price) * 2^96
"""

import math
from typing import NamedTuple

from ..constants import (
    Q32,
    Q192,
    MIN_TICK,
    MAX_TICK,
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    UINT256_MAX,
)
from ..exceptions import TickOutOfRange, SqrtRatioOutOfRange, InvalidSpacing, InvalidPriceInput
from .full_math import most_significant_bit


# log_sqrt(1.0001) 변환 상수와 tick 후보 보정값
LOG_SQRT_10001: int = 255738958999603826347141
TICK_LOW_OFFSET: int = 3402992956809132418596140100660247210
TICK_HIGH_OFFSET: int = 291339464771989622907027621153398088495

# abs_tick의 각 비트(0x2 ~ 0x80000)에 대응하는 1/sqrt(1.0001)^(2^i) (Q128)
_BIT_MULTIPLIERS = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)


class TickPrice(NamedTuple):
    """price_to_closest_tick 결과"""
    sqrt_ratio_x96: int
    tick: int
    price: int  # token0 1개당 token1 (token1 최소 단위)
    price_inverted: int  # token1 1개당 token0 (token0 최소 단위)


def _mul_shift(value: int, multiplier: int) -> int:
    return (value * multiplier) >> 128


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """틱에서 sqrtPriceX96 계산

    Solidity TickMath.getSqrtRatioAtTick()과 동일한 구현.
    Q128.128 비율을 Q64.96으로 내릴 때 나머지가 있으면 올림하여
    틱에 대해 단조 증가를 보장합니다.

    Args:
        tick: 틱 인덱스 (-887272 ~ 887272)

    Returns:
        sqrtPriceX96 (Q64.96 형식)

    Raises:
        TickOutOfRange: 틱이 유효 범위를 벗어난 경우
    """
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickOutOfRange(tick)

    abs_tick = abs(tick)

    ratio = 0xfffcb933bd6fad37aa2d162d1a594001 if abs_tick & 0x1 \
        else 0x100000000000000000000000000000000

    for bit, multiplier in _BIT_MULTIPLIERS:
        if abs_tick & bit:
            ratio = _mul_shift(ratio, multiplier)

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96
    return (ratio >> 32) + (1 if ratio % Q32 != 0 else 0)


def get_tick_at_sqrt_ratio(sqrt_price_x96: int) -> int:
    """sqrtPriceX96에서 틱 계산

    get_sqrt_ratio_at_tick(tick) <= sqrt_price_x96 을 만족하는 가장 큰 틱을 반환합니다.

    Args:
        sqrt_price_x96: sqrtPriceX96 (Q64.96 형식)

    Returns:
        틱 인덱스

    Raises:
        SqrtRatioOutOfRange: sqrtPriceX96이 [MIN_SQRT_RATIO, MAX_SQRT_RATIO) 밖인 경우
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise SqrtRatioOutOfRange(sqrt_price_x96)

    ratio = sqrt_price_x96 << 32

    msb = most_significant_bit(ratio)

    if msb >= 128:
        r = ratio >> (msb - 127)
    else:
        r = ratio << (127 - msb)

    log_2 = (msb - 128) << 64

    # 제곱-시프트로 log2의 소수부 14비트 추출
    for i in range(14):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << (63 - i)
        r >>= f

    log_sqrt10001 = log_2 * LOG_SQRT_10001

    tick_low = (log_sqrt10001 - TICK_LOW_OFFSET) >> 128
    tick_high = (log_sqrt10001 + TICK_HIGH_OFFSET) >> 128

    if tick_low == tick_high:
        return tick_low

    if get_sqrt_ratio_at_tick(tick_high) <= sqrt_price_x96:
        return tick_high
    return tick_low


def nearest_usable_tick(tick: int, tick_spacing: int) -> int:
    """가장 가까운 사용 가능한 틱

    tick / tick_spacing 을 반올림(0.5는 +방향)한 뒤 tick_spacing 배수로 되돌립니다.
    결과가 틱 범위를 벗어나면 경계로 자르지 않고 간격 하나만큼 안쪽으로 이동합니다.

    Args:
        tick: 대상 틱
        tick_spacing: 풀의 틱 간격

    Returns:
        tick_spacing의 배수인 틱

    Raises:
        InvalidSpacing: tick_spacing <= 0
        TickOutOfRange: tick이 유효 범위를 벗어난 경우
    """
    if tick_spacing <= 0:
        raise InvalidSpacing(f"tick spacing must be positive: {tick_spacing}")
    if tick < MIN_TICK or tick > MAX_TICK:
        raise TickOutOfRange(tick)

    # floor(tick / spacing + 1/2) 를 정수 연산으로
    rounded = ((2 * tick + tick_spacing) // (2 * tick_spacing)) * tick_spacing
    if rounded < MIN_TICK:
        return rounded + tick_spacing
    if rounded > MAX_TICK:
        return rounded - tick_spacing
    return rounded


def price_from_sqrt_ratio(
    sqrt_ratio_x96: int,
    token0_decimals: int,
    token1_decimals: int,
    invert: bool = False
) -> int:
    """sqrtPriceX96을 정수 가격으로 변환

    invert=False: token0 1개(10^decimals0 단위)의 가격을 token1 최소 단위로
    invert=True:  token1 1개(10^decimals1 단위)의 가격을 token0 최소 단위로

    Raises:
        InvalidPriceInput: sqrt_ratio_x96 <= 0
    """
    if sqrt_ratio_x96 <= 0:
        raise InvalidPriceInput(f"sqrt ratio must be positive: {sqrt_ratio_x96}")

    ratio_x192 = sqrt_ratio_x96 * sqrt_ratio_x96
    if invert:
        return Q192 * (10 ** token1_decimals) // ratio_x192
    return ratio_x192 * (10 ** token0_decimals) // Q192


def price_to_sqrt_ratio_x96(price: int, token0_decimals: int) -> int:
    """정수 가격(token0 1개당 token1 최소 단위)을 sqrtPriceX96으로 변환

    sqrtPriceX96 = floor(sqrt(price * 2^192 / 10^decimals0))
    """
    if price < 0:
        raise InvalidPriceInput(f"price must be non-negative: {price}")
    return math.isqrt(Q192 * price // (10 ** token0_decimals))


def tick_to_price(
    tick: int,
    token0_decimals: int,
    token1_decimals: int,
    invert: bool = False
) -> int:
    """틱을 정수 가격으로 변환 (price_from_sqrt_ratio 참고)"""
    return price_from_sqrt_ratio(
        get_sqrt_ratio_at_tick(tick), token0_decimals, token1_decimals, invert
    )


def price_to_closest_tick(
    price: int,
    token0_decimals: int,
    token1_decimals: int,
    tick_spacing: int
) -> TickPrice:
    """정수 가격에 가장 가까운 틱

    가격 0은 MIN_TICK, UINT256_MAX는 MAX_TICK 쪽 사용 가능 틱으로 매핑합니다.
    그 외에는 가격 이하인 가장 큰 틱을 구한 뒤, 다음 틱 가격 이상이면 한 칸 올립니다.
    """
    if price == 0:
        return TickPrice(
            sqrt_ratio_x96=MIN_SQRT_RATIO,
            tick=nearest_usable_tick(MIN_TICK, tick_spacing),
            price=price,
            price_inverted=UINT256_MAX,
        )
    if price == UINT256_MAX:
        return TickPrice(
            sqrt_ratio_x96=MAX_SQRT_RATIO,
            tick=nearest_usable_tick(MAX_TICK, tick_spacing),
            price=price,
            price_inverted=0,
        )

    tick = get_tick_at_sqrt_ratio(price_to_sqrt_ratio_x96(price, token0_decimals))
    if price >= tick_to_price(tick + 1, token0_decimals, token1_decimals):
        tick += 1

    return TickPrice(
        sqrt_ratio_x96=get_sqrt_ratio_at_tick(tick),
        tick=tick,
        price=tick_to_price(tick, token0_decimals, token1_decimals),
        price_inverted=tick_to_price(tick, token0_decimals, token1_decimals, invert=True),
    )


def price_to_closest_usable_tick(
    price: int,
    token0_decimals: int,
    token1_decimals: int,
    tick_spacing: int
) -> TickPrice:
    """price_to_closest_tick 결과를 tick_spacing 배수로 스냅"""
    closest = price_to_closest_tick(price, token0_decimals, token1_decimals, tick_spacing)

    usable_tick = nearest_usable_tick(closest.tick, tick_spacing)
    if usable_tick == closest.tick:
        return closest

    return TickPrice(
        sqrt_ratio_x96=get_sqrt_ratio_at_tick(usable_tick),
        tick=usable_tick,
        price=tick_to_price(usable_tick, token0_decimals, token1_decimals),
        price_inverted=tick_to_price(usable_tick, token0_decimals, token1_decimals, invert=True),
    )
