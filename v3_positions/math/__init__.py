"""
Math layer

온체인 수준 정밀도의 수학 함수들:
- full_math: uint256 고정폭 연산
- tick_math: Tick ↔ sqrtPriceX96 변환
- sqrt_price_math: 가격 구간의 토큰 수량, 다음 가격
- liquidity_math: 토큰 수량에서 최대 유동성
- fee_math: fee growth 체크포인트 기반 수수료 계산
- convert: 최소 단위 ↔ 10진 문자열
"""

from .full_math import (
    mul_div,
    mul_div_rounding_up,
    div_rounding_up,
    wrapping_add,
    wrapping_sub,
    wrapping_mul,
    most_significant_bit,
    parse_uint256,
)
from .tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    nearest_usable_tick,
    price_from_sqrt_ratio,
    price_to_sqrt_ratio_x96,
    tick_to_price,
    price_to_closest_tick,
    price_to_closest_usable_tick,
    TickPrice,
)
from .sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from .liquidity_math import (
    max_liquidity_for_amount0_imprecise,
    max_liquidity_for_amount0_precise,
    max_liquidity_for_amount1,
    max_liquidity_for_amounts,
    get_amounts_for_liquidity,
)
from .fee_math import (
    fee_growth_inside,
    pending_fees,
    fee_growth_delta,
    calculate_pending_fees_both_tokens,
    FeeCalculationResult,
)
from .convert import format_units, parse_units
