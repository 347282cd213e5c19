"""
Uniswap V3 상수 정의

온체인 수준 정밀도를 위한 상수들:
- Q96: sqrt price 인코딩에 사용 (2^96)
- Q128: fee growth 인코딩에 사용 (2^128)
- MIN_TICK / MAX_TICK: 틱 범위
- MIN_SQRT_RATIO / MAX_SQRT_RATIO: sqrtPriceX96 범위
"""

# Fixed-point 인코딩 상수
Q32: int = 2 ** 32
Q96: int = 2 ** 96
Q128: int = 2 ** 128
Q192: int = 2 ** 192

# 틱 범위 상수
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# get_sqrt_ratio_at_tick(MIN_TICK), get_sqrt_ratio_at_tick(MAX_TICK)
MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342

# 고정폭 정수 최대값
UINT256_MAX: int = 2 ** 256 - 1
UINT160_MAX: int = 2 ** 160 - 1
UINT128_MAX: int = 2 ** 128 - 1
UINT24_MASK: int = 0xFFFFFF
