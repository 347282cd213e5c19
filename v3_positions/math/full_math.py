"""
Full Math - 고정폭(uint256) 정수 연산

Solidity uint256 연산을 Python int로 재현합니다.
Python int는 임의 정밀도이므로 랩어라운드가 필요한 곳에서는 명시적으로 마스킹합니다.

References:
- Uniswap V3 Core: contracts/libraries/FullMath.sol
- Uniswap V3 Core: contracts/libraries/UnsafeMath.sol

규칙:
    wrapping_*: 결과 mod 2^256 (오버플로우는 에러가 아님)
    mul_div: 512비트 중간값으로 floor(a*b/d), 결과가 uint256을 넘으면 에러
    0으로 나누기는 항상 ArithmeticDivisionByZero
"""

from decimal import Decimal
from typing import Union

from ..constants import UINT256_MAX
from ..exceptions import ArithmeticDivisionByZero, ArithmeticOverflowUnrecoverable


UINT256_MOD: int = 2 ** 256

# most_significant_bit에서 사용하는 (비트폭, 임계값) 목록
POWERS_OF_2 = [(power, 2 ** power) for power in (128, 64, 32, 16, 8, 4, 2, 1)]


def wrapping_add(a: int, b: int) -> int:
    """(a + b) mod 2^256"""
    return (a + b) & UINT256_MAX


def wrapping_sub(a: int, b: int) -> int:
    """(a - b) mod 2^256

    fee growth 카운터처럼 랩어라운드될 수 있는 단조 증가 값의 차이에 사용.
    """
    return (a - b) % UINT256_MOD


def wrapping_mul(a: int, b: int) -> int:
    """(a * b) mod 2^256"""
    return (a * b) & UINT256_MAX


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator)

    Raises:
        ArithmeticDivisionByZero: denominator == 0
        ArithmeticOverflowUnrecoverable: 결과가 uint256 범위를 초과
    """
    if denominator == 0:
        raise ArithmeticDivisionByZero("mul_div: denominator is zero")
    result = (a * b) // denominator
    if result > UINT256_MAX:
        raise ArithmeticOverflowUnrecoverable(f"mul_div result exceeds uint256: {result}")
    return result


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)

    floor 결과에 나머지가 0이 아니면 1을 더합니다.
    """
    result = mul_div(a, b, denominator)
    if (a * b) % denominator > 0:
        if result == UINT256_MAX:
            raise ArithmeticOverflowUnrecoverable("mul_div_rounding_up result exceeds uint256")
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """ceil(numerator / denominator)"""
    if denominator == 0:
        raise ArithmeticDivisionByZero("div_rounding_up: denominator is zero")
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result


def most_significant_bit(x: int) -> int:
    """최상위 비트 위치 (0-indexed)

    128, 64, ..., 1 비트 임계값과 순서대로 비교하며
    임계값 이상이면 그 폭만큼 시프트하고 msb에 누적합니다.

    Raises:
        ValueError: x가 (0, 2^256) 범위 밖인 경우
    """
    if x <= 0:
        raise ValueError("most_significant_bit: x must be positive")
    if x > UINT256_MAX:
        raise ValueError("most_significant_bit: x exceeds uint256")

    msb = 0
    for power, threshold in POWERS_OF_2:
        if x >= threshold:
            x >>= power
            msb += power
    return msb


def parse_uint256(value: Union[int, str, Decimal, None]) -> int:
    """Subgraph/RPC 값을 uint256 정수로 변환

    int, 10진 문자열, 0x 접두 16진 문자열, 정수값 Decimal을 허용합니다.
    """
    if value is None:
        raise ValueError("Missing uint256 value.")
    if isinstance(value, bool):
        raise ValueError("Unsupported uint256 value type.")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("Empty uint256 string.")
        parsed = int(raw, 16) if raw.lower().startswith("0x") else int(raw)
    elif isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError("Decimal uint256 value must be integral.")
        parsed = int(value)
    else:
        raise ValueError("Unsupported uint256 value type.")

    if parsed < 0:
        raise ValueError("uint256 value must be non-negative.")
    if parsed > UINT256_MAX:
        raise ValueError("uint256 value exceeds 2^256 - 1.")
    return parsed
