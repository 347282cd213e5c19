"""
단위 변환 함수

토큰 최소 단위 정수 ↔ 10진 문자열 변환.
누적 합산이 끝난 뒤 출력 경계에서 한 번만 사용합니다.
"""

from decimal import Decimal, localcontext
from typing import Union


def format_units(value: int, decimals: int) -> str:
    """최소 단위 정수 → 10진 문자열

    소수부 뒤쪽 0은 제거하되 최소 한 자리는 남깁니다 (예: 1500000, 6 -> "1.5", 0, 6 -> "0.0").
    decimals가 0이면 정수 문자열만 반환합니다.
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative: {decimals}")

    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10 ** decimals)
    if decimals == 0:
        return f"{sign}{whole}"

    fraction_str = str(fraction).zfill(decimals).rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"


def parse_units(value: Union[str, Decimal], decimals: int) -> int:
    """10진 문자열 → 최소 단위 정수

    decimals보다 긴 소수부는 허용하지 않습니다.
    """
    with localcontext() as ctx:
        ctx.prec = 100
        amount = Decimal(value) if isinstance(value, str) else value
        scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value} has more than {decimals} fractional digits")
    return int(scaled)
