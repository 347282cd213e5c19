"""
에러 정의

모든 에러는 입력이 도메인을 벗어났을 때 발생 지점에서 즉시 발생합니다.
ValueError / ArithmeticError 계열을 함께 상속하므로 호출자는 표준 예외로도 잡을 수 있습니다.
"""


class V3PositionsError(Exception):
    """라이브러리 공통 에러"""
    pass


class TickOutOfRange(V3PositionsError, ValueError):
    """틱이 [MIN_TICK, MAX_TICK] 범위를 벗어남"""

    def __init__(self, tick: int):
        self.tick = tick
        super().__init__(f"tick out of range: {tick}")


class SqrtRatioOutOfRange(V3PositionsError, ValueError):
    """sqrtPriceX96이 [MIN_SQRT_RATIO, MAX_SQRT_RATIO) 범위를 벗어남"""

    def __init__(self, sqrt_ratio_x96: int):
        self.sqrt_ratio_x96 = sqrt_ratio_x96
        super().__init__(f"sqrt ratio out of range: {sqrt_ratio_x96}")


class InvalidSpacing(V3PositionsError, ValueError):
    """틱 간격이 양수가 아니거나 지원하지 않는 수수료 티어"""
    pass


class InvalidPosition(V3PositionsError, ValueError):
    """포지션 레코드가 불변식을 위반 (tick_lower >= tick_upper, 음수 유동성 등)"""
    pass


class InvalidPriceInput(V3PositionsError, ValueError):
    """가격 또는 유동성이 0 이하"""
    pass


class InsufficientLiquidity(V3PositionsError, ValueError):
    """출력량이 현재 가격/유동성으로 제공 가능한 양을 초과"""
    pass


class ArithmeticOverflowUnrecoverable(V3PositionsError, OverflowError):
    """uint256 범위를 넘는 결과, 재배열로도 회피 불가"""
    pass


class ArithmeticDivisionByZero(V3PositionsError, ZeroDivisionError):
    """0으로 나눔"""
    pass
