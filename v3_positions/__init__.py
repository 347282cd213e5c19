"""
Uniswap V3 Position Snapshot

블록 시점의 풀 스냅샷에서 LP별 토큰 구성과 미수령 수수료를 계산하는 라이브러리.
온체인 컨트랙트와 동일한 고정소수점 정수 연산만 사용합니다.
"""

__version__ = "0.1.0"

from .constants import Q96, Q128, MIN_TICK, MAX_TICK, MIN_SQRT_RATIO, MAX_SQRT_RATIO
from .snapshot import position_composition, positions_pending_fees
