"""
데이터 타입 정의

외부 수집기(Subgraph, multicall)가 넘겨주는 레코드를 Python dataclass로 정의.
모든 숫자 필드는 온체인 정밀도를 위해 int 타입 사용.
레코드는 한 (pool, block) 스냅샷에 속하며 읽기 전용입니다.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..constants import MIN_TICK, MAX_TICK, UINT128_MAX
from ..exceptions import InvalidPosition, TickOutOfRange
from ..math.convert import format_units
from ..math.full_math import parse_uint256
from .keys import normalize_address


def _tick_idx(value: Any) -> int:
    """{"tickIdx": "-60"} 형태와 평탄한 값 모두 허용"""
    if isinstance(value, dict):
        value = value["tickIdx"]
    return int(value)


@dataclass(frozen=True)
class PoolSnapshot:
    """블록 시점의 Pool 상태

    - tick: 현재 틱 인덱스 (i_c)
    - token0/1 decimals: 출력 변환용 소수점 자릿수
    - feeGrowthGlobal0X128: token0 단위유동성당 누적수수료 (f_g,0)
    - feeGrowthGlobal1X128: token1 단위유동성당 누적수수료 (f_g,1)
    """
    current_tick: int  # i_c
    token0_decimals: int
    token1_decimals: int
    fee_growth_global_0_x128: int = 0  # f_g,0
    fee_growth_global_1_x128: int = 0  # f_g,1
    pool_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "PoolSnapshot":
        return cls(
            current_tick=int(data["tick"]),
            token0_decimals=int(data["token0"]["decimals"]),
            token1_decimals=int(data["token1"]["decimals"]),
            fee_growth_global_0_x128=parse_uint256(data.get("feeGrowthGlobal0X128", 0)),
            fee_growth_global_1_x128=parse_uint256(data.get("feeGrowthGlobal1X128", 0)),
            pool_id=data.get("id"),
        )


@dataclass(frozen=True)
class TickCheckpoint:
    """Tick-Indexed State

    - tickIdx: 틱 인덱스
    - feeGrowthOutside0X128: 틱 외부 누적수수료 token0 (f_o,0)
    - feeGrowthOutside1X128: 틱 외부 누적수수료 token1 (f_o,1)
    """
    tick_idx: int
    fee_growth_outside_0_x128: int  # f_o,0
    fee_growth_outside_1_x128: int  # f_o,1

    @classmethod
    def from_dict(cls, data: dict) -> "TickCheckpoint":
        return cls(
            tick_idx=int(data["tickIdx"]),
            fee_growth_outside_0_x128=parse_uint256(data.get("feeGrowthOutside0X128", 0)),
            fee_growth_outside_1_x128=parse_uint256(data.get("feeGrowthOutside1X128", 0)),
        )


@dataclass(frozen=True)
class Position:
    """LP 포지션 (tickLower, tickUpper, liquidity, owner)"""
    owner: str
    tick_lower: int  # i_l
    tick_upper: int  # i_u
    liquidity: int  # l

    def validate(self) -> None:
        """불변식 검사

        Raises:
            TickOutOfRange: 틱이 유효 범위를 벗어난 경우
            InvalidPosition: tick_lower >= tick_upper 또는 유동성이 uint128 밖인 경우
        """
        for tick in (self.tick_lower, self.tick_upper):
            if tick < MIN_TICK or tick > MAX_TICK:
                raise TickOutOfRange(tick)
        if self.tick_lower >= self.tick_upper:
            raise InvalidPosition(
                f"tick_lower must be below tick_upper: {self.tick_lower} >= {self.tick_upper}"
            )
        if self.liquidity < 0 or self.liquidity > UINT128_MAX:
            raise InvalidPosition(f"liquidity out of uint128 range: {self.liquidity}")

    @classmethod
    def from_dict(cls, data: dict) -> "Position":
        return cls(
            owner=normalize_address(data["owner"]),
            tick_lower=_tick_idx(data["tickLower"]),
            tick_upper=_tick_idx(data["tickUpper"]),
            liquidity=parse_uint256(data["liquidity"]),
        )


@dataclass(frozen=True)
class PositionFeeSnapshot:
    """Position-Indexed State (풀 컨트랙트 positions() 결과)

    - liquidity: 포지션의 유동성 (l)
    - innerFeeGrowth0Token: 마지막 업데이트 시점의 범위 내 수수료 token0 (f_r,0(t_0))
    - innerFeeGrowth1Token: 마지막 업데이트 시점의 범위 내 수수료 token1 (f_r,1(t_0))
    - fees0 / fees1: 적립되었지만 수령하지 않은 수수료
    """
    liquidity: int
    fee_growth_inside_0_last_x128: int = 0  # f_r,0(t_0)
    fee_growth_inside_1_last_x128: int = 0  # f_r,1(t_0)
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "PositionFeeSnapshot":
        return cls(
            liquidity=parse_uint256(data["liquidity"]),
            fee_growth_inside_0_last_x128=parse_uint256(
                data.get("feeGrowthInside0LastX128", data.get("innerFeeGrowth0Token", 0))
            ),
            fee_growth_inside_1_last_x128=parse_uint256(
                data.get("feeGrowthInside1LastX128", data.get("innerFeeGrowth1Token", 0))
            ),
            tokens_owed_0=parse_uint256(data.get("tokensOwed0", data.get("fees0", 0))),
            tokens_owed_1=parse_uint256(data.get("tokensOwed1", data.get("fees1", 0))),
        )


@dataclass(frozen=True)
class PositionFeeRecord:
    """미수령 수수료 계산 입력: 포지션 + 체크포인트 + 양쪽 경계 틱"""
    position: Position
    fee_snapshot: PositionFeeSnapshot
    lower: TickCheckpoint
    upper: TickCheckpoint

    def validate(self) -> None:
        self.position.validate()
        liquidity = self.fee_snapshot.liquidity
        if liquidity < 0 or liquidity > UINT128_MAX:
            raise InvalidPosition(f"fee snapshot liquidity out of uint128 range: {liquidity}")
        if self.lower.tick_idx != self.position.tick_lower:
            raise InvalidPosition(
                f"lower checkpoint {self.lower.tick_idx} does not match tick_lower {self.position.tick_lower}"
            )
        if self.upper.tick_idx != self.position.tick_upper:
            raise InvalidPosition(
                f"upper checkpoint {self.upper.tick_idx} does not match tick_upper {self.position.tick_upper}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "PositionFeeRecord":
        return cls(
            position=Position.from_dict(data),
            fee_snapshot=PositionFeeSnapshot.from_dict(data["positionData"]),
            lower=TickCheckpoint.from_dict(data["lowerTickData"]),
            upper=TickCheckpoint.from_dict(data["upperTickData"]),
        )


@dataclass
class OwnerAmounts:
    """소유자별 누적 토큰 수량 (최소 단위, 집계 중에만 사용)"""
    token0: int = 0
    token1: int = 0

    def add(self, amount0: int, amount1: int) -> None:
        self.token0 += amount0
        self.token1 += amount1

    def to_dict(self, token0_decimals: int, token1_decimals: int) -> Dict[str, str]:
        return {
            "token0Amount": format_units(self.token0, token0_decimals),
            "token1Amount": format_units(self.token1, token1_decimals),
        }


@dataclass(frozen=True)
class PositionPendingFees:
    """포지션별 미수령 수수료 (최소 단위)"""
    pool: Optional[str]
    owner: str
    tick_lower: int
    tick_upper: int
    pending_fees_0: int
    pending_fees_1: int

    def to_dict(self, token0_decimals: int, token1_decimals: int) -> Dict[str, Any]:
        return {
            "pool": normalize_address(self.pool) if self.pool else None,
            "owner": normalize_address(self.owner),
            "tickLower": self.tick_lower,
            "tickUpper": self.tick_upper,
            "pendingFees0": format_units(self.pending_fees_0, token0_decimals),
            "pendingFees1": format_units(self.pending_fees_1, token1_decimals),
        }
