"""
Pending Fees 테스트

풀 스냅샷 기준 포지션별 미수령 수수료 계산을 테스트합니다.
"""

import pytest

from ..snapshot.pending_fees import compute_pending_fees, format_pending_fees, positions_pending_fees
from ..data.types import (
    PoolSnapshot,
    Position,
    PositionFeeRecord,
    PositionFeeSnapshot,
    PositionPendingFees,
    TickCheckpoint,
)
from ..config import settings
from ..constants import Q128
from ..exceptions import InvalidPosition

POOL = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
OWNER_A = "0xC36442b4a4522E871399CD717aBDD847Ab11FE88"
OWNER_B = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"

SNAPSHOT = PoolSnapshot(
    current_tick=0,
    token0_decimals=2,
    token1_decimals=2,
    fee_growth_global_0_x128=10 * Q128,
    fee_growth_global_1_x128=20 * Q128,
    pool_id=POOL.lower(),
)


def _record(owner, tick_lower=-60, tick_upper=60, liquidity=100, tokens_owed=(3, 4)):
    return PositionFeeRecord(
        position=Position(owner, tick_lower, tick_upper, liquidity),
        fee_snapshot=PositionFeeSnapshot(
            liquidity=liquidity,
            fee_growth_inside_0_last_x128=Q128,
            fee_growth_inside_1_last_x128=Q128,
            tokens_owed_0=tokens_owed[0],
            tokens_owed_1=tokens_owed[1],
        ),
        lower=TickCheckpoint(tick_lower, 2 * Q128, 4 * Q128),
        upper=TickCheckpoint(tick_upper, 5 * Q128, 6 * Q128),
    )


class TestComputePendingFees:
    """compute_pending_fees 테스트"""

    def test_in_range(self):
        (result,) = compute_pending_fees(SNAPSHOT, [_record(OWNER_A)])
        assert result == PositionPendingFees(
            pool=POOL.lower(),
            owner=OWNER_A,
            tick_lower=-60,
            tick_upper=60,
            pending_fees_0=703,
            pending_fees_1=1504,
        )

    def test_price_below_range(self):
        """i_c < i_l: 하한 틱 체크포인트가 범위 내 성장분"""
        (result,) = compute_pending_fees(SNAPSHOT, [_record(OWNER_A, 60, 120, tokens_owed=(0, 0))])
        assert (result.pending_fees_0, result.pending_fees_1) == (100, 300)

    def test_price_above_range(self):
        (result,) = compute_pending_fees(SNAPSHOT, [_record(OWNER_A, -120, -60, tokens_owed=(0, 0))])
        assert (result.pending_fees_0, result.pending_fees_1) == (200, 100)

    def test_keeps_input_order(self):
        records = [_record(OWNER_B), _record(OWNER_A, 60, 120), _record(OWNER_B, -120, -60)]
        results = compute_pending_fees(SNAPSHOT, records)
        assert [(r.owner, r.tick_lower) for r in results] == [(OWNER_B, -60), (OWNER_A, 60), (OWNER_B, -120)]

    def test_invalid_record_fails_first(self):
        bad = PositionFeeRecord(
            position=Position(OWNER_A, -60, 60, 100),
            fee_snapshot=PositionFeeSnapshot(liquidity=100),
            lower=TickCheckpoint(-120, 0, 0),
            upper=TickCheckpoint(60, 0, 0),
        )
        with pytest.raises(InvalidPosition):
            compute_pending_fees(SNAPSHOT, [_record(OWNER_A), bad])

    def test_later_snapshot_not_smaller(self):
        """전역 fee growth만 증가한 이후 스냅샷의 수수료는 감소하지 않음"""
        later = PoolSnapshot(0, 2, 2, 11 * Q128, 25 * Q128, POOL)
        (before,) = compute_pending_fees(SNAPSHOT, [_record(OWNER_A)])
        (after,) = compute_pending_fees(later, [_record(OWNER_A)])
        assert after.pending_fees_0 >= before.pending_fees_0
        assert after.pending_fees_1 >= before.pending_fees_1


class TestPositionsPendingFees:
    """positions_pending_fees 테스트"""

    def test_output_format(self):
        results = compute_pending_fees(SNAPSHOT, [_record(OWNER_A.lower())])
        assert format_pending_fees(results, 2, 2) == [{
            "pool": POOL,
            "owner": OWNER_A,
            "tickLower": -60,
            "tickUpper": 60,
            "pendingFees0": "7.03",
            "pendingFees1": "15.04",
        }]

    def test_excluded_owners(self):
        records = [_record(OWNER_A), _record(OWNER_B)]
        output = positions_pending_fees(SNAPSHOT, records, excluded_owners=[OWNER_A.lower()])
        assert [row["owner"] for row in output] == [OWNER_B]

    def test_default_exclusion_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "EXCLUDED_OWNERS", [OWNER_B])
        output = positions_pending_fees(SNAPSHOT, [_record(OWNER_A), _record(OWNER_B)])
        assert [row["owner"] for row in output] == [OWNER_A]

    def test_no_exclusions(self):
        output = positions_pending_fees(SNAPSHOT, [_record(OWNER_A), _record(OWNER_B)], excluded_owners=[])
        assert len(output) == 2
