"""
Position Composition 테스트

포지션 분해와 소유자별 합산을 테스트합니다.
"""

import logging

import pytest

from ..snapshot.composition import (
    decompose_position,
    decompose,
    aggregate_by_owner,
    aggregate_in_batches,
    merge_owner_totals,
    format_composition,
    position_composition,
)
from ..data.types import OwnerAmounts, PoolSnapshot, Position
from ..config import settings
from ..exceptions import InvalidPosition, TickOutOfRange

OWNER_A = "0xC36442b4a4522E871399CD717aBDD847Ab11FE88"
OWNER_B = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
LIQUIDITY = 10 ** 6


class TestDecomposePosition:
    """decompose_position 테스트 (현재 틱 0)"""

    def test_in_range(self):
        """범위 내: 양쪽 토큰 모두 양수"""
        assert decompose_position(-60, 60, LIQUIDITY, 0, True) == (2995, 2995)

    def test_above_current_tick(self):
        """i_l > i_c: token0만"""
        assert decompose_position(120, 180, LIQUIDITY, 0, False) == (2977, 0)

    def test_below_current_tick(self):
        """i_u < i_c: token1만"""
        assert decompose_position(-180, -120, LIQUIDITY, 0, False) == (0, 2977)

    def test_inactive_excluded(self):
        """active_only면 범위 밖 포지션은 (0, 0)"""
        assert decompose_position(120, 180, LIQUIDITY, 0, True) == (0, 0)
        assert decompose_position(-180, -120, LIQUIDITY, 0, True) == (0, 0)

    def test_current_tick_at_upper_bound(self):
        """i_c == i_u: 범위 내로 취급, token1만 남음"""
        assert decompose_position(-60, 60, LIQUIDITY, 60, True) == (0, 5999)

    def test_current_tick_at_lower_bound(self):
        """i_c == i_l: token0만 남음"""
        assert decompose_position(-60, 60, LIQUIDITY, -60, True) == (5999, 0)

    def test_zero_liquidity(self):
        assert decompose_position(-60, 60, 0, 0, False) == (0, 0)

    def test_record(self):
        position = Position(OWNER_A, -60, 60, LIQUIDITY)
        assert decompose(position, 0, True) == (2995, 2995)


class TestAggregateByOwner:
    """aggregate_by_owner 테스트"""

    def test_same_owner_mixed_case(self):
        """대소문자만 다른 주소는 하나로 합산"""
        positions = [
            Position(OWNER_A.lower(), -60, 60, LIQUIDITY),
            Position(OWNER_A, -60, 60, LIQUIDITY),
            Position(OWNER_B, -60, 60, LIQUIDITY),
        ]
        totals = aggregate_by_owner(positions, 0, active_only=True)
        assert totals == {
            OWNER_A: OwnerAmounts(5990, 5990),
            OWNER_B: OwnerAmounts(2995, 2995),
        }

    def test_same_owner_overlapping_ranges(self):
        """겹치지만 다른 범위의 두 포지션: 합계 == 각 포지션 분해의 합"""
        first = Position(OWNER_A.lower(), -120, 60, LIQUIDITY)
        second = Position(OWNER_A, -60, 180, 2 * LIQUIDITY)
        totals = aggregate_by_owner([first, second], 0, active_only=True)

        first0, first1 = decompose(first, 0, True)
        second0, second1 = decompose(second, 0, True)
        assert list(totals) == [OWNER_A]
        assert totals[OWNER_A].token0 == first0 + second0
        assert totals[OWNER_A].token1 == first1 + second1
        assert first0 > 0 and first1 > 0 and second0 > 0 and second1 > 0

    def test_empty_positions_skipped(self):
        """(0, 0) 포지션만 가진 소유자는 결과에 없음"""
        positions = [
            Position(OWNER_A, -60, 60, LIQUIDITY),
            Position(OWNER_B, 120, 180, LIQUIDITY),
        ]
        totals = aggregate_by_owner(positions, 0, active_only=True)
        assert list(totals) == [OWNER_A]

    def test_inactive_included(self):
        positions = [
            Position(OWNER_B, 120, 180, LIQUIDITY),
            Position(OWNER_B, -180, -120, LIQUIDITY),
        ]
        totals = aggregate_by_owner(positions, 0, active_only=False)
        assert totals == {OWNER_B: OwnerAmounts(2977, 2977)}

    def test_invalid_position_fails_before_aggregation(self):
        positions = [
            Position(OWNER_A, -60, 60, LIQUIDITY),
            Position(OWNER_B, 60, -60, LIQUIDITY),
        ]
        with pytest.raises(InvalidPosition):
            aggregate_by_owner(positions, 0)

    def test_tick_out_of_range(self):
        with pytest.raises(TickOutOfRange):
            aggregate_by_owner([Position(OWNER_A, -887273, 60, 1)], 0)

    def test_empty(self):
        assert aggregate_by_owner([], 0) == {}


class TestBatching:
    """배치 합산 테스트"""

    POSITIONS = [
        Position(OWNER_A, -60, 60, LIQUIDITY),
        Position(OWNER_B, -120, 120, 3 * LIQUIDITY),
        Position(OWNER_A, -600, 60, 7 * LIQUIDITY),
        Position(OWNER_B.lower(), 60, 600, LIQUIDITY),
        Position(OWNER_A, -600, -60, 2 * LIQUIDITY),
    ]

    @pytest.mark.parametrize("batch_size", [1, 2, 3, 100])
    def test_matches_unbatched(self, batch_size):
        expected = aggregate_by_owner(self.POSITIONS, 0, active_only=False)
        assert aggregate_in_batches(self.POSITIONS, 0, False, batch_size) == expected

    def test_merge_is_order_independent(self):
        first = aggregate_by_owner(self.POSITIONS[:2], 0, False)
        second = aggregate_by_owner(self.POSITIONS[2:], 0, False)
        assert merge_owner_totals(first, second) == merge_owner_totals(second, first)

    def test_merge_does_not_mutate_partials(self):
        first = {OWNER_A: OwnerAmounts(1, 2)}
        merge_owner_totals(first, {OWNER_A: OwnerAmounts(3, 4)})
        assert first == {OWNER_A: OwnerAmounts(1, 2)}

    @pytest.mark.parametrize("batch_size", [0, -1])
    def test_invalid_batch_size(self, batch_size):
        """명시적인 0 이하 배치 크기는 기본값으로 대체하지 않음"""
        with pytest.raises(ValueError):
            aggregate_in_batches(self.POSITIONS, 0, True, batch_size)

    def test_default_batch_size_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "POSITION_BATCH_SIZE", 2)
        expected = aggregate_by_owner(self.POSITIONS, 0, active_only=False)
        assert aggregate_in_batches(self.POSITIONS, 0, False) == expected

    def test_invalid_position_in_later_batch(self):
        positions = self.POSITIONS + [Position(OWNER_A, 0, 0, 1)]
        with pytest.raises(InvalidPosition):
            aggregate_in_batches(positions, 0, True, 2)


class TestPositionComposition:
    """position_composition 테스트"""

    SNAPSHOT = PoolSnapshot(current_tick=0, token0_decimals=3, token1_decimals=3)

    def test_format(self):
        totals = {OWNER_A: OwnerAmounts(2995, 2995)}
        assert format_composition(totals, 3, 6) == {
            OWNER_A: {"token0Amount": "2.995", "token1Amount": "0.002995"},
        }

    def test_composition(self):
        positions = [
            Position(OWNER_A.lower(), -60, 60, LIQUIDITY),
            Position(OWNER_B, 120, 180, LIQUIDITY),
        ]
        assert position_composition(self.SNAPSHOT, positions, active_only=True) == {
            OWNER_A: {"token0Amount": "2.995", "token1Amount": "2.995"},
        }
        assert position_composition(self.SNAPSHOT, positions, active_only=False) == {
            OWNER_A: {"token0Amount": "2.995", "token1Amount": "2.995"},
            OWNER_B: {"token0Amount": "2.977", "token1Amount": "0.0"},
        }

    def test_default_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "ACTIVE_ONLY", False)
        positions = [Position(OWNER_B, 120, 180, LIQUIDITY)]
        assert OWNER_B in position_composition(self.SNAPSHOT, positions)

    def test_logs_summary(self, caplog):
        with caplog.at_level(logging.INFO, logger="v3_positions.snapshot.composition"):
            position_composition(self.SNAPSHOT, [Position(OWNER_A, -60, 60, LIQUIDITY)], True)
        assert "1 positions -> 1 providers" in caplog.text
