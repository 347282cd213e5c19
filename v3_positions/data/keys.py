"""
주소 정규화 및 포지션 키

소유자 주소는 EIP-55 체크섬 형식으로 정규화하여 집계 키로 사용합니다.
"""

from eth_utils import to_checksum_address

from ..constants import UINT24_MASK


def normalize_address(address: str) -> str:
    """주소를 EIP-55 체크섬 형식으로 정규화

    대소문자만 다른 주소는 같은 키가 됩니다.

    Raises:
        ValueError: 20바이트 16진 주소가 아닌 경우
    """
    return to_checksum_address(address.strip())


def position_key(owner: str, tick_lower: int, tick_upper: int) -> str:
    """풀 컨트랙트의 positions() 조회 키 (bytes32 16진 문자열)

    key = ((owner << 24 | uint24(tick_lower)) << 24) | uint24(tick_upper)

    음수 틱은 24비트 2의 보수로 마스킹합니다.
    """
    owner_int = int(normalize_address(owner), 16)
    key = ((owner_int << 24) | (tick_lower & UINT24_MASK)) << 24
    key |= tick_upper & UINT24_MASK
    return "0x" + format(key, "064x")
