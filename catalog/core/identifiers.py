"""
상품 식별자 변환

내부 숫자 키와 외부에 노출되는 문자열 식별자("prod_42")를 상호 변환합니다.
"""

import re

from catalog.core.exceptions import InvalidIdentifierException

PRODUCT_ID_PREFIX = "prod_"

# 키는 부호 있는 64비트 정수 범위
MAX_PRODUCT_KEY = 2**63 - 1

# "prod_" 접두사는 선택, 나머지는 ASCII 숫자만 허용
_IDENTIFIER_PATTERN = re.compile(rf"(?:{PRODUCT_ID_PREFIX})?([0-9]+)")


def encode_product_id(key: int) -> str:
    """내부 키를 외부 식별자로 변환합니다 (예: 42 -> "prod_42")."""
    return f"{PRODUCT_ID_PREFIX}{key}"


def decode_product_id(identifier: str) -> int:
    """
    외부 식별자를 내부 키로 변환합니다.

    "prod_42"와 같은 접두사 형식과 "42" 같은 숫자 문자열을 모두 허용합니다.

    Args:
        identifier: 외부 식별자 문자열

    Returns:
        내부 숫자 키

    Raises:
        InvalidIdentifierException: 빈 문자열, 숫자가 아닌 문자, 음수,
            키 범위를 넘는 값인 경우
    """
    match = _IDENTIFIER_PATTERN.fullmatch(identifier)
    if match is None:
        raise InvalidIdentifierException(identifier)

    key = int(match.group(1))
    if key > MAX_PRODUCT_KEY:
        raise InvalidIdentifierException(identifier)
    return key
