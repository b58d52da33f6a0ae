from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import PlainSerializer

# 포인트 금액 - 내부는 Decimal, JSON 응답은 숫자
Points = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]

# 저장 컬럼 Numeric(14, 2) 의 최소 단위
POINTS_QUANTUM = Decimal("0.01")


def to_points(amount) -> Decimal:
    """금액을 저장 정밀도(소수 둘째 자리)로 반올림

    양수 검증은 반드시 반올림 이후 값으로 해야 0.004 같은 금액이 0.00 으로 저장되지 않습니다.
    """
    return Decimal(str(amount)).quantize(POINTS_QUANTUM, rounding=ROUND_HALF_UP)
