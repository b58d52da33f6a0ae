from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from loyaltyapi.schemas.common import Points


class BalanceResponse(BaseModel):
    """포인트 잔액 응답"""

    model_config = ConfigDict(from_attributes=True)

    current: Points = Field(Decimal("0"), description="사용 가능한 포인트")
    withdrawn: Points = Field(Decimal("0"), description="누적 인출 포인트")
