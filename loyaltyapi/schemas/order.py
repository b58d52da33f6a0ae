from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from loyaltyapi.schemas.common import Points


class Order(BaseModel):
    """주문 (내부 표현)"""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="주문 ID")
    number: str = Field(..., description="주문 번호")
    user_id: int = Field(..., description="소유 사용자 ID")
    status: str = Field(..., description="처리 상태")
    accrual: Optional[Points] = Field(None, description="적립 포인트")
    uploaded_at: datetime = Field(..., description="업로드 시각")


class OrderResponse(BaseModel):
    """주문 목록 응답 항목"""

    model_config = ConfigDict(from_attributes=True)

    number: str
    status: str
    accrual: Optional[Points] = None
    uploaded_at: datetime
