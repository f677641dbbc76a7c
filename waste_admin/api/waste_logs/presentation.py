# waste_admin/api/waste_logs/presentation.py
"""표 렌더링용 순수 함수 모음 (상태 배지, 분리배출 결과 라벨)."""
from dataclasses import dataclass
from typing import Optional

_STATUS_VARIANTS = {
    "Analyzed": "info",
    "Collected": "success",
    "Pending": "warning",
}

@dataclass(frozen=True)
class StatusBadge:
    variant: str
    label: str

def classify_status(status: Optional[str]) -> StatusBadge:
    """알려진 상태는 고유 색상, 그 외(값 없음 포함)는 neutral 배지에 원래 문자열을 표시합니다."""
    label = status or ""
    return StatusBadge(variant=_STATUS_VARIANTS.get(label, "neutral"), label=label)

def disposal_label(sorted_correctly: bool) -> str:
    # 센서가 판정한 분리배출 결과
    return "Correct bin" if sorted_correctly else "Wrong bin"
