from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SettingsSchema:
    # ===== 入力 =====
    INPUT_ENCODING: Optional[str] = None
    IGNORE_UNPARSEABLE: bool = False
    REGEX_TEMPLATE: bool = False
    TIMEZONE: str = "Asia/Tokyo"
    EPOCH_JITTER_RANGE: int = 60

    # ===== 出力 =====
    OUTPUT_SUFFIX: str = ".txt"
    PADDING_DIGITS: int = 2

    # ===== ワーカー / ログ =====
    LAUNCH_INTERVAL: float = 0.1
    LOG_QUEUE_SIZE: int = 10
    LOG_INTERVAL: float = 0.0
    SHOW_PROGRESS: bool = True

    # ===== 乱数 =====
    SEED: Optional[int] = None
