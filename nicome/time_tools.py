import re
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from .errors import InvalidEpoch, InvalidTimestamp

UNIXTIME = "UNIXTIME"
DEFAULT_TIMEZONE = "Asia/Tokyo"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

EPOCH_RE = re.compile(r"[+-]?\d+")
# ".000" / ",999" のような秒の小数部
FRACTION_RE = re.compile(r"[.,](0+|9+)(?![0-9])")

# 基準時刻 (Mon Jan 2 15:04:05 MST 2006) のレイアウト要素と strptime 指定子の対応。
# 長いものから順に照合する。
LAYOUT_TOKENS = (
    ("January", "%B"),
    ("Monday", "%A"),
    ("Z07:00", "%z"),
    ("-07:00", "%z"),
    ("Z0700", "%z"),
    ("-0700", "%z"),
    ("2006", "%Y"),
    ("Jan", "%b"),
    ("Mon", "%a"),
    ("MST", "%Z"),
    ("002", "%j"),
    ("-07", "%z"),
    ("01", "%m"),
    ("02", "%d"),
    ("03", "%I"),
    ("04", "%M"),
    ("05", "%S"),
    ("06", "%y"),
    ("15", "%H"),
    ("_2", "%d"),
    ("PM", "%p"),
    ("pm", "%p"),
    ("1", "%m"),
    ("2", "%d"),
    ("3", "%I"),
    ("4", "%M"),
    ("5", "%S"),
)


def layout_to_strptime(layout):
    """
    基準時刻レイアウト ("2006/01/02 15:04:05" など) を strptime 書式に変換します。

    "%" を含む書式は strptime 書式とみなしてそのまま返します。

    引数:
    layout (str): 時刻書式。

    戻り値:
    str: strptime 用の書式文字列。
    """
    if "%" in layout:
        return layout

    out = []
    i = 0
    while i < len(layout):
        m = FRACTION_RE.match(layout, i)
        if m:
            out.append(layout[i] + "%f")
            i = m.end()
            continue
        for token, directive in LAYOUT_TOKENS:
            if layout.startswith(token, i):
                out.append(directive)
                i += len(token)
                break
        else:
            out.append(layout[i])
            i += 1
    return "".join(out)


def get_timezone(name):
    if not name:
        return timezone.utc
    return ZoneInfo(name)


def decode_epoch(raw, rng=None, jitter_range=60):
    if not EPOCH_RE.fullmatch(raw):
        raise InvalidEpoch(f"Invalid epoch seconds: {raw!r}")

    # 同じ秒のコメントの順序付け用に、秒未満の揺らぎを加える
    jitter = int(rng.integers(0, jitter_range)) if rng is not None and jitter_range > 0 else 0
    try:
        return EPOCH + timedelta(seconds=int(raw), microseconds=jitter)
    except OverflowError as e:
        raise InvalidEpoch(f"Epoch seconds out of range: {raw!r}") from e


def decode_time(time_format, raw, tz=None, rng=None, jitter_range=60):
    """
    時刻文字列を時刻書式に従って timezone 付きの datetime に変換します。

    引数:
    time_format (str): "UNIXTIME" または時刻レイアウト。
    raw (str): 行から取り出した時刻文字列。
    tz (tzinfo): オフセットを含まない書式に使う基準タイムゾーン。
    rng (numpy.random.Generator): UNIXTIME の揺らぎに使う乱数源。
    jitter_range (int): 揺らぎの範囲 (マイクロ秒)。

    戻り値:
    datetime: 変換された時刻。
    """
    if time_format.upper() == UNIXTIME:
        return decode_epoch(raw, rng=rng, jitter_range=jitter_range)

    if tz is None:
        tz = get_timezone(DEFAULT_TIMEZONE)
    try:
        t = datetime.strptime(raw, layout_to_strptime(time_format))
    except ValueError as e:
        raise InvalidTimestamp(f"Invalid timestamp {raw!r} for format {time_format!r}") from e

    if t.tzinfo is None:
        t = t.replace(tzinfo=tz)
    return t


def whole_seconds(instant):
    """Unix エポックからの秒数 (切り捨て)。"""
    return (instant - EPOCH) // timedelta(seconds=1)
