from dataclasses import dataclass

from .time_tools import whole_seconds

LETTERS = "0123456789"
COMMENT_FORMAT = '<chat user_id="a" date="1" no="{no}" vpos="{vpos}">{text}</chat>\r\n'


@dataclass(frozen=True)
class OutputRecord:
    no: int
    offset: int
    vpos: str
    text: str


def pad_vpos(vpos, rng, digits=2):
    """0 以外の vpos に乱数の数字を付け足し、同じ秒のコメントが重ならないようにします。"""
    if vpos == "0" or digits <= 0:
        return vpos
    picks = rng.integers(0, len(LETTERS), size=digits)
    return vpos + "".join(LETTERS[int(k)] for k in picks)


def encode_records(records, rng=None, padding_digits=2):
    """
    時刻順に並んだ CommentRecord を、先頭コメントからの相対秒数 (vpos) に変換します。

    引数:
    records (list): sort_records 済みの CommentRecord のリスト。
    rng (numpy.random.Generator): パディング用の乱数源。None のときはパディングしない。
    padding_digits (int): 0 以外の vpos に付け足す桁数。

    戻り値:
    list: OutputRecord のリスト。no は 1 から始まる連番。
    """
    outputs = []
    origin = None
    for no, record in enumerate(records, start=1):
        seconds = whole_seconds(record.instant)
        if origin is None:
            origin = seconds
        offset = seconds - origin
        vpos = str(offset)
        if rng is not None:
            vpos = pad_vpos(vpos, rng, padding_digits)
        outputs.append(OutputRecord(no=no, offset=offset, vpos=vpos, text=record.text))
    return outputs


def format_chat(record):
    return COMMENT_FORMAT.format(no=record.no, vpos=record.vpos, text=record.text)


def write_chats(path, outputs):
    # 1行ごとに flush し、途中で失敗しても書けた分は残す
    count = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        for record in outputs:
            f.write(format_chat(record))
            f.flush()
            count += 1
    return count
