from dataclasses import dataclass
from datetime import datetime

from .errors import LineMismatch, TimeDecodeFailed, TimeError
from .time_tools import decode_time


@dataclass(frozen=True)
class CommentRecord:
    instant: datetime
    text: str
    index: int


def parse_lines(
    lines,
    compiled,
    ignore_unparseable=False,
    path="",
    tz=None,
    rng=None,
    jitter_range=60,
):
    """
    コメントログの各行から (時刻, コメント) を取り出します。

    空行は常に読み飛ばします。テンプレートに合わない行は ignore_unparseable が True のときだけ
    読み飛ばし、それ以外はファイル全体を中断します。時刻の変換に失敗した行は常に中断します。

    引数:
    lines (list): 改行を取り除いた行のリスト。
    compiled (CompiledTemplate): コンパイル済みテンプレート。
    ignore_unparseable (bool): テンプレートに合わない行を読み飛ばすかどうか。
    path (str): エラーメッセージ用のファイルパス。

    戻り値:
    list: CommentRecord のリスト (ファイル内の出現順)。
    """
    records = []
    for i, line in enumerate(lines):
        if line == "":
            continue

        fields = compiled.match(line)
        if fields is None:
            if ignore_unparseable:
                continue
            raise LineMismatch(path, i + 1)

        time_text, comment_text = fields
        try:
            instant = decode_time(
                compiled.time_format,
                time_text,
                tz=tz,
                rng=rng,
                jitter_range=jitter_range,
            )
        except TimeError as e:
            raise TimeDecodeFailed(path, i + 1) from e

        records.append(CommentRecord(instant=instant, text=comment_text, index=i))
    return records


def sort_records(records):
    # 同時刻は元の行順を保つ
    return sorted(records, key=lambda r: (r.instant, r.index))
