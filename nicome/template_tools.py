import re
from dataclasses import dataclass

from .errors import (
    MissingCommentPlaceholder,
    MissingTimePlaceholder,
    PatternCompileFailed,
)

TIME_TOKEN = "TIME["
COMMENT_TOKEN = "COMMENT"
CAPTURE_GROUP = "(.+?)"


@dataclass(frozen=True)
class CompiledTemplate:
    pattern: re.Pattern
    time_format: str
    time_first: bool
    regex: bool = False

    def match(self, line):
        """
        1行に適用し、(時刻文字列, コメント文字列) を返します。マッチしなければ None。
        """
        if self.regex:
            m = self.pattern.search(line)
        else:
            m = self.pattern.fullmatch(line)
        # regex モードでは参加しなかったグループが None になる
        if m is None or len(m.groups()) != 2 or None in m.groups():
            return None
        if self.time_first:
            return m.group(1), m.group(2)
        return m.group(2), m.group(1)


def scan_time_placeholder(template):
    """
    テンプレートから TIME[...] トークンを探します。

    ブラケット内のバックスラッシュは次の1文字をエスケープし、書式文字列からは取り除かれます。

    引数:
    template (str): ユーザーが入力したテンプレート。

    戻り値:
    tuple: (トークン開始位置, トークン終了位置, 時刻書式文字列)
    """
    start = template.find(TIME_TOKEN)
    if start < 0:
        raise MissingTimePlaceholder(f"Unable to parse template: {template}")
    if template.find(TIME_TOKEN, start + 1) >= 0:
        raise MissingTimePlaceholder(
            f"Unable to parse template (more than one time placeholder): {template}"
        )

    i = start + len(TIME_TOKEN)
    buf = []
    while i < len(template):
        ch = template[i]
        if ch == "\\" and i + 1 < len(template):
            buf.append(template[i + 1])
            i += 2
            continue
        if ch == "]":
            break
        buf.append(ch)
        i += 1
    else:
        raise MissingTimePlaceholder(
            f"Unable to parse template (unbalanced brackets): {template}"
        )

    time_format = "".join(buf)
    if not time_format:
        raise MissingTimePlaceholder(
            f"Unable to parse template (empty time format): {template}"
        )
    return start, i + 1, time_format


def find_comment_placeholder(template, time_start, time_end):
    positions = []
    pos = template.find(COMMENT_TOKEN)
    while pos >= 0:
        # TIME[...] の内側は数えない
        if not time_start <= pos < time_end:
            positions.append(pos)
        pos = template.find(COMMENT_TOKEN, pos + 1)

    if len(positions) != 1:
        raise MissingCommentPlaceholder(
            f"Unable to parse template (expected one comment placeholder, found {len(positions)}): {template}"
        )
    return positions[0]


def compile_template(template, regex=False):
    """
    テンプレートを正規表現にコンパイルします。

    TIME[...] と COMMENT をそれぞれ非貪欲なキャプチャグループに置き換えます。
    regex=False の場合、それ以外の文字列はすべてエスケープされ、行全体にマッチさせます。
    regex=True の場合、それ以外の文字列は正規表現としてそのまま使われ、行の一部にマッチさせます。

    引数:
    template (str): "TIME[15:04:05] (x) COMMENT" のようなテンプレート。
    regex (bool): リテラル部分を正規表現として扱うかどうか。

    戻り値:
    CompiledTemplate: コンパイル済みパターン、時刻書式、グループ順序。
    """
    time_start, time_end, time_format = scan_time_placeholder(template)
    comment_start = find_comment_placeholder(template, time_start, time_end)
    comment_end = comment_start + len(COMMENT_TOKEN)
    time_first = comment_start > time_start

    spans = sorted([(time_start, time_end), (comment_start, comment_end)])
    literals = [
        template[: spans[0][0]],
        template[spans[0][1] : spans[1][0]],
        template[spans[1][1] :],
    ]
    if not regex:
        literals = [re.escape(s) for s in literals]
    source = literals[0] + CAPTURE_GROUP + literals[1] + CAPTURE_GROUP + literals[2]

    try:
        pattern = re.compile(source)
    except re.error as e:
        raise PatternCompileFailed(f"Unable to compile template: {template} ({e})") from e

    if pattern.groups != 2:
        raise PatternCompileFailed(
            f"Unable to compile template (expected 2 capture groups, got {pattern.groups}): {template}"
        )

    return CompiledTemplate(
        pattern=pattern, time_format=time_format, time_first=time_first, regex=regex
    )
